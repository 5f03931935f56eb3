"""Gemini reasoner using google-genai SDK with native async."""

import asyncio
import logging
import os
import time
from typing import Any

from google import genai
from google.genai import types as genai_types

from config.config_loader import ReasonerConfig
from parliament.reasoners.base import (
    InvalidReasonerResponse,
    Reasoner,
    ReasonerTimeout,
    ReasonerUnavailable,
    render_context,
)

logger = logging.getLogger(__name__)


class GeminiReasoner(Reasoner):
    """Google Gemini reasoner via google-genai SDK."""

    def __init__(self, config: ReasonerConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ReasonerUnavailable(config.name, f"Missing API key: {config.api_key_env}")
        self._client = genai.Client(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    async def ask(
        self,
        system_instruction: str,
        structured_context: dict[str, Any],
        user_prompt: str,
    ) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._config.model,
                    contents=f"{user_prompt}\n\nContext:\n{render_context(structured_context)}",
                    config=genai_types.GenerateContentConfig(
                        system_instruction=system_instruction,
                        max_output_tokens=self._config.max_tokens,
                    ),
                ),
                timeout=self._config.timeout_sec,
            )
        except (TimeoutError, asyncio.TimeoutError) as exc:
            raise ReasonerTimeout(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ReasonerUnavailable(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        if not response.text:
            raise InvalidReasonerResponse(self._config.name, "Empty response text")

        token_count: int | None = None
        if response.usage_metadata:
            token_count = response.usage_metadata.total_token_count

        logger.info("Gemini: %.2fs, %s tokens", latency, token_count)

        return response.text
