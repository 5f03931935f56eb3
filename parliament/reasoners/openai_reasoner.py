"""OpenAI reasoner using openai SDK with native async.

Also serves OpenAI-compatible endpoints (e.g. xAI Grok) through base_url.
"""

import asyncio
import logging
import os
import time
from typing import Any

from openai import AsyncOpenAI

from config.config_loader import ReasonerConfig
from parliament.reasoners.base import (
    InvalidReasonerResponse,
    Reasoner,
    ReasonerTimeout,
    ReasonerUnavailable,
    render_context,
)

logger = logging.getLogger(__name__)


class OpenAIReasoner(Reasoner):
    """OpenAI (or OpenAI-compatible) reasoner via openai SDK."""

    def __init__(self, config: ReasonerConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ReasonerUnavailable(config.name, f"Missing API key: {config.api_key_env}")
        if config.base_url:
            self._client = AsyncOpenAI(api_key=api_key, base_url=config.base_url)
        else:
            self._client = AsyncOpenAI(api_key=api_key)

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
                self._client.chat.completions.create(
                    model=self._config.model,
                    messages=[
                        {"role": "system", "content": system_instruction},
                        {
                            "role": "user",
                            "content": f"{user_prompt}\n\nContext:\n{render_context(structured_context)}",
                        },
                    ],
                    max_tokens=self._config.max_tokens,
                ),
                timeout=self._config.timeout_sec,
            )
        except (TimeoutError, asyncio.TimeoutError) as exc:
            raise ReasonerTimeout(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ReasonerUnavailable(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message.content:
            raise InvalidReasonerResponse(self._config.name, "Empty response content")

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.total_tokens

        logger.info("OpenAI (%s): %.2fs, %s tokens", self._config.name, latency, token_count)

        return choice.message.content
