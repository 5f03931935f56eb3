"""Anthropic Claude reasoner using anthropic SDK with native async."""

import asyncio
import logging
import os
import time
from typing import Any

import anthropic as anthropic_sdk

from config.config_loader import ReasonerConfig
from parliament.reasoners.base import (
    InvalidReasonerResponse,
    Reasoner,
    ReasonerTimeout,
    ReasonerUnavailable,
    render_context,
)

logger = logging.getLogger(__name__)


class AnthropicReasoner(Reasoner):
    """Anthropic Claude reasoner via anthropic SDK."""

    def __init__(self, config: ReasonerConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ReasonerUnavailable(config.name, f"Missing API key: {config.api_key_env}")
        self._client = anthropic_sdk.AsyncAnthropic(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    async def ask(
        self,
        system_instruction: str,
        structured_context: dict[str, Any],
        user_prompt: str,
    ) -> str:
        start = time.monotonic()
        content = f"{user_prompt}\n\nContext:\n{render_context(structured_context)}"
        try:
            response = await asyncio.wait_for(
                self._client.messages.create(
                    model=self._config.model,
                    max_tokens=self._config.max_tokens,
                    system=system_instruction,
                    messages=[{"role": "user", "content": content}],
                ),
                timeout=self._config.timeout_sec,
            )
        except (TimeoutError, asyncio.TimeoutError) as exc:
            raise ReasonerTimeout(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ReasonerUnavailable(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        text_blocks = [b.text for b in (response.content or []) if b.type == "text"]
        if not text_blocks:
            raise InvalidReasonerResponse(self._config.name, "No text blocks in response")

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.input_tokens + response.usage.output_tokens

        logger.info("Anthropic: %.2fs, %s tokens", latency, token_count)

        return "\n".join(text_blocks)
