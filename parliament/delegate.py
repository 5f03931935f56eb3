"""The single, bounded, never-retried call out to a reasoner."""

import asyncio
import logging
from typing import Any

from parliament.reasoners.base import (
    NullReasoner,
    Reasoner,
    ReasonerError,
    ReasonerTimeout,
    ReasonerUnavailable,
)

logger = logging.getLogger(__name__)


def failure_log_level(reasoner: Reasoner) -> int:
    """Fallback is the normal path when no reasoner is configured."""
    return logging.DEBUG if isinstance(reasoner, NullReasoner) else logging.WARNING


async def call_reasoner(
    reasoner: Reasoner,
    system_instruction: str,
    structured_context: dict[str, Any],
    user_prompt: str,
    timeout_sec: float,
) -> str:
    """Ask the reasoner once within timeout_sec.

    Every failure is normalized into the ReasonerError family so callers have
    exactly one exception type to route to their fallback.

    Raises:
        ReasonerError: On timeout, transport failure, or any unexpected error.
    """
    try:
        return await asyncio.wait_for(
            reasoner.ask(system_instruction, structured_context, user_prompt),
            timeout=timeout_sec,
        )
    except ReasonerError:
        raise
    except (TimeoutError, asyncio.TimeoutError) as exc:
        raise ReasonerTimeout(reasoner.name(), f"Request timed out after {timeout_sec}s") from exc
    except Exception as exc:
        raise ReasonerUnavailable(reasoner.name(), f"Unexpected error: {exc}") from exc
