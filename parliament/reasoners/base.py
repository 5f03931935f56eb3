"""Abstract base for the text-generation capability agents delegate to."""

import json
from abc import ABC, abstractmethod
from typing import Any


class ReasonerError(Exception):
    """Raised when a reasoner call fails."""

    def __init__(self, reasoner_name: str, message: str) -> None:
        self.reasoner_name = reasoner_name
        super().__init__(f"[{reasoner_name}] {message}")


class ReasonerUnavailable(ReasonerError):
    """No reasoner configured, missing credentials, or transport failure."""


class ReasonerTimeout(ReasonerError):
    """The call did not complete within its time budget."""


class InvalidReasonerResponse(ReasonerError):
    """The reasoner answered, but the text cannot be used."""


def render_context(structured_context: dict[str, Any]) -> str:
    """Serialize the structured context block appended to user prompts."""
    return json.dumps(structured_context, indent=2, default=str, ensure_ascii=False)


class Reasoner(ABC):
    """Abstract base for all reasoners."""

    @abstractmethod
    def name(self) -> str:
        """Return the short reasoner name (e.g. 'claude', 'none')."""
        ...

    @abstractmethod
    async def ask(
        self,
        system_instruction: str,
        structured_context: dict[str, Any],
        user_prompt: str,
    ) -> str:
        """Generate text for the given instruction, context and prompt.

        Args:
            system_instruction: Role instructions for the agent.
            structured_context: JSON-serializable facts about the proposal.
            user_prompt: The task prompt.

        Returns:
            The raw response text.

        Raises:
            ReasonerError: On unavailability, timeout, or invalid response.
        """
        ...


class NullReasoner(Reasoner):
    """Reasoner used when none is configured. Every call is unavailable."""

    def name(self) -> str:
        return "none"

    async def ask(
        self,
        system_instruction: str,
        structured_context: dict[str, Any],
        user_prompt: str,
    ) -> str:
        raise ReasonerUnavailable(self.name(), "No reasoner configured")
