"""Read-only registry of the specialist agents sitting in the parliament."""

import logging

from config.config_loader import AppConfig
from parliament.errors import ConfigurationError
from parliament.models import AgentProfile, AgentType

logger = logging.getLogger(__name__)


class AgentRegistry:
    """Fixed, ordered set of agent profiles and their attribution sources.

    Profiles are frozen dataclasses; the registry hands out copies of its
    lists so callers cannot reorder or extend the configured set.
    """

    def __init__(
        self,
        profiles: list[AgentProfile],
        data_sources: dict[AgentType, tuple[str, ...]],
    ) -> None:
        self._profiles = tuple(profiles)
        self._data_sources = dict(data_sources)
        for profile in self._profiles:
            if profile.agent_type not in self._data_sources:
                raise ConfigurationError(
                    f"No data sources configured for agent type '{profile.agent_type.value}'"
                )

    @classmethod
    def from_config(cls, config: AppConfig) -> "AgentRegistry":
        if not config.agents:
            raise ConfigurationError("No agents configured")
        logger.debug("Loaded %d agent profiles", len(config.agents))
        return cls(config.agents, config.data_sources)

    def get_agent_profiles(self) -> list[AgentProfile]:
        return list(self._profiles)

    def get_data_sources(self, agent_type: AgentType | str) -> tuple[str, ...]:
        """Return the attribution labels for an agent type.

        Raises:
            ConfigurationError: If the type is unknown or has no sources.
        """
        try:
            key = AgentType(agent_type)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown agent type: {agent_type!r}") from exc
        if key not in self._data_sources:
            raise ConfigurationError(f"No data sources configured for agent type '{key.value}'")
        return self._data_sources[key]
