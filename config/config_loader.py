"""Load settings.yaml into typed dataclasses. Validates agent profiles at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from parliament.errors import ConfigurationError
from parliament.models import AgentProfile, AgentType, Position

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class ReasonerConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    base_url: str | None = None


@dataclass
class PromptsConfig:
    debate: str
    vote: str
    instructions: dict[str, str] = field(default_factory=dict)


@dataclass
class DefaultsConfig:
    rounds: int
    quorum: int
    required_majority: float
    output_dir: Path
    reasoner: str = "none"
    max_rounds: int = 5
    delegate_timeout_sec: float = 45.0
    debate_window: int = 3
    redebate_rounds: int = 0


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    reasoners: dict[str, ReasonerConfig]
    prompts: PromptsConfig
    agents: list[AgentProfile]
    data_sources: dict[AgentType, tuple[str, ...]]
    available_reasoners: set[str] = field(default_factory=set)


def _agent_type(value: Any) -> AgentType:
    try:
        return AgentType(str(value).lower())
    except ValueError as exc:
        raise ConfigurationError(f"Unknown agent type: {value!r}") from exc


def _parse_agent(raw: dict[str, Any]) -> AgentProfile:
    try:
        agent_id = str(raw["id"])
        agent_type = _agent_type(raw["type"])
        credit_score = float(raw["credit_score"])
        historical_accuracy = float(raw["historical_accuracy"])
        default_position = Position(str(raw.get("default_position", "clarification")))
    except KeyError as exc:
        raise ConfigurationError(f"Agent entry missing field {exc}: {raw!r}") from exc
    except ValueError as exc:
        raise ConfigurationError(f"Invalid agent entry {raw!r}: {exc}") from exc

    if not 0 <= credit_score <= 100:
        raise ConfigurationError(f"Agent {agent_id}: credit_score {credit_score} outside [0, 100]")
    if not 0 <= historical_accuracy <= 1:
        raise ConfigurationError(
            f"Agent {agent_id}: historical_accuracy {historical_accuracy} outside [0, 1]"
        )

    return AgentProfile(
        id=agent_id,
        agent_type=agent_type,
        name=str(raw.get("name", agent_id)),
        credit_score=credit_score,
        historical_accuracy=historical_accuracy,
        specialization=tuple(str(s) for s in raw.get("specialization", [])),
        default_position=default_position,
    )


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ConfigurationError if an
    agent profile or data source entry is malformed.
    Logs missing reasoner API keys but does not raise; callers check
    available_reasoners.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    defaults = DefaultsConfig(
        rounds=int(defaults_raw["rounds"]),
        quorum=int(defaults_raw["quorum"]),
        required_majority=float(defaults_raw["required_majority"]),
        output_dir=Path(defaults_raw["output_dir"]),
        reasoner=str(defaults_raw.get("reasoner", "none")),
        max_rounds=int(defaults_raw.get("max_rounds", 5)),
        delegate_timeout_sec=float(defaults_raw.get("delegate_timeout_sec", 45)),
        debate_window=int(defaults_raw.get("debate_window", 3)),
        redebate_rounds=int(defaults_raw.get("redebate_rounds", 0)),
    )

    prompts_raw = raw["prompts"]
    prompts = PromptsConfig(
        debate=prompts_raw["debate"],
        vote=prompts_raw["vote"],
        instructions={
            _agent_type(k).value: str(v)
            for k, v in prompts_raw.get("instructions", {}).items()
        },
    )

    agents = [_parse_agent(a) for a in raw.get("agents", [])]
    seen_ids: set[str] = set()
    for agent in agents:
        if agent.id in seen_ids:
            raise ConfigurationError(f"Duplicate agent id: {agent.id}")
        seen_ids.add(agent.id)

    data_sources = {
        _agent_type(k): tuple(str(s) for s in v)
        for k, v in raw.get("data_sources", {}).items()
    }

    reasoners: dict[str, ReasonerConfig] = {}
    available_reasoners: set[str] = set()

    for reasoner_name, model_raw in (raw.get("reasoners") or {}).items():
        reasoner_cfg = ReasonerConfig(
            name=reasoner_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            base_url=model_raw.get("base_url"),
        )
        reasoners[reasoner_name] = reasoner_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_reasoners.add(reasoner_name)
            logger.info("Reasoner available: %s", reasoner_name)
        else:
            logger.info(
                "Reasoner skipped (no API key): %s, set %s in .env",
                reasoner_name,
                model_raw["api_key_env"],
            )

    return AppConfig(
        defaults=defaults,
        reasoners=reasoners,
        prompts=prompts,
        agents=agents,
        data_sources=data_sources,
        available_reasoners=available_reasoners,
    )
