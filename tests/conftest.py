"""Shared pytest fixtures."""

import random
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DefaultsConfig, PromptsConfig, ReasonerConfig
from parliament.engine import ParliamentEngine
from parliament.models import (
    ActionType,
    AgentProfile,
    AgentType,
    CredibilitySnapshot,
    DebateContext,
    DebateEntry,
    ExpectedOutcome,
    Position,
    Vote,
    VoteChoice,
)
from parliament.reasoners.base import Reasoner
from parliament.registry import AgentRegistry

SAMPLE_DATA_SOURCES: dict[AgentType, tuple[str, ...]] = {
    AgentType.SCOUT: ("DefiLlama", "Dune Analytics", "Token Terminal"),
    AgentType.RISK: ("Nansen", "Chainalysis", "Certik"),
    AgentType.EXECUTION: ("Etherscan", "Flashbots", "Blocknative"),
    AgentType.META: ("All Agent Inputs", "Historical Decisions"),
}


def make_profile(
    agent_type: AgentType,
    agent_id: str | None = None,
    credit_score: float = 80,
    historical_accuracy: float = 0.8,
    default_position: Position = Position.CLARIFICATION,
) -> AgentProfile:
    return AgentProfile(
        id=agent_id or f"{agent_type.value}-001",
        agent_type=agent_type,
        name=f"{agent_type.value.title()} Agent",
        credit_score=credit_score,
        historical_accuracy=historical_accuracy,
        specialization=(f"{agent_type.value}_analysis",),
        default_position=default_position,
    )


def make_vote(
    agent_type: AgentType = AgentType.SCOUT,
    vote: VoteChoice = VoteChoice.APPROVE,
    confidence: int = 80,
    credit_score: float = 80,
    historical_accuracy: float = 0.8,
    risk_score: int | None = None,
    agent_id: str | None = None,
    alternatives: tuple[str, ...] = (),
    cons: tuple[str, ...] = (),
) -> Vote:
    outcome = None
    if risk_score is not None:
        outcome = ExpectedOutcome(return_percent=6.5, risk_score=risk_score, time_horizon="30 days", confidence=75)
    return Vote(
        agent_id=agent_id or f"{agent_type.value}-001",
        agent_type=agent_type,
        vote=vote,
        reasoning=f"{agent_type.value} reasoning",
        confidence=confidence,
        credibility=CredibilitySnapshot(credit_score=credit_score, historical_accuracy=historical_accuracy),
        expected_outcome=outcome,
        alternative_suggestions=alternatives,
        cons=cons,
    )


def make_entry(agent_type: AgentType, statement: str, position: Position = Position.CLARIFICATION) -> DebateEntry:
    return DebateEntry(
        agent_id=f"{agent_type.value}-001",
        agent_type=agent_type,
        position=position,
        statement=statement,
        data_sources=SAMPLE_DATA_SOURCES[agent_type],
    )


class FakeReasoner(Reasoner):
    """Test double Reasoner."""

    def __init__(self, reasoner_name: str = "fake", response_text: str = "Fake response") -> None:
        self._name = reasoner_name
        self._response_text = response_text
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because ask is defined in the class body below.
        self.ask = AsyncMock(return_value=response_text)  # type: ignore[assignment]

    def name(self) -> str:
        return self._name

    async def ask(  # type: ignore[override]
        self,
        system_instruction: str,
        structured_context: dict[str, Any],
        user_prompt: str,
    ) -> str:
        """Default implementation; replaced by AsyncMock in __init__."""
        return self._response_text


@pytest.fixture
def sample_reasoner_config() -> ReasonerConfig:
    return ReasonerConfig(
        name="test_reasoner",
        sdk="test",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=1024,
        base_url=None,
    )


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        debate=(
            "{agent_name} on {topic} ({action_type}). {description}\n"
            "Specialization: {specialization}. Sources: {data_sources}\n"
            "Previous:\n{previous_debates}"
        ),
        vote="{agent_name} votes on {topic} ({action_type}). {description}\nDebate:\n{debate_summary}",
        instructions={"risk": "You are the Risk Agent."},
    )


@pytest.fixture
def sample_profiles() -> list[AgentProfile]:
    return [
        make_profile(AgentType.SCOUT, "scout-001", 85, 0.82, Position.FOR),
        make_profile(AgentType.RISK, "risk-001", 90, 0.88, Position.AGAINST),
        make_profile(AgentType.EXECUTION, "exec-001", 88, 0.85, Position.CLARIFICATION),
        make_profile(AgentType.META, "meta-001", 92, 0.90, Position.CLARIFICATION),
    ]


@pytest.fixture
def sample_registry(sample_profiles: list[AgentProfile]) -> AgentRegistry:
    return AgentRegistry(sample_profiles, SAMPLE_DATA_SOURCES)


@pytest.fixture
def sample_defaults_config(tmp_path: Path) -> DefaultsConfig:
    return DefaultsConfig(
        rounds=2,
        quorum=4,
        required_majority=60,
        output_dir=tmp_path / "output",
        delegate_timeout_sec=5.0,
    )


@pytest.fixture
def sample_app_config(
    sample_defaults_config: DefaultsConfig,
    sample_prompts_config: PromptsConfig,
    sample_profiles: list[AgentProfile],
) -> AppConfig:
    reasoner_cfg = ReasonerConfig(
        name="claude",
        sdk="anthropic",
        model="claude-sonnet-4-5",
        api_key_env="ANTHROPIC_API_KEY",
        timeout_sec=60,
        max_tokens=1024,
    )
    return AppConfig(
        defaults=sample_defaults_config,
        reasoners={"claude": reasoner_cfg},
        prompts=sample_prompts_config,
        agents=sample_profiles,
        data_sources=dict(SAMPLE_DATA_SOURCES),
        available_reasoners=set(),
    )


@pytest.fixture
def sample_context() -> DebateContext:
    return DebateContext(
        topic="Deploy 20% of treasury into Aave v3 USDC market",
        description="Move idle stablecoins into a lending market for yield.",
        action_type=ActionType.YIELD_DEPLOYMENT,
        proposal_data={"amount_usd": 2_000_000, "protocol": "aave-v3"},
    )


@pytest.fixture
def seeded_engine(sample_registry: AgentRegistry, sample_prompts_config: PromptsConfig) -> ParliamentEngine:
    return ParliamentEngine(sample_registry, sample_prompts_config, rng=random.Random(42), delegate_timeout_sec=5.0)


@pytest.fixture
def fake_reasoner() -> FakeReasoner:
    return FakeReasoner()
