"""Votes: one delegate attempt per agent, seeded fallback, always-computed outcome estimate."""

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone

from config.config_loader import PromptsConfig
from parliament.delegate import call_reasoner, failure_log_level
from parliament.models import (
    ActionType,
    AgentProfile,
    AgentType,
    CredibilitySnapshot,
    DebateContext,
    ExpectedOutcome,
    Vote,
    VoteChoice,
)
from parliament.parsing import ParsedVote, parse_vote
from parliament.prompts import build_vote_prompt, system_instruction
from parliament.reasoners.base import Reasoner, ReasonerError

logger = logging.getLogger(__name__)

_CHOICES = (VoteChoice.APPROVE, VoteChoice.REJECT, VoteChoice.ABSTAIN)

# Probabilities in _CHOICES order.
VOTE_DISTRIBUTION: dict[AgentType, tuple[float, float, float]] = {
    AgentType.SCOUT: (0.6, 0.2, 0.2),
    AgentType.RISK: (0.3, 0.5, 0.2),
    AgentType.EXECUTION: (0.5, 0.3, 0.2),
    AgentType.META: (0.4, 0.3, 0.3),
}

# Inclusive bounds for fallback confidence.
CONFIDENCE_RANGE: dict[AgentType, tuple[int, int]] = {
    AgentType.SCOUT: (65, 94),
    AgentType.RISK: (60, 94),
    AgentType.EXECUTION: (60, 90),
    AgentType.META: (55, 85),
}

_PROS: dict[AgentType, tuple[str, ...]] = {
    AgentType.SCOUT: ("Strong yield opportunity", "Favorable market conditions", "Growing protocol TVL"),
    AgentType.RISK: ("Audited smart contracts", "Sufficient liquidity", "Historical stability"),
    AgentType.EXECUTION: ("Low gas environment", "MEV protection available", "High success probability"),
    AgentType.META: ("Agent consensus forming", "Aligns with strategy", "Acceptable risk/reward"),
}

_CONS: dict[AgentType, tuple[str, ...]] = {
    AgentType.SCOUT: ("Market volatility", "Competition from alternatives", "Yield sustainability uncertain"),
    AgentType.RISK: ("Smart contract risk", "Liquidity concerns", "Counterparty exposure"),
    AgentType.EXECUTION: ("Network congestion possible", "Slippage risk", "Timing sensitivity"),
    AgentType.META: ("Agent disagreement", "Historical underperformance", "Strategy misalignment"),
}

_ALTERNATIVES: dict[AgentType, tuple[str, ...]] = {
    AgentType.SCOUT: ("Consider alternative yield sources", "Wait for better market entry"),
    AgentType.RISK: ("Reduce position size by 50%", "Add stop-loss mechanism", "Require additional audit"),
    AgentType.EXECUTION: ("Schedule during lower gas periods", "Split into smaller transactions"),
    AgentType.META: ("Request additional agent analysis", "Defer to human review"),
}


@dataclass(frozen=True)
class ActionProfile:
    base_return: float     # percent
    base_risk: int         # 0-100
    time_horizon: str


ACTION_PROFILES: dict[ActionType, ActionProfile] = {
    ActionType.YIELD_DEPLOYMENT: ActionProfile(5.0, 25, "30 days"),
    ActionType.RISK_REBALANCE: ActionProfile(2.0, 15, "7 days"),
    ActionType.PROTOCOL_ROTATION: ActionProfile(3.0, 30, "14 days"),
    ActionType.GOVERNANCE: ActionProfile(1.0, 10, "30 days"),
    ActionType.EMERGENCY: ActionProfile(0.0, 45, "1 day"),
}

AGENT_RISK_BIAS: dict[AgentType, int] = {
    AgentType.SCOUT: -5,
    AgentType.RISK: 10,
    AgentType.EXECUTION: 0,
    AgentType.META: 0,
}

_RETURN_SPREAD = 8.0
_RISK_SPREAD = 30.0


def expected_outcome_for(agent: AgentProfile, action_type: ActionType, rng: random.Random) -> ExpectedOutcome:
    """Estimate return and risk from the action category and the agent's risk bias."""
    profile = ACTION_PROFILES[action_type]
    risk = profile.base_risk + AGENT_RISK_BIAS[agent.agent_type] + rng.uniform(0, _RISK_SPREAD)
    return ExpectedOutcome(
        return_percent=round(profile.base_return + rng.uniform(0, _RETURN_SPREAD), 1),
        risk_score=min(100, max(0, round(risk))),
        time_horizon=profile.time_horizon,
        confidence=round(60 + rng.uniform(0, 30)),
    )


def alternatives_for(agent: AgentProfile, vote: VoteChoice) -> tuple[str, ...]:
    if vote == VoteChoice.APPROVE:
        return ()
    return _ALTERNATIVES[agent.agent_type]


def _draw(pool: tuple[str, ...], rng: random.Random) -> tuple[str, ...]:
    """Draw one or two distinct items from a pool."""
    count = min(len(pool), rng.randint(1, 2))
    return tuple(rng.sample(pool, count))


def _fallback_vote(agent: AgentProfile, sources: tuple[str, ...], rng: random.Random) -> ParsedVote:
    choice = rng.choices(_CHOICES, weights=VOTE_DISTRIBUTION[agent.agent_type])[0]
    low, high = CONFIDENCE_RANGE[agent.agent_type]
    focus = agent.specialization[0] if agent.specialization else agent.agent_type.value
    source = sources[0] if sources else "internal models"
    return ParsedVote(
        vote=choice,
        confidence=rng.randint(low, high),
        reasoning=(
            f"Based on {focus} analysis using {source}, I cast {choice.value} "
            f"with considerations for both opportunities and risks."
        ),
        pros=_draw(_PROS[agent.agent_type], rng),
        cons=_draw(_CONS[agent.agent_type], rng),
    )


async def generate_vote(
    agent: AgentProfile,
    context: DebateContext,
    *,
    reasoner: Reasoner,
    prompts: PromptsConfig,
    data_sources: tuple[str, ...],
    rng: random.Random,
    timeout_sec: float,
) -> Vote:
    """Produce one vote for an agent over the full debate history.

    Exactly one reasoner call; any failure (including unparseable output)
    uses the per-type fallback distribution. The expected outcome and the
    alternatives are computed the same way on both paths, and the vote
    carries a snapshot of the agent's credibility at this moment.
    """
    user_prompt, structured = build_vote_prompt(agent, context, prompts)

    try:
        raw = await call_reasoner(
            reasoner,
            system_instruction(agent, prompts),
            structured,
            user_prompt,
            timeout_sec,
        )
        parsed = parse_vote(raw)
        # Delegates often omit pros or cons; keep both lists within 1-2 items.
        parsed = ParsedVote(
            vote=parsed.vote,
            confidence=parsed.confidence,
            reasoning=parsed.reasoning,
            pros=parsed.pros or _draw(_PROS[agent.agent_type], rng),
            cons=parsed.cons or _draw(_CONS[agent.agent_type], rng),
        )
        source = "reasoner"
    except ReasonerError as exc:
        logger.log(
            failure_log_level(reasoner),
            "Vote delegate failed for %s, using fallback: %s",
            agent.id,
            exc,
        )
        parsed = _fallback_vote(agent, data_sources, rng)
        source = "fallback"

    vote = Vote(
        agent_id=agent.id,
        agent_type=agent.agent_type,
        vote=parsed.vote,
        reasoning=parsed.reasoning,
        confidence=parsed.confidence,
        credibility=CredibilitySnapshot(
            credit_score=agent.credit_score,
            historical_accuracy=agent.historical_accuracy,
        ),
        expected_outcome=expected_outcome_for(agent, context.action_type, rng),
        alternative_suggestions=alternatives_for(agent, parsed.vote),
        pros=parsed.pros,
        cons=parsed.cons,
        data_sources_used=data_sources,
        timestamp=datetime.now(timezone.utc),
        source=source,
    )
    logger.info("%s voted %s (%d%%, %s)", agent.id, vote.vote.value, vote.confidence, source)
    return vote
