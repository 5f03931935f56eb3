"""Debate statements: one delegate attempt per agent per round, templated fallback."""

import logging
import random
from datetime import datetime, timezone

from config.config_loader import PromptsConfig
from parliament.delegate import call_reasoner, failure_log_level
from parliament.models import (
    ActionType,
    AgentProfile,
    AgentType,
    DebateContext,
    DebateEntry,
    SimulationResult,
)
from parliament.parsing import infer_position, parse_statement
from parliament.prompts import build_debate_prompt, system_instruction
from parliament.reasoners.base import Reasoner, ReasonerError

logger = logging.getLogger(__name__)

_DEBATE_TEMPLATES: dict[AgentType, tuple[str, ...]] = {
    AgentType.SCOUT: (
        "Opportunity analysis shows {signal}. Current market data from {source_0} "
        "indicates positive momentum.",
        "Market scanning reveals {strength} opportunity signals. TVL trends and protocol "
        "metrics support this assessment.",
    ),
    AgentType.RISK: (
        "Risk assessment identifies {exposure} exposure levels. Smart contract security "
        "verified via {source_2}. Recommend {advice}.",
        "Security analysis complete. Protocol audit status: {audit}. Liquidity risk: {liquidity}.",
    ),
    AgentType.EXECUTION: (
        "Execution feasibility: {feasibility}. Estimated gas: {gas}K gwei. MEV protection "
        "strategies available via {source_1}.",
        "Transaction analysis complete. Success probability: {success}%. "
        "Network conditions: {network}.",
    ),
    AgentType.META: (
        "Synthesizing agent inputs: Scout signals {scout_signal}, Risk flags {exposure} "
        "exposure. Weighted confidence: {meta_confidence}%.",
        "Cross-agent analysis shows {agreement}. Historical decision accuracy for similar "
        "proposals: {accuracy}%.",
    ),
}

# (scenario, outcome description)
_STRESS_SCENARIOS: tuple[tuple[str, str], ...] = (
    ("Flash Crash", "Portfolio loss: -15%"),
    ("Normal Volatility", "Portfolio drift: +/-3%"),
    ("High Growth", "Portfolio gain: +8%"),
)


def _source(sources: tuple[str, ...], index: int, default: str) -> str:
    return sources[index % len(sources)] if sources else default


def _either(rng: random.Random, first: str, second: str, threshold: float = 0.5) -> str:
    return first if rng.random() > threshold else second


def _fallback_statement(
    agent: AgentProfile,
    context: DebateContext,
    sources: tuple[str, ...],
    rng: random.Random,
) -> str:
    templates = _DEBATE_TEMPLATES[agent.agent_type]
    template = templates[rng.randrange(len(templates))]
    slots = {
        "signal": (
            "promising yield potential"
            if context.action_type == ActionType.YIELD_DEPLOYMENT
            else "favorable market conditions"
        ),
        "strength": _either(rng, "strong", "moderate"),
        "exposure": _either(rng, "acceptable", "elevated", threshold=0.6),
        "advice": _either(rng, "approval with monitoring", "caution"),
        "audit": _either(rng, "verified", "pending review"),
        "liquidity": _either(rng, "low", "moderate"),
        "feasibility": _either(rng, "high", "moderate"),
        "gas": rng.randint(100, 250),
        "success": rng.randint(75, 95),
        "network": _either(rng, "optimal", "acceptable"),
        "scout_signal": _either(rng, "opportunity", "caution"),
        "meta_confidence": rng.randint(65, 90),
        "agreement": _either(rng, "consensus", "divergence"),
        "accuracy": rng.randint(70, 90),
        "source_0": _source(sources, 0, agent.name),
        "source_1": _source(sources, 1, agent.name),
        "source_2": _source(sources, 2, agent.name),
    }
    return template.format(**slots)


def run_risk_simulation(rng: random.Random) -> SimulationResult:
    """Pick one stress scenario for a Risk agent's debate entry."""
    scenario, outcome = _STRESS_SCENARIOS[rng.randrange(len(_STRESS_SCENARIOS))]
    return SimulationResult(
        scenario_name=scenario,
        outcome=outcome,
        confidence=rng.randint(60, 90),
    )


async def generate_debate_entry(
    agent: AgentProfile,
    context: DebateContext,
    *,
    reasoner: Reasoner,
    prompts: PromptsConfig,
    data_sources: tuple[str, ...],
    rng: random.Random,
    timeout_sec: float,
    window: int = 3,
) -> DebateEntry:
    """Produce one debate statement for an agent.

    Makes exactly one reasoner call. Any reasoner failure, including output the
    parser rejects, falls through to a templated statement drawn from rng, so a
    well-formed entry is always returned. The context is read, never modified.

    Args:
        agent: Profile of the speaking agent.
        context: Proposal and debate history (only the trailing window is sent).
        reasoner: Delegate capability.
        prompts: Prompt templates.
        data_sources: Attribution labels for the agent's type.
        rng: Source of randomness for the fallback and risk simulation.
        timeout_sec: Budget for the reasoner call.
        window: How many trailing debate entries to include in the prompt.

    Returns:
        A new DebateEntry.
    """
    user_prompt, structured = build_debate_prompt(agent, context, prompts, data_sources, window)

    try:
        raw = await call_reasoner(
            reasoner,
            system_instruction(agent, prompts),
            structured,
            user_prompt,
            timeout_sec,
        )
        statement = parse_statement(raw)
        position = infer_position(statement, agent.agent_type)
        source = "reasoner"
    except ReasonerError as exc:
        logger.log(
            failure_log_level(reasoner),
            "Debate delegate failed for %s, using fallback: %s",
            agent.id,
            exc,
        )
        statement = _fallback_statement(agent, context, data_sources, rng)
        position = agent.default_position
        source = "fallback"

    simulation = run_risk_simulation(rng) if agent.agent_type == AgentType.RISK else None

    logger.debug("Debate entry from %s (%s, %s): %s", agent.id, position.value, source, statement)

    return DebateEntry(
        agent_id=agent.id,
        agent_type=agent.agent_type,
        position=position,
        statement=statement,
        data_sources=data_sources,
        simulation_results=simulation,
        timestamp=datetime.now(timezone.utc),
        source=source,
    )
