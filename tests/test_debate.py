"""Tests for parliament/debate.py."""

import asyncio
import logging
import random
from unittest.mock import AsyncMock

import pytest

from parliament.debate import _STRESS_SCENARIOS, _fallback_statement, generate_debate_entry, run_risk_simulation
from parliament.models import AgentType, Position
from parliament.reasoners.base import InvalidReasonerResponse, NullReasoner
from tests.conftest import SAMPLE_DATA_SOURCES, FakeReasoner, make_entry


async def _entry(agent, context, prompts, reasoner, seed=7, timeout_sec=5.0, window=3):
    return await generate_debate_entry(
        agent,
        context,
        reasoner=reasoner,
        prompts=prompts,
        data_sources=SAMPLE_DATA_SOURCES[agent.agent_type],
        rng=random.Random(seed),
        timeout_sec=timeout_sec,
        window=window,
    )


async def test_fallback_with_null_reasoner(sample_profiles, sample_context, sample_prompts_config):
    for agent in sample_profiles:
        entry = await _entry(agent, sample_context, sample_prompts_config, NullReasoner())
        assert entry.source == "fallback"
        assert entry.position == agent.default_position
        assert entry.statement
        assert "{" not in entry.statement
        assert entry.data_sources == SAMPLE_DATA_SOURCES[agent.agent_type]
        assert entry.agent_id == agent.id


async def test_null_reasoner_fallback_logs_at_debug(sample_profiles, sample_context, sample_prompts_config, caplog):
    with caplog.at_level(logging.DEBUG, logger="parliament.debate"):
        await _entry(sample_profiles[0], sample_context, sample_prompts_config, NullReasoner())
    records = [r for r in caplog.records if "using fallback" in r.getMessage()]
    assert records and all(r.levelno == logging.DEBUG for r in records)


async def test_only_risk_agent_gets_simulation(sample_profiles, sample_context, sample_prompts_config):
    for agent in sample_profiles:
        entry = await _entry(agent, sample_context, sample_prompts_config, NullReasoner())
        if agent.agent_type == AgentType.RISK:
            assert entry.simulation_results is not None
        else:
            assert entry.simulation_results is None


async def test_reasoner_statement_used(sample_profiles, sample_context, sample_prompts_config):
    reasoner = FakeReasoner(response_text="I support this opportunity; TVL keeps growing.")
    entry = await _entry(sample_profiles[2], sample_context, sample_prompts_config, reasoner)
    assert entry.source == "reasoner"
    assert entry.statement == "I support this opportunity; TVL keeps growing."
    assert entry.position == Position.FOR
    reasoner.ask.assert_awaited_once()


async def test_risk_reasoner_statement_still_simulated(sample_profiles, sample_context, sample_prompts_config):
    reasoner = FakeReasoner(response_text="Caution: oracle risk is elevated.")
    entry = await _entry(sample_profiles[1], sample_context, sample_prompts_config, reasoner)
    assert entry.source == "reasoner"
    assert entry.position == Position.AGAINST
    assert entry.simulation_results is not None


async def test_reasoner_receives_instruction_and_window(sample_profiles, sample_context, sample_prompts_config):
    sample_context.previous_debates.extend(make_entry(AgentType.META, f"point {i}") for i in range(5))
    reasoner = FakeReasoner(response_text="Neutral observation.")
    await _entry(sample_profiles[1], sample_context, sample_prompts_config, reasoner, window=3)
    system_instruction, structured, prompt = reasoner.ask.await_args.args
    assert system_instruction == "You are the Risk Agent."
    assert [d["statement"] for d in structured["previousDebates"]] == ["point 2", "point 3", "point 4"]
    assert "point 0" not in prompt
    assert structured["proposalData"] == sample_context.proposal_data


@pytest.mark.parametrize(
    "side_effect",
    [RuntimeError("socket closed"), InvalidReasonerResponse("fake", "garbage")],
)
async def test_reasoner_failure_falls_back(sample_profiles, sample_context, sample_prompts_config, side_effect):
    reasoner = FakeReasoner()
    reasoner.ask = AsyncMock(side_effect=side_effect)
    entry = await _entry(sample_profiles[0], sample_context, sample_prompts_config, reasoner)
    assert entry.source == "fallback"
    assert entry.position == Position.FOR
    reasoner.ask.assert_awaited_once()


async def test_unparseable_reasoner_output_falls_back(sample_profiles, sample_context, sample_prompts_config):
    reasoner = FakeReasoner(response_text="   ")
    entry = await _entry(sample_profiles[3], sample_context, sample_prompts_config, reasoner)
    assert entry.source == "fallback"


async def test_reasoner_timeout_falls_back(sample_profiles, sample_context, sample_prompts_config):
    async def slow(*args, **kwargs):
        await asyncio.sleep(1)
        return "too late"

    reasoner = FakeReasoner()
    reasoner.ask = AsyncMock(side_effect=slow)
    entry = await _entry(sample_profiles[0], sample_context, sample_prompts_config, reasoner, timeout_sec=0.01)
    assert entry.source == "fallback"


async def test_context_not_mutated(sample_profiles, sample_context, sample_prompts_config):
    await _entry(sample_profiles[0], sample_context, sample_prompts_config, NullReasoner())
    assert sample_context.previous_debates == []


async def test_fallback_reproducible_with_seed(sample_profiles, sample_context, sample_prompts_config):
    risk = sample_profiles[1]
    first = await _entry(risk, sample_context, sample_prompts_config, NullReasoner(), seed=11)
    second = await _entry(risk, sample_context, sample_prompts_config, NullReasoner(), seed=11)
    assert first.statement == second.statement
    assert first.simulation_results == second.simulation_results


def test_fallback_statement_never_empty(sample_profiles, sample_context):
    rng = random.Random(1000)
    for agent in sample_profiles:
        sources = SAMPLE_DATA_SOURCES[agent.agent_type]
        for _ in range(1000):
            statement = _fallback_statement(agent, sample_context, sources, rng)
            assert statement.strip()
            assert "{" not in statement


def test_risk_simulation_values():
    rng = random.Random(3)
    scenarios = {name: outcome for name, outcome in _STRESS_SCENARIOS}
    for _ in range(200):
        result = run_risk_simulation(rng)
        assert scenarios[result.scenario_name] == result.outcome
        assert 60 <= result.confidence <= 90
