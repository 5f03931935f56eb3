"""Tests for parliament/session.py."""

import random
from unittest.mock import MagicMock

import pytest

from parliament.engine import ParliamentEngine
from parliament.models import Outcome
from parliament.session import SessionState, run_session
from tests.conftest import FakeReasoner


async def test_run_session_rounds_and_callback(seeded_engine, sample_context):
    callback = MagicMock()
    result = await run_session(seeded_engine, sample_context, num_rounds=2, quorum=4, required_majority=60,
                               on_round_complete=callback)
    assert [r.number for r in result.rounds] == [1, 2]
    assert callback.call_count == 2
    assert len(sample_context.previous_debates) == 8
    assert len(result.votes) == 4
    assert result.ballots == 1
    assert result.states == [
        SessionState.IDLE,
        SessionState.DEBATING,
        SessionState.DEBATING,
        SessionState.VOTING,
        SessionState.RESOLVED,
    ]
    assert result.outcome == seeded_engine.determine_outcome(result.votes, 4, 60)


async def test_unreachable_quorum_deadlocks(seeded_engine, sample_context):
    result = await run_session(seeded_engine, sample_context, num_rounds=1, quorum=5, required_majority=0)
    assert result.outcome == Outcome.DEADLOCKED


async def test_redebate_after_deadlock(seeded_engine, sample_context):
    result = await run_session(
        seeded_engine, sample_context, num_rounds=1, quorum=5, required_majority=60, redebate_rounds=2
    )
    assert result.outcome == Outcome.DEADLOCKED
    assert result.ballots == 3
    assert len(result.rounds) == 3
    assert sample_context.other_agent_votes
    assert result.states.count(SessionState.VOTING) == 3


async def test_no_redebate_when_decided(sample_registry, sample_prompts_config, sample_context):
    reasoner = FakeReasoner(response_text='{"vote": "approve", "confidence": 95, "reasoning": "Clear win."}')
    engine = ParliamentEngine(sample_registry, sample_prompts_config, reasoner=reasoner, rng=random.Random(9))
    result = await run_session(engine, sample_context, num_rounds=1, quorum=4, required_majority=60,
                               redebate_rounds=3)
    assert result.outcome == Outcome.APPROVED
    assert result.ballots == 1
    assert len(result.rounds) == 1


@pytest.mark.parametrize("num_rounds, redebate", [(0, 0), (1, -1)])
async def test_invalid_round_counts_raise(seeded_engine, sample_context, num_rounds, redebate):
    with pytest.raises(ValueError):
        await run_session(seeded_engine, sample_context, num_rounds=num_rounds, quorum=4, required_majority=60,
                          redebate_rounds=redebate)
