"""Tests for parliament/outcome.py."""

import pytest

from parliament.errors import PreconditionViolation
from parliament.models import AgentType, Outcome, Recommendation, VoteChoice
from parliament.outcome import determine_outcome
from parliament.synthesis import RISK_SCOUT_CONFLICT, synthesize_meta_summary
from tests.conftest import make_vote


def _unanimous(choice: VoteChoice, n: int = 4):
    types = [AgentType.SCOUT, AgentType.RISK, AgentType.EXECUTION, AgentType.META]
    return [make_vote(types[i % 4], choice, confidence=100, agent_id=f"a{i}") for i in range(n)]


def test_unanimous_approve():
    assert determine_outcome(_unanimous(VoteChoice.APPROVE), quorum=4, required_majority=60) == Outcome.APPROVED


def test_unanimous_reject():
    assert determine_outcome(_unanimous(VoteChoice.REJECT), quorum=4, required_majority=60) == Outcome.REJECTED


def test_all_abstain_deadlocks():
    assert determine_outcome(_unanimous(VoteChoice.ABSTAIN), quorum=4, required_majority=60) == Outcome.DEADLOCKED


@pytest.mark.parametrize("choice", list(VoteChoice))
def test_missing_quorum_always_deadlocks(choice):
    votes = _unanimous(choice, n=3)
    assert determine_outcome(votes, quorum=4, required_majority=0) == Outcome.DEADLOCKED


def test_quorum_zero_with_votes():
    assert determine_outcome(_unanimous(VoteChoice.APPROVE, n=1), quorum=0, required_majority=60) == Outcome.APPROVED


def test_majority_boundary_is_inclusive():
    votes = [make_vote(AgentType.SCOUT, VoteChoice.APPROVE, confidence=100, credit_score=100, historical_accuracy=1)]
    assert determine_outcome(votes, quorum=1, required_majority=100) == Outcome.APPROVED


def test_zero_majority_prefers_approval():
    votes = [make_vote(AgentType.RISK, VoteChoice.REJECT, confidence=90)]
    assert determine_outcome(votes, quorum=1, required_majority=0) == Outcome.APPROVED


def test_empty_votes_raise():
    with pytest.raises(PreconditionViolation):
        determine_outcome([], quorum=0, required_majority=60)


@pytest.mark.parametrize("quorum, majority", [(-1, 60), (4, -0.1), (4, 100.1)])
def test_invalid_parameters_raise(quorum, majority):
    with pytest.raises(PreconditionViolation):
        determine_outcome(_unanimous(VoteChoice.APPROVE), quorum=quorum, required_majority=majority)


def test_idempotent():
    votes = _unanimous(VoteChoice.APPROVE)
    assert determine_outcome(votes, 4, 60) == determine_outcome(votes, 4, 60)


def test_meta_summary_does_not_change_outcome():
    votes = _unanimous(VoteChoice.APPROVE)
    summary = synthesize_meta_summary(votes, [])
    assert determine_outcome(votes, 4, 60, summary) == determine_outcome(votes, 4, 60)


def _scenario_votes():
    return [
        make_vote(AgentType.SCOUT, VoteChoice.APPROVE, confidence=85, credit_score=85,
                  historical_accuracy=0.82, risk_score=30, agent_id="scout-001"),
        make_vote(AgentType.RISK, VoteChoice.REJECT, confidence=75, credit_score=90,
                  historical_accuracy=0.88, risk_score=55, agent_id="risk-001"),
        make_vote(AgentType.EXECUTION, VoteChoice.APPROVE, confidence=70, credit_score=88,
                  historical_accuracy=0.85, risk_score=40, agent_id="exec-001"),
        make_vote(AgentType.META, VoteChoice.ABSTAIN, confidence=60, credit_score=92,
                  historical_accuracy=0.90, risk_score=35, agent_id="meta-001"),
    ]


def test_mixed_session_deadlocks_and_needs_review():
    votes = _scenario_votes()
    summary = synthesize_meta_summary(votes, [])
    assert summary.weighted_confidence == 72
    assert RISK_SCOUT_CONFLICT in summary.conflicts_detected
    assert summary.recommendation == Recommendation.NEEDS_REVIEW
    assert determine_outcome(votes, quorum=4, required_majority=60, meta_summary=summary) == Outcome.DEADLOCKED
    assert determine_outcome(votes, quorum=3, required_majority=60, meta_summary=summary) == Outcome.DEADLOCKED
