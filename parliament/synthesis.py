"""Meta synthesis: weighting, conflict detection, risk and narrative over a vote set."""

import logging

from parliament.errors import PreconditionViolation
from parliament.models import (
    AgentType,
    DebateEntry,
    MetaSummary,
    Recommendation,
    RiskAssessment,
    RiskLevel,
    Vote,
    VoteChoice,
)
from parliament.weighting import tally_votes

logger = logging.getLogger(__name__)

RISK_SCOUT_CONFLICT = "Risk-Scout conflict: High confidence opposing views on opportunity vs safety"
HIGH_RISK_CONFLICT = "Multiple agents flagged high risk concerns"
DIVERGENCE_CONFLICT = "High confidence divergence among agents"

_CONFLICT_CONFIDENCE = 70
_HIGH_RISK_SCORE = 70
_MAX_CONFIDENCE_SPREAD = 40
_RECOMMENDATION_SHARE = 60
_MAX_AMENDMENTS = 5
_RISK_CONS_NOTE_THRESHOLD = 3

_RISK_ORDER = list(RiskLevel)


def _first_of_type(votes: list[Vote], agent_type: AgentType) -> Vote | None:
    return next((v for v in votes if v.agent_type == agent_type), None)


def _detect_conflicts(votes: list[Vote]) -> list[str]:
    """Evaluate every conflict rule and return the union of matches."""
    conflicts: list[str] = []

    risk_vote = _first_of_type(votes, AgentType.RISK)
    scout_vote = _first_of_type(votes, AgentType.SCOUT)
    if (
        risk_vote is not None
        and scout_vote is not None
        and risk_vote.vote == VoteChoice.REJECT
        and scout_vote.vote == VoteChoice.APPROVE
        and risk_vote.confidence > _CONFLICT_CONFIDENCE
        and scout_vote.confidence > _CONFLICT_CONFIDENCE
    ):
        conflicts.append(RISK_SCOUT_CONFLICT)

    high_risk = [
        v for v in votes
        if v.expected_outcome is not None and v.expected_outcome.risk_score > _HIGH_RISK_SCORE
    ]
    if len(high_risk) > 1:
        conflicts.append(HIGH_RISK_CONFLICT)

    confidences = [v.confidence for v in votes]
    if max(confidences) - min(confidences) > _MAX_CONFIDENCE_SPREAD:
        conflicts.append(DIVERGENCE_CONFLICT)

    return conflicts


def _collect_amendments(votes: list[Vote]) -> list[str]:
    """Deduplicated suggestions in vote order, truncated."""
    seen: dict[str, None] = {}
    for vote in votes:
        for suggestion in vote.alternative_suggestions:
            seen.setdefault(suggestion, None)
    return list(seen)[:_MAX_AMENDMENTS]


def _assess_risk(votes: list[Vote]) -> RiskAssessment:
    scores = [v.expected_outcome.risk_score for v in votes if v.expected_outcome is not None]
    mean_score = sum(scores) / len(scores) if scores else 0.0

    factors: list[str] = []
    if mean_score > 80:
        level = RiskLevel.CRITICAL
        factors.append("Extremely high aggregate risk score")
    elif mean_score > 60:
        level = RiskLevel.HIGH
        factors.append("Elevated risk indicators detected")
    elif mean_score > 40:
        level = RiskLevel.MEDIUM
        factors.append("Moderate risk level within acceptable bounds")
    else:
        level = RiskLevel.LOW
        factors.append("Risk metrics within safe parameters")

    risk_vote = _first_of_type(votes, AgentType.RISK)
    if risk_vote is not None and risk_vote.vote == VoteChoice.REJECT:
        level = _RISK_ORDER[min(_RISK_ORDER.index(level) + 1, len(_RISK_ORDER) - 1)]
        factors.append("Risk Agent vetoed proposal")

    if risk_vote is not None and len(risk_vote.cons) > _RISK_CONS_NOTE_THRESHOLD:
        factors.append(f"Risk Agent identified {len(risk_vote.cons)} concerns")

    return RiskAssessment(overall_risk=level, factors=tuple(factors))


def _format_synthesis(votes: list[Vote], recommendation: Recommendation) -> str:
    approves = sum(1 for v in votes if v.vote == VoteChoice.APPROVE)
    rejects = sum(1 for v in votes if v.vote == VoteChoice.REJECT)
    mean_confidence = round(sum(v.confidence for v in votes) / len(votes))

    parts = [
        f"Synthesis: {approves} approval(s), {rejects} rejection(s) "
        f"with {mean_confidence}% average confidence."
    ]

    if recommendation == Recommendation.APPROVE:
        parts.append("Consensus favors approval.")
        scout_vote = _first_of_type(votes, AgentType.SCOUT)
        if scout_vote is not None and scout_vote.expected_outcome is not None:
            outcome = scout_vote.expected_outcome
            parts.append(
                f"Expected return: {outcome.return_percent}% with {outcome.risk_score}% risk "
                f"over {outcome.time_horizon}."
            )
    elif recommendation == Recommendation.REJECT:
        parts.append("Majority recommends rejection.")
        risk_vote = _first_of_type(votes, AgentType.RISK)
        if risk_vote is not None and risk_vote.cons:
            parts.append(f"Primary concerns: {risk_vote.cons[0]}.")
    else:
        parts.append("Inconclusive - manual review recommended.")
        parts.append("Consider suggested amendments before re-voting.")

    return " ".join(parts)


def synthesize_meta_summary(votes: list[Vote], debates: list[DebateEntry]) -> MetaSummary:
    """Aggregate a vote set into a MetaSummary.

    Pure: no I/O, no randomness, and the inputs are not modified.

    Args:
        votes: All votes of the session. Must not be empty.
        debates: The debate history the votes were cast over.

    Returns:
        A freshly computed MetaSummary.

    Raises:
        PreconditionViolation: If votes is empty or holds out-of-range fields.
    """
    if not votes:
        raise PreconditionViolation("Cannot synthesize a summary from an empty vote list")

    tally = tally_votes(votes)
    conflicts = _detect_conflicts(votes)

    recommendation = Recommendation.NEEDS_REVIEW
    if not conflicts:
        if tally.approve_share > _RECOMMENDATION_SHARE:
            recommendation = Recommendation.APPROVE
        elif tally.reject_share > _RECOMMENDATION_SHARE:
            recommendation = Recommendation.REJECT

    logger.info(
        "Synthesized %d votes over %d debate entries: approve=%.1f%% reject=%.1f%% -> %s (%d conflicts)",
        len(votes),
        len(debates),
        tally.approve_share,
        tally.reject_share,
        recommendation.value,
        len(conflicts),
    )

    return MetaSummary(
        weighted_confidence=tally.weighted_confidence,
        recommendation=recommendation,
        conflicts_detected=tuple(conflicts),
        suggested_amendments=tuple(_collect_amendments(votes)),
        risk_assessment=_assess_risk(votes),
        synthesis_statement=_format_synthesis(votes, recommendation),
    )
