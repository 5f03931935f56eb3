"""Credibility-and-confidence vote weighting shared by synthesis and resolution."""

from dataclasses import dataclass

from parliament.errors import PreconditionViolation
from parliament.models import Vote, VoteChoice


@dataclass(frozen=True)
class WeightedTally:
    total_weight: float
    approve_share: float       # percent of total weight, 0-100
    reject_share: float        # percent of total weight, 0-100
    weighted_confidence: int   # 0-100


def credibility_base(vote: Vote) -> float:
    """Track-record ceiling for a vote's weight: (credit/100) * accuracy."""
    snapshot = vote.credibility
    return (snapshot.credit_score / 100) * snapshot.historical_accuracy


def vote_weight(vote: Vote) -> float:
    """Weight of a single vote.

    The confidence modifier lies in [0.5, 1.0], so the result is always
    between half of the credibility base and the base itself.

    Raises:
        PreconditionViolation: If any input lies outside its documented range.
    """
    _check_ranges(vote)
    return credibility_base(vote) * (0.5 + 0.5 * vote.confidence / 100)


def tally_votes(votes: list[Vote]) -> WeightedTally:
    """Aggregate a vote set into weighted approve/reject shares.

    Each approve or reject vote contributes weight * confidence/100 to its
    side. Both sides are normalized by the summed weight of all votes, so
    abstentions dilute the shares without adding to either.

    Raises:
        PreconditionViolation: If votes is empty or holds out-of-range fields.
    """
    if not votes:
        raise PreconditionViolation("Cannot tally an empty vote list")

    weights = [vote_weight(v) for v in votes]
    total = sum(weights)

    approve = sum(w * v.confidence / 100 for v, w in zip(votes, weights) if v.vote == VoteChoice.APPROVE)
    reject = sum(w * v.confidence / 100 for v, w in zip(votes, weights) if v.vote == VoteChoice.REJECT)

    if total > 0:
        approve_share = approve / total * 100
        reject_share = reject / total * 100
        mean_confidence = sum(v.confidence * w for v, w in zip(votes, weights)) / total
    else:
        # Every voter has zero credibility; nothing can carry a share.
        approve_share = 0.0
        reject_share = 0.0
        mean_confidence = sum(v.confidence for v in votes) / len(votes)

    return WeightedTally(
        total_weight=total,
        approve_share=approve_share,
        reject_share=reject_share,
        weighted_confidence=min(100, max(0, round(mean_confidence))),
    )


def _check_ranges(vote: Vote) -> None:
    snapshot = vote.credibility
    if not 0 <= vote.confidence <= 100:
        raise PreconditionViolation(f"Vote from {vote.agent_id}: confidence {vote.confidence} outside [0, 100]")
    if not 0 <= snapshot.credit_score <= 100:
        raise PreconditionViolation(
            f"Vote from {vote.agent_id}: credit_score {snapshot.credit_score} outside [0, 100]"
        )
    if not 0 <= snapshot.historical_accuracy <= 1:
        raise PreconditionViolation(
            f"Vote from {vote.agent_id}: historical_accuracy {snapshot.historical_accuracy} outside [0, 1]"
        )
