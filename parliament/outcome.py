"""Terminal quorum/majority resolution of a vote set."""

import logging

from parliament.errors import PreconditionViolation
from parliament.models import MetaSummary, Outcome, Vote
from parliament.weighting import tally_votes

logger = logging.getLogger(__name__)


def determine_outcome(
    votes: list[Vote],
    quorum: int,
    required_majority: float,
    meta_summary: MetaSummary | None = None,
) -> Outcome:
    """Resolve a vote set to approved, rejected or deadlocked.

    Args:
        votes: Cast votes. Must not be empty.
        quorum: Minimum number of votes before anything but a deadlock.
        required_majority: Weighted share (percent) one side must reach.
        meta_summary: Optional synthesis of the same votes; informational only.

    Returns:
        Outcome. A missing quorum always deadlocks, whatever the votes say.

    Raises:
        PreconditionViolation: On empty votes, negative quorum, or a majority
            outside [0, 100].
    """
    if not votes:
        raise PreconditionViolation("Cannot determine an outcome from an empty vote list")
    if quorum < 0:
        raise PreconditionViolation(f"Quorum must be non-negative, got {quorum}")
    if not 0 <= required_majority <= 100:
        raise PreconditionViolation(f"Required majority {required_majority} outside [0, 100]")

    if len(votes) < quorum:
        logger.info("Quorum not reached: %d/%d votes", len(votes), quorum)
        return Outcome.DEADLOCKED

    tally = tally_votes(votes)
    logger.debug(
        "Resolution shares: approve=%.1f%% reject=%.1f%% (required %.1f%%)",
        tally.approve_share,
        tally.reject_share,
        required_majority,
    )
    if meta_summary is not None:
        logger.debug("Meta recommendation for this vote set: %s", meta_summary.recommendation.value)

    if tally.approve_share >= required_majority:
        return Outcome.APPROVED
    if tally.reject_share >= required_majority:
        return Outcome.REJECTED
    return Outcome.DEADLOCKED
