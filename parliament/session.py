"""Session orchestration on top of ParliamentEngine.

The engine never mutates a DebateContext; this module appends each round's
entries and decides when a deadlock earns another debate round.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from parliament.engine import ParliamentEngine
from parliament.models import DebateContext, DebateEntry, MetaSummary, Outcome, Vote

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    DEBATING = "debating"
    VOTING = "voting"
    RESOLVED = "resolved"


@dataclass
class DebateRound:
    number: int
    entries: list[DebateEntry] = field(default_factory=list)


@dataclass
class SessionResult:
    context: DebateContext
    rounds: list[DebateRound]
    votes: list[Vote]
    summary: MetaSummary
    outcome: Outcome
    quorum: int
    required_majority: float
    states: list[SessionState] = field(default_factory=list)
    ballots: int = 1
    total_duration_sec: float = 0.0


async def _debate(
    engine: ParliamentEngine,
    context: DebateContext,
    rounds: list[DebateRound],
    states: list[SessionState],
    on_round_complete: Callable[[DebateRound], None] | None,
) -> None:
    number = len(rounds) + 1
    states.append(SessionState.DEBATING)
    logger.info("Starting debate round %d", number)

    entries = await engine.debate_round(context)
    context.previous_debates.extend(entries)

    current = DebateRound(number=number, entries=entries)
    rounds.append(current)
    fallbacks = sum(1 for e in entries if e.source == "fallback")
    logger.info("Debate round %d complete: %d entries (%d fallback)", number, len(entries), fallbacks)

    if on_round_complete:
        on_round_complete(current)


async def run_session(
    engine: ParliamentEngine,
    context: DebateContext,
    num_rounds: int,
    quorum: int,
    required_majority: float,
    redebate_rounds: int = 0,
    on_round_complete: Callable[[DebateRound], None] | None = None,
) -> SessionResult:
    """Run a full parliament session.

    Args:
        engine: The deliberation engine.
        context: Proposal context; debate entries are appended to it in place.
        num_rounds: Debate rounds before the first ballot.
        quorum: Minimum votes for a non-deadlocked outcome.
        required_majority: Weighted share (percent) needed to decide.
        redebate_rounds: Extra debate-and-vote cycles allowed after a deadlock.
        on_round_complete: Optional callback invoked after each debate round.

    Returns:
        SessionResult with the final ballot, its summary and outcome.

    Raises:
        ValueError: If num_rounds < 1 or redebate_rounds < 0.
    """
    if num_rounds < 1:
        raise ValueError(f"num_rounds must be at least 1, got {num_rounds}")
    if redebate_rounds < 0:
        raise ValueError(f"redebate_rounds must be non-negative, got {redebate_rounds}")

    start = time.monotonic()
    states = [SessionState.IDLE]
    rounds: list[DebateRound] = []

    for _ in range(num_rounds):
        await _debate(engine, context, rounds, states, on_round_complete)

    ballots = 0
    while True:
        states.append(SessionState.VOTING)
        ballots += 1
        votes = await engine.collect_votes(context)
        summary = engine.synthesize_meta_summary(votes, context.previous_debates)
        outcome = engine.determine_outcome(votes, quorum, required_majority, summary)
        logger.info("Ballot %d: %s (recommendation: %s)", ballots, outcome.value, summary.recommendation.value)

        if outcome != Outcome.DEADLOCKED or ballots > redebate_rounds:
            break

        context.other_agent_votes = list(votes)
        await _debate(engine, context, rounds, states, on_round_complete)

    states.append(SessionState.RESOLVED)

    return SessionResult(
        context=context,
        rounds=rounds,
        votes=votes,
        summary=summary,
        outcome=outcome,
        quorum=quorum,
        required_majority=required_majority,
        states=states,
        ballots=ballots,
        total_duration_sec=time.monotonic() - start,
    )
