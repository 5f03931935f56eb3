"""Pure dataclasses and enums for the parliament pipeline. No logic, no deps."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def _now() -> datetime:
    return datetime.now(timezone.utc)


class AgentType(str, Enum):
    SCOUT = "scout"
    RISK = "risk"
    EXECUTION = "execution"
    META = "meta"


class Position(str, Enum):
    FOR = "for"
    AGAINST = "against"
    CLARIFICATION = "clarification"


class VoteChoice(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    ABSTAIN = "abstain"


class ActionType(str, Enum):
    YIELD_DEPLOYMENT = "yield_deployment"
    RISK_REBALANCE = "risk_rebalance"
    PROTOCOL_ROTATION = "protocol_rotation"
    GOVERNANCE = "governance"
    EMERGENCY = "emergency"


class Recommendation(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    NEEDS_REVIEW = "needs_review"


class RiskLevel(str, Enum):
    # Declaration order is severity order.
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Outcome(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    DEADLOCKED = "deadlocked"


@dataclass(frozen=True)
class AgentProfile:
    id: str
    agent_type: AgentType
    name: str
    credit_score: float            # 0-100
    historical_accuracy: float     # 0-1
    specialization: tuple[str, ...]
    default_position: Position


@dataclass(frozen=True)
class SimulationResult:
    scenario_name: str
    outcome: str
    confidence: int


@dataclass(frozen=True)
class DebateEntry:
    agent_id: str
    agent_type: AgentType
    position: Position
    statement: str
    data_sources: tuple[str, ...]
    simulation_results: SimulationResult | None = None
    timestamp: datetime = field(default_factory=_now)
    source: str = "fallback"       # "reasoner" or "fallback"


@dataclass(frozen=True)
class ExpectedOutcome:
    return_percent: float
    risk_score: int                # 0-100
    time_horizon: str
    confidence: int                # 0-100


@dataclass(frozen=True)
class CredibilitySnapshot:
    credit_score: float
    historical_accuracy: float


@dataclass(frozen=True)
class Vote:
    agent_id: str
    agent_type: AgentType
    vote: VoteChoice
    reasoning: str
    confidence: int                # 0-100
    credibility: CredibilitySnapshot
    expected_outcome: ExpectedOutcome | None = None
    alternative_suggestions: tuple[str, ...] = ()
    pros: tuple[str, ...] = ()
    cons: tuple[str, ...] = ()
    data_sources_used: tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=_now)
    source: str = "fallback"


@dataclass
class DebateContext:
    topic: str
    description: str
    action_type: ActionType
    proposal_data: dict[str, Any] = field(default_factory=dict)
    previous_debates: list[DebateEntry] = field(default_factory=list)
    other_agent_votes: list[Vote] = field(default_factory=list)


@dataclass(frozen=True)
class RiskAssessment:
    overall_risk: RiskLevel
    factors: tuple[str, ...]


@dataclass(frozen=True)
class MetaSummary:
    weighted_confidence: int       # 0-100
    recommendation: Recommendation
    conflicts_detected: tuple[str, ...]
    suggested_amendments: tuple[str, ...]
    risk_assessment: RiskAssessment
    synthesis_statement: str
    timestamp: datetime = field(default_factory=_now)
