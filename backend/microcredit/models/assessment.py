"""
Microcredit Assessment Core - Domain Models

Typed records shared by the session store, the quiz and capacity dialogues
and the scoring pipeline.

CONSTRAINTS:
1. Question banks and the capacity schedule are explicit frozen records
2. Component scores are always in [0, 100]
3. Derived figures (RPCResult, AScore) are never mutated after creation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple


# =============================================================================
# ENUMS
# =============================================================================

class SessionKind(str, Enum):
    """Kind of conversational flow a session belongs to."""
    QUIZ = "quiz"
    CAPACITY = "capacity"


class ParserKind(str, Enum):
    """Free-text parser used for a capacity interview answer."""
    CURRENCY = "currency"
    DAYS = "days"
    PERCENTAGE = "percentage"


class RiskZone(str, Enum):
    """Coarse risk band derived from the A-Score. A is best."""
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class AnswerStatus(str, Enum):
    """Outcome of feeding one user reply into a dialogue."""
    ACCEPTED = "accepted"                    # Answer stored, next prompt issued
    RETRY = "retry"                          # Unparseable or out of range, same step
    COMPLETED = "completed"                  # Dialogue finished, terminal result
    NO_ACTIVE_SESSION = "no_active_session"  # Missing or expired session


class QuizStartStatus(str, Enum):
    STARTED = "started"
    RESUMED = "resumed"
    ALL_WEEKS_COMPLETE = "all_weeks_complete"


# =============================================================================
# QUESTION BANK
# =============================================================================

@dataclass(frozen=True)
class Question:
    """A multiple-choice literacy question."""
    text: str
    options: Tuple[str, ...]
    correct_index: int
    explanation: str = ""

    def __post_init__(self):
        if not 2 <= len(self.options) <= 4:
            raise ValueError(f"Question '{self.text}' must have 2-4 options, got {len(self.options)}")
        if not 0 <= self.correct_index < len(self.options):
            raise ValueError(f"Question '{self.text}' has correct_index {self.correct_index} out of range")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "options": list(self.options),
            "correct_index": self.correct_index,
            "explanation": self.explanation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        return cls(
            text=data["text"],
            options=tuple(data["options"]),
            correct_index=int(data["correct_index"]),
            explanation=data.get("explanation", ""),
        )


@dataclass(frozen=True)
class LiteracyModule:
    """One literacy week: its title and question bank."""
    week_number: int
    module_name: str
    questions: Tuple[Question, ...] = ()


@dataclass(frozen=True)
class WeekInfo:
    week_number: int
    module_name: str
    total_questions: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_number": self.week_number,
            "module_name": self.module_name,
            "total_questions": self.total_questions,
        }


# =============================================================================
# SESSIONS
# =============================================================================

@dataclass
class QuizSessionState:
    week_number: int
    questions_pool: List[Question]
    questions_asked: List[str] = field(default_factory=list)
    correct_count: int = 0
    total_asked: int = 0
    current_question: Optional[Question] = None
    module_name: str = ""


@dataclass
class CapacitySessionState:
    step: int = 0
    data: Dict[str, float] = field(default_factory=dict)


@dataclass
class Session:
    """
    An ephemeral per-user dialogue session.

    Lives only in memory; `state` is QuizSessionState or CapacitySessionState
    depending on `kind`.
    """
    key: str
    kind: SessionKind
    state: Any
    started_at: datetime
    last_activity: datetime


# =============================================================================
# CAPACITY INTERVIEW
# =============================================================================

@dataclass(frozen=True)
class CapacityField:
    """One step of the fixed capacity interview schedule."""
    field_name: str
    prompt_text: str
    parser_kind: ParserKind
    min_value: float
    max_value: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field_name": self.field_name,
            "prompt_text": self.prompt_text,
            "parser_kind": self.parser_kind.value,
            "min": self.min_value,
            "max": self.max_value,
        }


@dataclass(frozen=True)
class RPCResult:
    """Repayment capacity figures. All values derived from the inputs."""
    monthly_income: float
    cogs: float
    gross_profit: float
    monthly_expenses: float
    household_expenses: float
    existing_obligations: float
    sustainable_disposable_cash: float
    max_installment: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthly_income": self.monthly_income,
            "cogs": self.cogs,
            "gross_profit": self.gross_profit,
            "monthly_expenses": self.monthly_expenses,
            "household_expenses": self.household_expenses,
            "existing_obligations": self.existing_obligations,
            "sustainable_disposable_cash": self.sustainable_disposable_cash,
            "max_installment": self.max_installment,
        }


# =============================================================================
# ENGAGEMENT
# =============================================================================

@dataclass
class EngagementRecord:
    """
    Append-only WhatsApp activity log for one user.

    `activity_calendar` holds ISO date strings (YYYY-MM-DD) with activity.
    `streak_days` is derived and recomputed on every recorded interaction.
    """
    total_interactions: int = 0
    activity_calendar: Set[str] = field(default_factory=set)
    activity_breakdown: Dict[str, int] = field(default_factory=dict)
    streak_days: int = 0
    last_interaction: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_interactions": self.total_interactions,
            "activity_calendar": sorted(self.activity_calendar),
            "activity_breakdown": dict(self.activity_breakdown),
            "streak_days": self.streak_days,
            "last_interaction": self.last_interaction.isoformat() if self.last_interaction else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


# =============================================================================
# CREDIT SCORE
# =============================================================================

@dataclass(frozen=True)
class CreditScoreComponents:
    """Four 0-100 component scores. None means "not yet available"."""
    character: Optional[float] = None
    capacity: Optional[float] = None
    literacy: Optional[float] = None
    engagement: Optional[float] = None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {
            "character": self.character,
            "capacity": self.capacity,
            "literacy": self.literacy,
            "engagement": self.engagement,
        }


@dataclass(frozen=True)
class ZoneRecommendation:
    action: str
    message: str


@dataclass(frozen=True)
class AScore:
    """Final weighted creditworthiness score and its risk zone."""
    score: int
    zone: RiskZone
    components: CreditScoreComponents
    recommendation: ZoneRecommendation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "zone": self.zone.value,
            "components": self.components.to_dict(),
            "recommendation": {
                "action": self.recommendation.action,
                "message": self.recommendation.message,
            },
        }


# =============================================================================
# DIALOGUE RESULTS
# =============================================================================

@dataclass
class QuizStartResult:
    status: QuizStartStatus
    question: Optional[Question] = None
    week_info: Optional[WeekInfo] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "question": self.question.to_dict() if self.question else None,
            "week_info": self.week_info.to_dict() if self.week_info else None,
            "message": self.message,
        }


@dataclass
class QuizAnswerResult:
    status: AnswerStatus
    correct: bool = False
    explanation: Optional[str] = None
    progress: float = 0.0
    correct_count: int = 0
    total_asked: int = 0
    completed: bool = False
    passed: Optional[bool] = None
    score: Optional[int] = None
    week_number: Optional[int] = None
    next_question: Optional[Question] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "correct": self.correct,
            "explanation": self.explanation,
            "progress": self.progress,
            "correct_count": self.correct_count,
            "total_asked": self.total_asked,
            "completed": self.completed,
            "passed": self.passed,
            "score": self.score,
            "week_number": self.week_number,
            "next_question": self.next_question.to_dict() if self.next_question else None,
        }


@dataclass
class CapacityAnswerResult:
    status: AnswerStatus
    prompt: Optional[str] = None
    error: Optional[str] = None
    field_name: Optional[str] = None
    value: Optional[float] = None
    data: Dict[str, float] = field(default_factory=dict)
    rpc: Optional[RPCResult] = None
    capacity_score: Optional[int] = None
    summary: Optional[str] = None

    @property
    def retry(self) -> bool:
        return self.status == AnswerStatus.RETRY

    @property
    def completed(self) -> bool:
        return self.status == AnswerStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "retry": self.retry,
            "completed": self.completed,
            "prompt": self.prompt,
            "error": self.error,
            "field_name": self.field_name,
            "value": self.value,
            "data": dict(self.data),
            "rpc": self.rpc.to_dict() if self.rpc else None,
            "capacity_score": self.capacity_score,
            "summary": self.summary,
        }
