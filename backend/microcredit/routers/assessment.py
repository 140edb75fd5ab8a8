"""
Assessment API Routes

Thin in-process transport for the assessment core. The WhatsApp dispatcher
calls these endpoints to drive the literacy quiz and the capacity
interview, record engagement and compute the A-Score.

User-facing failures (invalid answers, expired sessions) come back as
structured results with HTTP 200. Only operator errors such as a missing
question bank surface as HTTP errors.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.assessment import (
    CapacityInterview,
    EngagementRecordService,
    LiteracyRecordService,
    MissingQuizContentError,
    QuestionBankService,
    QuizEngine,
    SessionStore,
    calculate_a_score,
    calculate_capacity_score,
    calculate_engagement_score,
    calculate_rpc,
    record_interaction,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assessment", tags=["assessment"])


# =============================================================================
# REQUEST MODELS
# =============================================================================

class QuizAnswerRequest(BaseModel):
    """Answer to the current quiz question."""
    option_index: int = Field(..., description="Zero-based index of the chosen option")


class CapacityAnswerRequest(BaseModel):
    """Free-text reply to the current capacity interview prompt."""
    text: str = Field(..., description="User reply, e.g. '500 ribu'")


class RPCRequest(BaseModel):
    """Capacity inputs; missing fields use the calculator defaults."""
    daily_revenue: Optional[float] = Field(None, ge=0)
    active_days: Optional[float] = Field(None, ge=0)
    cogs_percentage: Optional[float] = Field(None, ge=0, le=100)
    household_expenses: Optional[float] = Field(None, ge=0)
    existing_obligations: Optional[float] = Field(None, ge=0)


class InteractionRequest(BaseModel):
    activity_type: str = Field(default="other", description="quiz, business_advice, check_data, menu, other")


class AScoreRequest(BaseModel):
    """Component scores (0-100). Missing components default to 50."""
    character: Optional[float] = None
    capacity: Optional[float] = None
    literacy: Optional[float] = None
    engagement: Optional[float] = None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_quiz_engine(request: Request, db: Session = Depends(get_db)) -> QuizEngine:
    return QuizEngine(
        store=request.app.state.quiz_sessions,
        literacy_records=LiteracyRecordService(db),
        question_bank=QuestionBankService(db),
        rng=request.app.state.quiz_rng,
    )


def get_capacity_interview(request: Request) -> CapacityInterview:
    return CapacityInterview(request.app.state.capacity_sessions)


# =============================================================================
# QUIZ ENDPOINTS
# =============================================================================

@router.post("/quiz/{phone}/start", response_model=dict)
async def start_quiz(phone: str, engine: QuizEngine = Depends(get_quiz_engine)):
    """Start the next incomplete literacy week, or resume the active quiz."""
    try:
        result = engine.start_quiz(phone)
    except MissingQuizContentError as e:
        logger.error(f"Quiz content missing for {phone}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return result.to_dict()


@router.post("/quiz/{phone}/answer", response_model=dict)
async def answer_quiz(
    phone: str,
    request: QuizAnswerRequest,
    engine: QuizEngine = Depends(get_quiz_engine),
):
    """Grade the answer to the current question."""
    return engine.check_answer(phone, request.option_index).to_dict()


@router.delete("/quiz/{phone}", response_model=dict)
async def stop_quiz(phone: str, engine: QuizEngine = Depends(get_quiz_engine)):
    return {"stopped": engine.stop_quiz(phone)}


@router.get("/quiz/{phone}/progress", response_model=dict)
async def quiz_progress(phone: str, engine: QuizEngine = Depends(get_quiz_engine)):
    return engine.get_progress(phone)


# =============================================================================
# CAPACITY ENDPOINTS
# =============================================================================

@router.get("/capacity/questions", response_model=dict)
async def capacity_questions():
    """The fixed five-step interview schedule."""
    return {"questions": [q.to_dict() for q in CapacityInterview.get_questions()]}


@router.post("/capacity/{phone}/start", response_model=dict)
async def start_capacity(
    phone: str,
    interview: CapacityInterview = Depends(get_capacity_interview),
):
    return interview.start_session(phone).to_dict()


@router.post("/capacity/{phone}/answer", response_model=dict)
async def answer_capacity(
    phone: str,
    request: CapacityAnswerRequest,
    interview: CapacityInterview = Depends(get_capacity_interview),
):
    return interview.process_answer(phone, request.text).to_dict()


@router.delete("/capacity/{phone}", response_model=dict)
async def cancel_capacity(
    phone: str,
    interview: CapacityInterview = Depends(get_capacity_interview),
):
    return {"stopped": interview.cancel(phone)}


@router.post("/rpc", response_model=dict)
async def compute_rpc(request: RPCRequest):
    """Repayment capacity for already-known figures, without a dialogue."""
    rpc = calculate_rpc(request.model_dump(exclude_none=True))
    return {
        "rpc": rpc.to_dict(),
        "capacity_score": calculate_capacity_score(rpc),
    }


# =============================================================================
# ENGAGEMENT ENDPOINTS
# =============================================================================

@router.get("/engagement/{phone}", response_model=dict)
async def get_engagement(phone: str, db: Session = Depends(get_db)):
    record = EngagementRecordService(db).get_engagement_record(phone)
    return {
        "engagement": record.to_dict(),
        "score": calculate_engagement_score(record),
    }


@router.post("/engagement/{phone}/interactions", response_model=dict)
async def log_interaction(
    phone: str,
    request: InteractionRequest,
    db: Session = Depends(get_db),
):
    service = EngagementRecordService(db)
    record = record_interaction(service.get_engagement_record(phone), request.activity_type)
    service.save_engagement_record(phone, record)
    return {
        "engagement": record.to_dict(),
        "score": calculate_engagement_score(record),
    }


# =============================================================================
# SCORING / ROUTING
# =============================================================================

@router.post("/a-score", response_model=dict)
async def compute_a_score(request: AScoreRequest):
    return calculate_a_score(request.model_dump()).to_dict()


@router.get("/sessions/{phone}", response_model=dict)
async def active_sessions(phone: str, request: Request):
    """Which dialogue a reply from this user should be routed to."""
    quiz_sessions: SessionStore = request.app.state.quiz_sessions
    capacity_sessions: SessionStore = request.app.state.capacity_sessions
    return {
        "phone": phone,
        "quiz": quiz_sessions.exists(phone),
        "capacity": capacity_sessions.exists(phone),
    }
