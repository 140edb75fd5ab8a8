"""
Assessment Services

Conversational assessment and credit-scoring core of the WhatsApp assistant.

Components (leaves first):
- SessionStore: ephemeral per-user sessions with lazy expiry
- rpc_calculator: repayment capacity figures and capacity score
- engagement_tracker: activity streak and engagement score
- CapacityInterview: five-step capacity dialogue
- QuizEngine: weekly 4-question literacy quiz
- credit_scoring: weighted A-Score and risk zone
"""

from .session_store import SessionStore
from .rpc_calculator import calculate_rpc, calculate_capacity_score, calculate_trends
from .engagement_tracker import create_engagement, record_interaction, calculate_streak, calculate_engagement_score
from .capacity_interview import CapacityInterview, CAPACITY_SCHEDULE
from .quiz_engine import QuizEngine, MissingQuizContentError
from .credit_scoring import calculate_a_score, get_risk_zone, get_zone_recommendation
from .records import QuestionBankService, LiteracyRecordService, EngagementRecordService

__all__ = [
    'SessionStore',
    'calculate_rpc',
    'calculate_capacity_score',
    'calculate_trends',
    'create_engagement',
    'record_interaction',
    'calculate_streak',
    'calculate_engagement_score',
    'CapacityInterview',
    'CAPACITY_SCHEDULE',
    'QuizEngine',
    'MissingQuizContentError',
    'calculate_a_score',
    'get_risk_zone',
    'get_zone_recommendation',
    # Persistence
    'QuestionBankService',
    'LiteracyRecordService',
    'EngagementRecordService',
]
