"""Microcredit Assessment Core - Data Models"""
from .assessment import (
    # Enums
    SessionKind, ParserKind, RiskZone, AnswerStatus, QuizStartStatus,
    # Question bank
    Question, LiteracyModule, WeekInfo,
    # Sessions
    Session, QuizSessionState, CapacitySessionState,
    # Capacity / RPC
    CapacityField, RPCResult,
    # Engagement
    EngagementRecord,
    # Credit score
    CreditScoreComponents, ZoneRecommendation, AScore,
    # Dialogue results
    QuizStartResult, QuizAnswerResult, CapacityAnswerResult,
)

__all__ = [
    "SessionKind", "ParserKind", "RiskZone", "AnswerStatus", "QuizStartStatus",
    "Question", "LiteracyModule", "WeekInfo",
    "Session", "QuizSessionState", "CapacitySessionState",
    "CapacityField", "RPCResult",
    "EngagementRecord",
    "CreditScoreComponents", "ZoneRecommendation", "AScore",
    "QuizStartResult", "QuizAnswerResult", "CapacityAnswerResult",
]
