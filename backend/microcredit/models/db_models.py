"""
Microcredit Assessment Core - SQLAlchemy ORM Models
Persistent storage for the literacy question bank, per-user literacy
progress and engagement records
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, DateTime, Text, JSON, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from ..database import Base


# =============================================================================
# QUESTION BANK
# =============================================================================

class LiteracyModuleDB(Base):
    """One of the 15 weekly financial literacy modules."""
    __tablename__ = "literacy_modules"

    week_number = Column(Integer, primary_key=True)
    module_name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    questions = relationship(
        "LiteracyQuestionDB",
        back_populates="module",
        cascade="all, delete-orphan",
        order_by="LiteracyQuestionDB.id",
    )


class LiteracyQuestionDB(Base):
    """Multiple-choice question in a module's bank."""
    __tablename__ = "literacy_questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    week_number = Column(Integer, ForeignKey("literacy_modules.week_number"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)  # Ordered list of 2-4 choice strings
    correct_index = Column(Integer, nullable=False)
    explanation = Column(Text, default="")

    module = relationship("LiteracyModuleDB", back_populates="questions")


# =============================================================================
# USER PROGRESS
# =============================================================================

class LiteracyProgressDB(Base):
    """Latest quiz score for one user and one week."""
    __tablename__ = "literacy_progress"
    __table_args__ = (UniqueConstraint("phone", "week_number", name="uq_literacy_progress_phone_week"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    phone = Column(String(32), nullable=False, index=True)
    week_number = Column(Integer, nullable=False)
    score = Column(Float, default=0)
    completed = Column(Boolean, default=False)
    last_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class EngagementRecordDB(Base):
    """WhatsApp engagement counters for one user."""
    __tablename__ = "engagement_records"

    phone = Column(String(32), primary_key=True)
    total_interactions = Column(Integer, default=0)
    streak_days = Column(Integer, default=0)
    activity_calendar = Column(JSON, default=list)   # Sorted ISO dates
    activity_breakdown = Column(JSON, default=dict)  # activity_type -> count
    last_interaction = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
