"""
Assessment Record Services

SQLAlchemy-backed persistence collaborators of the assessment core:
- QuestionBankService: weekly literacy modules and their question banks
- LiteracyRecordService: per-user weekly quiz scores
- EngagementRecordService: per-user engagement counters

The dialogue engines only depend on the public methods here, so tests can
pass a MagicMock in their place.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ...models.assessment import EngagementRecord, LiteracyModule, Question
from ...models.db_models import (
    EngagementRecordDB,
    LiteracyModuleDB,
    LiteracyProgressDB,
    LiteracyQuestionDB,
)

logger = logging.getLogger(__name__)


def week_key(week_number: int) -> str:
    """Literacy record key for a week: 3 -> 'week_03'."""
    return f"week_{week_number:02d}"


class QuestionBankService:
    """Reads and writes the weekly literacy question bank."""

    def __init__(self, db: Session):
        self.db = db

    def get_module(self, week_number: int) -> Optional[LiteracyModule]:
        module = self.db.query(LiteracyModuleDB).filter(
            LiteracyModuleDB.week_number == week_number
        ).first()
        if module is None:
            return None

        return LiteracyModule(
            week_number=module.week_number,
            module_name=module.module_name,
            questions=tuple(
                Question(
                    text=q.text,
                    options=tuple(q.options or []),
                    correct_index=q.correct_index,
                    explanation=q.explanation or "",
                )
                for q in module.questions
            ),
        )

    def list_weeks(self) -> List[int]:
        rows = self.db.query(LiteracyModuleDB.week_number).order_by(LiteracyModuleDB.week_number).all()
        return [r[0] for r in rows]

    def save_module(self, module: LiteracyModule) -> None:
        """Insert or replace a module together with its whole question bank."""
        existing = self.db.query(LiteracyModuleDB).filter(
            LiteracyModuleDB.week_number == module.week_number
        ).first()

        if existing is None:
            existing = LiteracyModuleDB(week_number=module.week_number)
            self.db.add(existing)

        existing.module_name = module.module_name
        existing.questions = [
            LiteracyQuestionDB(
                text=q.text,
                options=list(q.options),
                correct_index=q.correct_index,
                explanation=q.explanation,
            )
            for q in module.questions
        ]
        self.db.commit()
        logger.info(f"Saved literacy week {module.week_number} with {len(module.questions)} questions")


class LiteracyRecordService:
    """Per-user literacy progress, keyed week_01 .. week_15."""

    def __init__(self, db: Session):
        self.db = db

    def get_literacy_record(self, phone: str) -> Dict[str, Dict[str, Any]]:
        """
        Return {"week_XX": {"score", "completed", "last_updated"}} for every
        week the user has attempted.
        """
        rows = self.db.query(LiteracyProgressDB).filter(
            LiteracyProgressDB.phone == phone
        ).all()

        return {
            week_key(row.week_number): {
                "score": row.score,
                "completed": bool(row.completed),
                "last_updated": row.last_updated,
            }
            for row in rows
        }

    def set_week_score(self, phone: str, week_number: int, score: float, completed: bool) -> None:
        row = self.db.query(LiteracyProgressDB).filter(
            LiteracyProgressDB.phone == phone,
            LiteracyProgressDB.week_number == week_number,
        ).first()

        if row is None:
            row = LiteracyProgressDB(phone=phone, week_number=week_number)
            self.db.add(row)

        row.score = score
        row.completed = completed
        row.last_updated = datetime.utcnow()
        self.db.commit()
        logger.info(f"Literacy {week_key(week_number)} for {phone}: score={score}, completed={completed}")


class EngagementRecordService:
    """Loads and stores EngagementRecord values."""

    def __init__(self, db: Session):
        self.db = db

    def get_engagement_record(self, phone: str) -> EngagementRecord:
        """Return the stored record, or a fresh empty one for new users."""
        row = self.db.query(EngagementRecordDB).filter(
            EngagementRecordDB.phone == phone
        ).first()

        if row is None:
            return EngagementRecord(created_at=datetime.now(timezone.utc))

        return EngagementRecord(
            total_interactions=row.total_interactions or 0,
            activity_calendar=set(row.activity_calendar or []),
            activity_breakdown=dict(row.activity_breakdown or {}),
            streak_days=row.streak_days or 0,
            last_interaction=row.last_interaction,
            created_at=row.created_at,
        )

    def save_engagement_record(self, phone: str, record: EngagementRecord) -> None:
        row = self.db.query(EngagementRecordDB).filter(
            EngagementRecordDB.phone == phone
        ).first()

        if row is None:
            row = EngagementRecordDB(phone=phone, created_at=_naive_utc(record.created_at))
            self.db.add(row)

        row.total_interactions = record.total_interactions
        row.streak_days = record.streak_days
        row.activity_calendar = sorted(record.activity_calendar)
        row.activity_breakdown = dict(record.activity_breakdown)
        row.last_interaction = _naive_utc(record.last_interaction)
        self.db.commit()


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # DateTime columns are stored timezone-naive in UTC
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
