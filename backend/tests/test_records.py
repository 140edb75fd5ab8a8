"""
Tests for the SQLAlchemy-backed assessment record services.

Runs against an in-memory SQLite database.
"""
from datetime import date, datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from microcredit.database import Base
from microcredit.models import db_models  # noqa: F401
from microcredit.models.assessment import LiteracyModule, Question
from microcredit.services.assessment.engagement_tracker import create_engagement, record_interaction
from microcredit.services.assessment.records import (
    EngagementRecordService,
    LiteracyRecordService,
    QuestionBankService,
    week_key,
)


PHONE = "628123456789"


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def sample_module(week=1, count=5):
    return LiteracyModule(
        week_number=week,
        module_name=f"Modul {week}",
        questions=tuple(
            Question(f"Pertanyaan {i}", ("Ya", "Tidak", "Mungkin"), i % 3, f"Penjelasan {i}")
            for i in range(count)
        ),
    )


class TestWeekKey:

    def test_zero_padded(self):
        assert week_key(1) == "week_01"
        assert week_key(15) == "week_15"


class TestQuestionBankService:

    def test_round_trip(self, db):
        service = QuestionBankService(db)
        service.save_module(sample_module())

        module = service.get_module(1)
        assert module.module_name == "Modul 1"
        assert len(module.questions) == 5
        assert module.questions[0] == Question("Pertanyaan 0", ("Ya", "Tidak", "Mungkin"), 0, "Penjelasan 0")

    def test_missing_week(self, db):
        assert QuestionBankService(db).get_module(3) is None

    def test_save_replaces_bank(self, db):
        service = QuestionBankService(db)
        service.save_module(sample_module(count=5))
        service.save_module(sample_module(count=2))

        assert len(service.get_module(1).questions) == 2

    def test_list_weeks(self, db):
        service = QuestionBankService(db)
        service.save_module(sample_module(week=2))
        service.save_module(sample_module(week=1))

        assert service.list_weeks() == [1, 2]


class TestLiteracyRecordService:

    def test_empty_record(self, db):
        assert LiteracyRecordService(db).get_literacy_record(PHONE) == {}

    def test_set_and_get(self, db):
        service = LiteracyRecordService(db)
        service.set_week_score(PHONE, 1, 75, True)

        record = service.get_literacy_record(PHONE)
        assert record["week_01"]["score"] == 75
        assert record["week_01"]["completed"] is True
        assert record["week_01"]["last_updated"] is not None

    def test_retake_overwrites(self, db):
        service = LiteracyRecordService(db)
        service.set_week_score(PHONE, 2, 50, False)
        service.set_week_score(PHONE, 2, 100, True)

        record = service.get_literacy_record(PHONE)
        assert list(record) == ["week_02"]
        assert record["week_02"]["score"] == 100
        assert record["week_02"]["completed"] is True

    def test_records_are_per_user(self, db):
        service = LiteracyRecordService(db)
        service.set_week_score(PHONE, 1, 100, True)

        assert service.get_literacy_record("628999") == {}


class TestEngagementRecordService:

    def test_new_user_gets_empty_record(self, db):
        record = EngagementRecordService(db).get_engagement_record(PHONE)

        assert record.total_interactions == 0
        assert record.activity_calendar == set()

    def test_save_and_load(self, db):
        service = EngagementRecordService(db)
        record = create_engagement(now=datetime(2026, 10, 1, tzinfo=timezone.utc))
        record = record_interaction(record, "quiz", today=date(2026, 10, 18))
        record = record_interaction(record, "menu", today=date(2026, 10, 19))
        service.save_engagement_record(PHONE, record)

        loaded = service.get_engagement_record(PHONE)
        assert loaded.total_interactions == 2
        assert loaded.activity_calendar == {"2026-10-18", "2026-10-19"}
        assert loaded.activity_breakdown == {"quiz": 1, "menu": 1}
        assert loaded.streak_days == 2

    def test_save_updates_existing(self, db):
        service = EngagementRecordService(db)
        record = record_interaction(create_engagement(), "quiz", today=date(2026, 10, 19))
        service.save_engagement_record(PHONE, record)
        record = record_interaction(record, "quiz", today=date(2026, 10, 19))
        service.save_engagement_record(PHONE, record)

        assert service.get_engagement_record(PHONE).activity_breakdown == {"quiz": 2}
