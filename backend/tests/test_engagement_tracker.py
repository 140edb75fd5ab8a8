"""
Tests for the engagement tracker.

1. Streak counting from the activity calendar
2. record_interaction returns an updated copy
3. Engagement score components and caps
"""
from datetime import date, datetime, timezone

import pytest

from microcredit.models.assessment import EngagementRecord
from microcredit.services.assessment.engagement_tracker import (
    calculate_engagement_score,
    calculate_streak,
    create_engagement,
    record_interaction,
)


TODAY = date(2026, 10, 19)


class TestCalculateStreak:

    def test_three_consecutive_days(self):
        calendar = {"2026-10-19", "2026-10-18", "2026-10-17"}

        assert calculate_streak(calendar, TODAY) == 3

    def test_gap_before_today(self):
        """Only the unbroken run ending today counts."""
        calendar = {"2026-10-19", "2026-10-17", "2026-10-16", "2026-10-15"}

        assert calculate_streak(calendar, TODAY) == 1

    def test_no_activity_today(self):
        calendar = {"2026-10-18", "2026-10-17"}

        assert calculate_streak(calendar, TODAY) == 0

    def test_empty_calendar(self):
        assert calculate_streak(set(), TODAY) == 0

    def test_streak_across_month_boundary(self):
        calendar = {"2026-11-01", "2026-10-31", "2026-10-30"}

        assert calculate_streak(calendar, date(2026, 11, 1)) == 3


class TestRecordInteraction:

    def test_first_interaction(self):
        record = create_engagement()
        updated = record_interaction(record, "quiz", today=TODAY)

        assert updated.total_interactions == 1
        assert updated.activity_calendar == {"2026-10-19"}
        assert updated.activity_breakdown == {"quiz": 1}
        assert updated.streak_days == 1
        assert updated.last_interaction is not None

    def test_does_not_mutate_input(self):
        record = EngagementRecord(
            total_interactions=2,
            activity_calendar={"2026-10-18"},
            activity_breakdown={"menu": 2},
            streak_days=1,
        )
        record_interaction(record, "menu", today=TODAY)

        assert record.total_interactions == 2
        assert record.activity_calendar == {"2026-10-18"}
        assert record.activity_breakdown == {"menu": 2}

    def test_streak_recomputed(self):
        record = EngagementRecord(
            total_interactions=2,
            activity_calendar={"2026-10-18", "2026-10-17"},
            activity_breakdown={"menu": 2},
            streak_days=0,
        )
        updated = record_interaction(record, "menu", today=TODAY)

        assert updated.streak_days == 3
        assert updated.activity_breakdown == {"menu": 3}

    def test_same_day_does_not_extend_streak(self):
        record = create_engagement()
        record = record_interaction(record, "quiz", today=TODAY)
        record = record_interaction(record, "check_data", today=TODAY)

        assert record.total_interactions == 2
        assert record.streak_days == 1
        assert record.activity_breakdown == {"quiz": 1, "check_data": 1}

    def test_created_at_preserved(self):
        created = datetime(2026, 1, 1, tzinfo=timezone.utc)
        record = create_engagement(now=created)

        assert record_interaction(record, "quiz", today=TODAY).created_at == created


class TestEngagementScore:

    def test_empty_record_scores_zero(self):
        assert calculate_engagement_score(create_engagement()) == 0
        assert calculate_engagement_score(None) == 0

    def test_weighted_components(self):
        record = EngagementRecord(
            total_interactions=10,
            streak_days=3,
            activity_breakdown={"quiz": 2, "menu": 4, "voice_note": 1},
        )

        # 10*0.6 + 3*2.5 + (3*2 + 0.5*4 + 1*1)*0.5 = 6 + 7.5 + 4.5
        assert calculate_engagement_score(record) == 18

    def test_unknown_type_weighs_one(self):
        known = EngagementRecord(total_interactions=4, activity_breakdown={"other": 4})
        unknown = EngagementRecord(total_interactions=4, activity_breakdown={"sticker": 4})

        assert calculate_engagement_score(known) == calculate_engagement_score(unknown)

    def test_components_are_capped(self):
        record = EngagementRecord(
            total_interactions=500,
            streak_days=60,
            activity_breakdown={"quiz": 200, "business_advice": 200},
        )

        assert calculate_engagement_score(record) == 100

    @pytest.mark.parametrize("interactions,expected", [(1, 1), (50, 30), (100, 30)])
    def test_interaction_cap(self, interactions, expected):
        record = EngagementRecord(total_interactions=interactions)

        assert calculate_engagement_score(record) == expected
