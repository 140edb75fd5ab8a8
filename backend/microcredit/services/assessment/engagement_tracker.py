"""
Engagement Tracker

Turns a user's WhatsApp activity log into a streak count and a 0-100
engagement score. All functions are stateless transforms: the caller loads
the EngagementRecord, passes it through here and saves the returned copy.

Score composition (max 100):
- Interactions: 0.6 per interaction, capped at 30
- Streak:       2.5 per consecutive day, capped at 30
- Quality:      0.5 * weight * count per activity type, capped at 40
"""
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, Optional

from ...models.assessment import EngagementRecord
from .numeric import round_half_up


ACTIVITY_WEIGHTS: Dict[str, float] = {
    "quiz": 3,
    "business_advice": 3,
    "check_data": 1,
    "menu": 0.5,
    "other": 1,
}

DEFAULT_ACTIVITY_WEIGHT = 1

INTERACTION_POINTS = 0.6
INTERACTION_CAP = 30
STREAK_POINTS = 2.5
STREAK_CAP = 30
QUALITY_FACTOR = 0.5
QUALITY_CAP = 40


def create_engagement(now: Optional[datetime] = None) -> EngagementRecord:
    return EngagementRecord(created_at=now or datetime.now(timezone.utc))


def record_interaction(
    record: EngagementRecord,
    activity_type: str,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> EngagementRecord:
    """Return a copy of record with one more interaction of activity_type."""
    now = now or datetime.now(timezone.utc)
    today = today or now.date()

    calendar = set(record.activity_calendar)
    calendar.add(today.isoformat())

    breakdown = dict(record.activity_breakdown)
    breakdown[activity_type] = breakdown.get(activity_type, 0) + 1

    return EngagementRecord(
        total_interactions=record.total_interactions + 1,
        activity_calendar=calendar,
        activity_breakdown=breakdown,
        streak_days=calculate_streak(calendar, today),
        last_interaction=now,
        created_at=record.created_at or now,
    )


def calculate_streak(calendar: Iterable[str], today: Optional[date] = None) -> int:
    """
    Count consecutive active days ending today.

    Walks backward from today while each date is in the calendar.
    No activity today means a streak of 0.
    """
    days = set(calendar)
    check = today or datetime.now(timezone.utc).date()

    streak = 0
    while check.isoformat() in days:
        streak += 1
        check -= timedelta(days=1)
    return streak


def calculate_engagement_score(record: Optional[EngagementRecord]) -> int:
    if record is None or record.total_interactions == 0:
        return 0

    interaction_score = min(INTERACTION_CAP, record.total_interactions * INTERACTION_POINTS)
    streak_score = min(STREAK_CAP, record.streak_days * STREAK_POINTS)

    quality_score = 0.0
    for activity_type, count in record.activity_breakdown.items():
        weight = ACTIVITY_WEIGHTS.get(activity_type, DEFAULT_ACTIVITY_WEIGHT)
        quality_score += weight * count * QUALITY_FACTOR
    quality_score = min(QUALITY_CAP, quality_score)

    return min(100, round_half_up(interaction_score + streak_score + quality_score))
