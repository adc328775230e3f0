"""
Progress aggregation for a single user
Completion counts, average score, per-category breakdown and learning streaks
"""
import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional, Sequence

from shared.activity_feed import build_recent_activity
from shared.models import (
    AggregatedStats, Category, CategoryStats, Exercise, ProgressRecord
)
from shared.stats_utils import (
    average_score, index_exercises, is_malformed, to_local_date
)

logger = logging.getLogger(__name__)


def activity_dates(progress: Iterable[ProgressRecord], tz: Optional[tzinfo] = None) -> List[date]:
    """Distinct dates with at least one completed record, most recent first"""
    dates = {
        to_local_date(record.completed_at, tz)
        for record in progress
        if record.completed and record.completed_at is not None and not is_malformed(record)
    }
    return sorted(dates, reverse=True)


def calculate_streak(progress: Iterable[ProgressRecord], now: Optional[datetime] = None,
                     tz: Optional[tzinfo] = None) -> int:
    """
    Count consecutive calendar days with completed exercises.

    The streak is anchored at today, or at yesterday when nothing has been
    completed yet today, so a streak begun yesterday survives until the end
    of today. Any gap ends the count.
    """
    dates = activity_dates(progress, tz)
    if not dates:
        return 0

    today = to_local_date(now or datetime.now(timezone.utc), tz)
    yesterday = today - timedelta(days=1)

    if dates[0] not in (today, yesterday):
        return 0

    cursor = today if dates[0] == today else yesterday
    streak = 0
    for activity_date in dates:
        if activity_date != cursor:
            break
        streak += 1
        cursor -= timedelta(days=1)

    return streak


def calculate_category_stats(progress: Sequence[ProgressRecord], exercises: Sequence[Exercise],
                             categories: Sequence[Category]) -> List[CategoryStats]:
    """
    Per-category completion and score, in the categories' own order.
    Records for exercises missing from the catalog are not attributed.
    """
    exercise_index = index_exercises(exercises)
    completed_records = [record for record in progress if record.completed]

    category_stats = []
    for category in categories:
        total = sum(1 for exercise in exercises if exercise.category == category.id)

        category_records = [
            record for record in completed_records
            if record.exercise_id in exercise_index
            and exercise_index[record.exercise_id].category == category.id
        ]

        category_stats.append(CategoryStats(
            name=category.name,
            completed=len(category_records),
            total=total,
            avg_score=average_score(category_records)
        ))

    return category_stats


def compute_user_stats(progress: Sequence[ProgressRecord], exercises: Sequence[Exercise],
                       categories: Sequence[Category], now: Optional[datetime] = None,
                       tz: Optional[tzinfo] = None, recent_limit: int = 10,
                       success_threshold: int = 60) -> AggregatedStats:
    """Aggregate one user's progress records against the exercise catalog"""
    malformed = sum(1 for record in progress if is_malformed(record))
    if malformed:
        logger.warning(f"Ignoring {malformed} malformed progress records in score and streak calculation")

    return AggregatedStats(
        completed_exercises=sum(1 for record in progress if record.completed),
        total_exercises=len(exercises),
        average_score=average_score(progress),
        streak=calculate_streak(progress, now=now, tz=tz),
        categories=calculate_category_stats(progress, exercises, categories),
        recent_activity=build_recent_activity(
            progress, exercises, limit=recent_limit, success_threshold=success_threshold
        )
    )
