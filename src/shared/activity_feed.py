"""
Activity feeds and fleet-wide analytics
Builds the recent-activity list for a user and the admin analytics dashboard
"""
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Dict, Any, List, Mapping, Optional, Sequence

from shared.models import (
    ActivityEntry, Category, Difficulty, Exercise, ProgressRecord
)
from shared.stats_utils import (
    as_utc, average_score, exercise_title, index_exercises, is_malformed,
    round_half_up, to_local_date
)

logger = logging.getLogger(__name__)

DIFFICULTY_COLORS = {
    Difficulty.BEGINNER: '#4CAF50',
    Difficulty.INTERMEDIATE: '#FF9800',
    Difficulty.ADVANCED: '#B71C1C',
}


def _completed_with_time(progress: Sequence[ProgressRecord]) -> List[ProgressRecord]:
    return [record for record in progress if record.completed and record.completed_at is not None]


def build_recent_activity(progress: Sequence[ProgressRecord], exercises: Sequence[Exercise],
                          limit: int = 10, success_threshold: int = 60) -> List[ActivityEntry]:
    """
    Most recent completions first, capped at ``limit``.
    Exercises missing from the catalog are shown as "Unknown Exercise".
    """
    exercise_index = index_exercises(exercises)
    completions = sorted(
        _completed_with_time(progress),
        key=lambda record: as_utc(record.completed_at),
        reverse=True
    )

    entries = []
    for record in completions[:max(limit, 0)]:
        score = record.score if record.score is not None else 0
        entries.append(ActivityEntry(
            exercise_id=record.exercise_id,
            exercise_title=exercise_title(exercise_index, record.exercise_id),
            score=score,
            completed_at=record.completed_at,
            success=score >= success_threshold,
            user_id=record.user_id
        ))
    return entries


def format_relative_time(moment: datetime, now: Optional[datetime] = None,
                         tz: Optional[tzinfo] = None) -> str:
    """Human readable age of a timestamp ("2 hours ago", "Yesterday", ...)"""
    now = as_utc(now or datetime.now(timezone.utc))
    elapsed = (now - as_utc(moment)).total_seconds()

    minutes = int(elapsed // 60)
    hours = int(elapsed // 3600)
    days = int(elapsed // 86400)

    if minutes <= 1:
        return 'Just now'
    if minutes < 60:
        return f'{minutes} minutes ago'
    if hours < 24:
        return '1 hour ago' if hours == 1 else f'{hours} hours ago'
    if days == 1:
        return 'Yesterday'
    if days < 7:
        return f'{days} days ago'

    local_date = to_local_date(moment, tz)
    return f'{local_date.month}/{local_date.day}/{local_date.year}'


def calculate_completion_rate(total_completions: int, total_exercises: int, total_users: int) -> int:
    """Completions as a percentage of every user completing every exercise"""
    if total_exercises == 0 or total_users == 0:
        return 0
    return round_half_up(total_completions / (total_exercises * total_users) * 100)


def calculate_category_performance(completions: Sequence[ProgressRecord],
                                   exercise_index: Dict[str, Exercise],
                                   categories: Sequence[Category]) -> List[Dict[str, Any]]:
    total = len(completions)
    counts = Counter(
        exercise_index[record.exercise_id].category
        for record in completions
        if record.exercise_id in exercise_index
    )

    performance = []
    for category in categories:
        count = counts.get(category.id, 0)
        performance.append({
            'name': category.name,
            'count': count,
            'percentage': round_half_up(count / total * 100, 1) if total > 0 else 0.0
        })
    return performance


def calculate_difficulty_distribution(completions: Sequence[ProgressRecord],
                                      exercise_index: Dict[str, Exercise]) -> List[Dict[str, Any]]:
    counts = Counter(
        exercise_index[record.exercise_id].difficulty
        for record in completions
        if record.exercise_id in exercise_index
    )
    return [
        {
            'name': difficulty.value.capitalize(),
            'count': counts.get(difficulty, 0),
            'color': DIFFICULTY_COLORS[difficulty]
        }
        for difficulty in Difficulty
    ]


def calculate_top_exercises(completions: Sequence[ProgressRecord],
                            exercise_index: Dict[str, Exercise],
                            limit: int = 5) -> List[Dict[str, Any]]:
    """Most completed exercises; ties keep the order they were first seen in"""
    counts: Dict[str, int] = {}
    for record in completions:
        counts[record.exercise_id] = counts.get(record.exercise_id, 0) + 1

    # sorted() is stable, so equal counts stay in insertion order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
    return [
        {
            'exercise_id': exercise_id,
            'title': exercise_title(exercise_index, exercise_id),
            'completions': count
        }
        for exercise_id, count in ranked
    ]


def calculate_activity_trend(completions: Sequence[ProgressRecord], now: Optional[datetime] = None,
                             tz: Optional[tzinfo] = None, days: int = 7) -> List[Dict[str, Any]]:
    """Distinct active users per calendar day, oldest day first"""
    today = to_local_date(now or datetime.now(timezone.utc), tz)

    users_by_day: Dict[Any, set] = {}
    for record in completions:
        if is_malformed(record):
            continue
        users_by_day.setdefault(to_local_date(record.completed_at, tz), set()).add(record.user_id)

    trend = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        trend.append({
            'day': day.strftime('%a'),
            'date': day.isoformat(),
            'users': len(users_by_day.get(day, ()))
        })
    return trend


def build_analytics(progress: Sequence[ProgressRecord], exercises: Sequence[Exercise],
                    categories: Sequence[Category], total_users: int,
                    now: Optional[datetime] = None, tz: Optional[tzinfo] = None,
                    users: Optional[Mapping[str, str]] = None, recent_limit: int = 10,
                    top_limit: int = 5, trend_days: int = 7) -> Dict[str, Any]:
    """
    Fleet-wide analytics across every user's progress records

    Args:
        progress: progress records of all users
        exercises: full exercise catalog
        categories: categories in display order
        total_users: number of registered users
        users: optional user id -> display label mapping for the activity list
    """
    exercise_index = index_exercises(exercises)
    completions = [record for record in progress if record.completed]
    total_completions = len(completions)
    users = users or {}

    recent_activity = []
    for entry in build_recent_activity(progress, exercises, limit=recent_limit):
        recent_activity.append({
            'user': users.get(entry.user_id, entry.user_id),
            'exercise': entry.exercise_title,
            'score': entry.score,
            'date': entry.completed_at.isoformat()
        })

    logger.info(f"Built analytics for {total_users} users and {total_completions} completions")

    return {
        'total_users': total_users,
        'total_exercises': len(exercises),
        'total_completions': total_completions,
        'average_score': average_score(progress),
        'completion_rate': calculate_completion_rate(total_completions, len(exercises), total_users),
        'category_performance': calculate_category_performance(completions, exercise_index, categories),
        'difficulty_distribution': calculate_difficulty_distribution(completions, exercise_index),
        'top_exercises': calculate_top_exercises(completions, exercise_index, limit=top_limit),
        'user_activity_trend': calculate_activity_trend(_completed_with_time(progress), now=now, tz=tz, days=trend_days),
        'recent_activity': recent_activity
    }


def build_admin_summary(exercises: Sequence[Exercise], categories: Sequence[Category],
                        progress: Sequence[ProgressRecord], total_users: int,
                        now: Optional[datetime] = None, tz: Optional[tzinfo] = None,
                        active_window_days: int = 30) -> Dict[str, Any]:
    """Headline counts for the admin home screen"""
    now = as_utc(now or datetime.now(timezone.utc))
    local_now = now.astimezone(tz or timezone.utc)
    start_of_month = local_now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    exercises_this_month = sum(
        1 for exercise in exercises
        if exercise.created_at is not None and as_utc(exercise.created_at) >= start_of_month
    )

    active_since = now - timedelta(days=active_window_days)
    active_users = {
        record.user_id for record in progress
        if record.completed_at is not None and as_utc(record.completed_at) >= active_since
    }

    return {
        'total_exercises': len(exercises),
        'total_users': total_users,
        'total_categories': len(categories),
        'exercises_added_this_month': exercises_this_month,
        'active_users': len(active_users)
    }
