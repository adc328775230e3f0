"""
Helpers shared by the progress aggregator and the activity feed builder
"""
from datetime import date, datetime, timezone, tzinfo
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Optional, Union

from shared.models import Exercise, ProgressRecord, UNKNOWN_EXERCISE_TITLE


def round_half_up(value: float, places: int = 0) -> Union[int, float]:
    """Round half away from zero (2.5 -> 3), unlike the built-in round()"""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def is_malformed(record: ProgressRecord) -> bool:
    """A completed record without a completion time, or a score outside 0-100"""
    if record.completed and record.completed_at is None:
        return True
    if record.score is not None and not (0 <= record.score <= 100):
        return True
    return False


def has_valid_score(record: ProgressRecord) -> bool:
    return record.score is not None and not is_malformed(record)


def average_score(records: Iterable[ProgressRecord]) -> int:
    """Rounded mean of the defined scores, 0 when there are none"""
    scores = [record.score for record in records if has_valid_score(record)]
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def to_local_date(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of a timestamp in the given zone; naive timestamps are UTC"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz or timezone.utc).date()


def as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def index_exercises(exercises: Iterable[Exercise]) -> Dict[str, Exercise]:
    return {exercise.id: exercise for exercise in exercises}


def exercise_title(exercise_index: Dict[str, Exercise], exercise_id: str) -> str:
    exercise = exercise_index.get(exercise_id)
    return exercise.title if exercise else UNKNOWN_EXERCISE_TITLE
