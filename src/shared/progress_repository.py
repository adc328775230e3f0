"""
Persistence boundary for progress aggregation
Fetches progress records, the exercise catalog and users, and writes progress
as one row per user and exercise. Database errors are not caught here;
callers decide how to report them.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional, Sequence

from shared.auth_utils import UserContext
from shared.database import execute_query, execute_query_one, get_db_cursor
from shared.models import Category, Exercise, ProgressRecord

logger = logging.getLogger(__name__)

EXERCISE_COLUMNS = """
    id, title, description, instructions, category_id, difficulty, content,
    downloadable_files, created_at, updated_at
"""

PROGRESS_COLUMNS = "user_id, exercise_id, completed, score, completed_at"


def row_to_exercise(row: Sequence[Any]) -> Exercise:
    return Exercise.from_dict({
        'id': str(row[0]),
        'title': row[1],
        'description': row[2],
        'instructions': row[3],
        'category': str(row[4]) if row[4] is not None else '',
        'difficulty': row[5],
        'content': row[6] or {},
        'downloadable_files': row[7] or [],
        'created_at': row[8],
        'updated_at': row[9]
    })


def row_to_category(row: Sequence[Any], exercises: Optional[List[Exercise]] = None) -> Category:
    return Category(
        id=str(row[0]),
        name=row[1],
        description=row[2] or '',
        icon=row[3] or '',
        exercises=exercises or []
    )


def row_to_progress(row: Sequence[Any]) -> ProgressRecord:
    return ProgressRecord(
        user_id=str(row[0]),
        exercise_id=str(row[1]),
        completed=bool(row[2]),
        score=row[3],
        completed_at=row[4]
    )


def fetch_user_progress(user_id: str) -> List[ProgressRecord]:
    """All progress records of one user"""
    rows = execute_query(
        f"SELECT {PROGRESS_COLUMNS} FROM user_progress WHERE user_id = %s",
        (user_id,)
    )
    return [row_to_progress(row) for row in rows]


def fetch_all_progress() -> List[ProgressRecord]:
    """Progress records of every user, for fleet-wide analytics"""
    rows = execute_query(f"SELECT {PROGRESS_COLUMNS} FROM user_progress")
    return [row_to_progress(row) for row in rows]


def fetch_all_exercises() -> List[Exercise]:
    rows = execute_query(f"SELECT {EXERCISE_COLUMNS} FROM exercises ORDER BY created_at")
    return [row_to_exercise(row) for row in rows]


def fetch_exercise_by_id(exercise_id: str) -> Optional[Exercise]:
    row = execute_query_one(
        f"SELECT {EXERCISE_COLUMNS} FROM exercises WHERE id::text = %s",
        (exercise_id,)
    )
    return row_to_exercise(row) if row else None


def fetch_exercises_by_category(category_id: str) -> List[Exercise]:
    rows = execute_query(
        f"SELECT {EXERCISE_COLUMNS} FROM exercises WHERE category_id::text = %s ORDER BY title",
        (category_id,)
    )
    return [row_to_exercise(row) for row in rows]


def fetch_all_categories(exercises: Optional[List[Exercise]] = None) -> List[Category]:
    """
    Categories ordered by name, each holding the exercises whose category
    matches its id exactly.
    """
    rows = execute_query("SELECT id, name, description, icon FROM categories ORDER BY name")
    if exercises is None:
        exercises = fetch_all_exercises()

    by_category: Dict[str, List[Exercise]] = {}
    for exercise in exercises:
        by_category.setdefault(exercise.category, []).append(exercise)

    return [row_to_category(row, by_category.get(str(row[0]), [])) for row in rows]


def fetch_category_by_id(category_id: str) -> Optional[Category]:
    row = execute_query_one(
        "SELECT id, name, description, icon FROM categories WHERE id::text = %s",
        (category_id,)
    )
    if not row:
        return None
    return row_to_category(row, fetch_exercises_by_category(category_id))


def fetch_category_name(category_id: str) -> Optional[str]:
    row = execute_query_one("SELECT name FROM categories WHERE id::text = %s", (category_id,))
    return row[0] if row else None


def count_users() -> int:
    row = execute_query_one("SELECT COUNT(*) FROM users")
    return int(row[0]) if row else 0


def fetch_user_labels() -> Dict[str, str]:
    """User id -> display name (or email) for analytics listings"""
    rows = execute_query("SELECT id, display_name, email FROM users")
    return {str(row[0]): row[1] or row[2] or str(row[0]) for row in rows}


def upsert_progress(user_id: str, exercise_id: str, completed: bool,
                    score: Optional[int] = None) -> ProgressRecord:
    """
    Record the outcome of an attempt, overwriting any earlier record for the
    same user and exercise. completed_at is stamped now when completed,
    cleared otherwise.
    """
    completed_at = datetime.now(timezone.utc) if completed else None

    with get_db_cursor() as cursor:
        cursor.execute(
            f"""
            INSERT INTO user_progress (user_id, exercise_id, completed, score, completed_at)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (user_id, exercise_id) DO UPDATE SET
                completed = EXCLUDED.completed,
                score = EXCLUDED.score,
                completed_at = EXCLUDED.completed_at,
                updated_at = CURRENT_TIMESTAMP
            RETURNING {PROGRESS_COLUMNS}
            """,
            (user_id, exercise_id, completed, score, completed_at)
        )
        row = cursor.fetchone()

    logger.info(f"Saved progress for user {user_id} on exercise {exercise_id}")
    return row_to_progress(row)


def upsert_user(user: UserContext) -> None:
    """Create or refresh the caller's users row from their token claims"""
    execute_query(
        """
        INSERT INTO users (id, email, display_name, is_admin)
        VALUES (%s, %s, %s, %s)
        ON CONFLICT (id) DO UPDATE SET
            email = EXCLUDED.email,
            display_name = COALESCE(EXCLUDED.display_name, users.display_name),
            is_admin = EXCLUDED.is_admin
        """,
        (user.user_id, user.email, user.display_name, user.is_admin)
    )


def delete_user(user_id: str) -> bool:
    """Delete a user's account row together with all of their progress"""
    with get_db_cursor() as cursor:
        cursor.execute("DELETE FROM user_progress WHERE user_id = %s", (user_id,))
        progress_deleted = cursor.rowcount
        cursor.execute("DELETE FROM users WHERE id = %s", (user_id,))
        user_deleted = cursor.rowcount > 0

    logger.info(f"Deleted account {user_id} and {progress_deleted} progress records")
    return user_deleted


def delete_all_progress(user_id: str) -> int:
    """Delete every progress record of a user, returning how many were removed"""
    deleted = execute_query("DELETE FROM user_progress WHERE user_id = %s", (user_id,))
    logger.info(f"Deleted {deleted} progress records for user {user_id}")
    return deleted
