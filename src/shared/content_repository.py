"""
Catalog writes: categories and exercises maintained by content authors
"""
import logging
from typing import Dict, Any, Optional

from psycopg.types.json import Jsonb

from shared.database import execute_query, execute_query_one
from shared.models import Category, Exercise, instructions_to_value
from shared.progress_repository import EXERCISE_COLUMNS, row_to_category, row_to_exercise

logger = logging.getLogger(__name__)


def category_exists(category_id: str) -> bool:
    row = execute_query_one("SELECT 1 FROM categories WHERE id::text = %s", (category_id,))
    return bool(row)


def category_name_taken(name: str, exclude_id: Optional[str] = None) -> bool:
    """Case-insensitive check for another category with the same name"""
    if exclude_id:
        row = execute_query_one(
            "SELECT 1 FROM categories WHERE LOWER(name) = LOWER(%s) AND id::text <> %s",
            (name, exclude_id)
        )
    else:
        row = execute_query_one("SELECT 1 FROM categories WHERE LOWER(name) = LOWER(%s)", (name,))
    return bool(row)


def create_category(name: str, description: str = '', icon: str = '') -> Category:
    row = execute_query_one(
        """
        INSERT INTO categories (name, description, icon)
        VALUES (%s, %s, %s)
        RETURNING id, name, description, icon
        """,
        (name, description, icon)
    )
    logger.info(f"Created category {row[0]} ({name})")
    return row_to_category(row)


def update_category(category_id: str, fields: Dict[str, Any]) -> Optional[Category]:
    """Update the given columns (name, description, icon); None when the category is missing"""
    updates = []
    params = []
    for column in ('name', 'description', 'icon'):
        if column in fields:
            updates.append(f"{column} = %s")
            params.append(fields[column])

    if not updates:
        raise ValueError('No valid fields to update')

    params.append(category_id)
    row = execute_query_one(
        f"""
        UPDATE categories
        SET {', '.join(updates)}
        WHERE id::text = %s
        RETURNING id, name, description, icon
        """,
        tuple(params)
    )
    return row_to_category(row) if row else None


def count_category_exercises(category_id: str) -> int:
    row = execute_query_one("SELECT COUNT(*) FROM exercises WHERE category_id::text = %s", (category_id,))
    return int(row[0]) if row else 0


def delete_category(category_id: str) -> bool:
    deleted = execute_query("DELETE FROM categories WHERE id::text = %s", (category_id,))
    return deleted > 0


def _exercise_params(exercise: Exercise) -> tuple:
    return (
        exercise.title,
        exercise.description,
        Jsonb(instructions_to_value(exercise.instructions)),
        exercise.category,
        exercise.difficulty.value,
        Jsonb(exercise.content_dict()),
        Jsonb(list(exercise.downloadable_files))
    )


def create_exercise(exercise: Exercise) -> Exercise:
    row = execute_query_one(
        f"""
        INSERT INTO exercises (
            title, description, instructions, category_id, difficulty, content, downloadable_files
        ) VALUES (%s, %s, %s, %s, %s, %s, %s)
        RETURNING {EXERCISE_COLUMNS}
        """,
        _exercise_params(exercise)
    )
    logger.info(f"Created exercise {row[0]} ({exercise.title})")
    return row_to_exercise(row)


def update_exercise(exercise_id: str, exercise: Exercise) -> Optional[Exercise]:
    """Replace an exercise document; None when the exercise is missing"""
    row = execute_query_one(
        f"""
        UPDATE exercises
        SET title = %s, description = %s, instructions = %s, category_id = %s,
            difficulty = %s, content = %s, downloadable_files = %s,
            updated_at = CURRENT_TIMESTAMP
        WHERE id::text = %s
        RETURNING {EXERCISE_COLUMNS}
        """,
        _exercise_params(exercise) + (exercise_id,)
    )
    return row_to_exercise(row) if row else None


def delete_exercise(exercise_id: str) -> bool:
    deleted = execute_query("DELETE FROM exercises WHERE id::text = %s", (exercise_id,))
    return deleted > 0
