"""
Plain-text reports for exercise results and overall progress
"""
from datetime import datetime, timezone
from typing import Mapping, Optional, Sequence

from shared.grading import Answer
from shared.models import (
    Exercise, GradeResult, MultipleChoiceQuestion, MatchingQuestion, ProgressRecord
)
from shared.stats_utils import average_score, exercise_title, index_exercises

SEPARATOR = '─' * 50


def grade_message(percentage: int) -> str:
    if percentage >= 80:
        return 'Excellent! Keep up the great work!'
    elif percentage >= 60:
        return 'Good job! Continue practicing to improve.'
    return "Keep studying and try again. You'll improve with practice!"


def _format_answer(answer) -> str:
    if answer is None:
        return '(no answer)'
    if isinstance(answer, (list, tuple)):
        return ', '.join(str(item) for item in answer)
    return str(answer)


def generate_results_report(exercise: Exercise, answers: Mapping[str, Answer], result: GradeResult,
                            completed_at: Optional[datetime] = None,
                            category_name: Optional[str] = None) -> str:
    """Detailed results of one graded attempt; category_name falls back to the category id"""
    completed_at = completed_at or datetime.now(timezone.utc)

    lines = [
        'ESL EXERCISES - EXERCISE RESULTS',
        '=====================================',
        '',
        f'Exercise: {exercise.title}',
        f'Description: {exercise.description}',
        f'Category: {category_name or exercise.category}',
        f'Difficulty: {exercise.difficulty.value}',
        f"Completed: {completed_at.strftime('%Y-%m-%d at %H:%M')}",
        f'Final Score: {result.percentage}%',
        '',
        'DETAILED RESULTS:',
        '=================',
        '',
    ]

    for index, (question, correct) in enumerate(zip(exercise.questions, result.per_question_correct)):
        lines.append(f'Question {index + 1}:')
        lines.append(question.question)
        lines.append('')

        if isinstance(question, (MultipleChoiceQuestion, MatchingQuestion)) and question.options:
            lines.append('Options:')
            for option_index, option in enumerate(question.options):
                lines.append(f'  {chr(65 + option_index)}) {option}')
            lines.append('')

        lines.append(f'Your Answer: {_format_answer(answers.get(question.id))}')
        if question.expected_answer is not None:
            lines.append(f'Correct Answer: {_format_answer(question.expected_answer)}')
        lines.append(f"Result: {'CORRECT' if correct else 'INCORRECT'}")
        if question.explanation:
            lines.append(f'Explanation: {question.explanation}')
        lines.append('')
        lines.append(SEPARATOR)
        lines.append('')

    lines.extend([
        'SUMMARY:',
        '========',
        f'Correct Answers: {result.correct_count}/{result.total_questions}',
        f'Percentage: {result.percentage}%',
        f'Grade: {grade_message(result.percentage)}',
    ])
    return '\n'.join(lines) + '\n'


def generate_progress_report(progress: Sequence[ProgressRecord], user_name: str,
                             exercises: Sequence[Exercise] = (),
                             now: Optional[datetime] = None) -> str:
    """Overview of a user's attempted and completed exercises"""
    now = now or datetime.now(timezone.utc)
    exercise_index = index_exercises(exercises)
    completed = [record for record in progress if record.completed]

    lines = [
        'ESL EXERCISES - PROGRESS REPORT',
        '===============================',
        '',
        f'Student: {user_name}',
        f"Report Generated: {now.strftime('%Y-%m-%d')}",
        '',
        'OVERVIEW:',
        '=========',
        f'Total Exercises Attempted: {len(progress)}',
        f'Completed Exercises: {len(completed)}',
        f'Average Score: {average_score(completed)}%',
        '',
        'DETAILED PROGRESS:',
        '==================',
        '',
    ]

    for index, record in enumerate(completed):
        lines.append(f'{index + 1}. {exercise_title(exercise_index, record.exercise_id)} ({record.exercise_id})')
        lines.append(f"   Score: {record.score if record.score is not None else '-'}%")
        if record.completed_at:
            lines.append(f"   Completed: {record.completed_at.strftime('%Y-%m-%d')}")
        lines.append('')

    return '\n'.join(lines) + '\n'
