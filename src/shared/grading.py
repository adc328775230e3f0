"""
Grading of exercise attempts
Each question is either correct or not; there is no partial credit
"""
from typing import Dict, Any, List, Mapping, Sequence, Union

from shared.exercise_validation import InvalidExercise
from shared.models import (
    EssayQuestion, FillBlanksQuestion, GradeResult, MatchingQuestion, Question
)
from shared.stats_utils import round_half_up

Answer = Union[str, Sequence[str]]


def _as_sequence(answer: Answer) -> List[str]:
    if isinstance(answer, str):
        return [answer]
    return list(answer)


def is_answer_correct(question: Question, answer: Any) -> bool:
    """Exact comparison against the question's expected answer"""
    if answer is None:
        return False

    if isinstance(question, EssayQuestion):
        return isinstance(answer, str) and bool(answer.strip())

    if isinstance(question, (MatchingQuestion, FillBlanksQuestion)):
        if not isinstance(answer, (str, list, tuple)):
            return False
        return _as_sequence(answer) == list(question.expected_answer)

    return isinstance(answer, str) and answer == question.expected_answer


def grade_attempt(questions: Sequence[Question], answers: Mapping[str, Answer]) -> GradeResult:
    """
    Grade submitted answers keyed by question id.

    Raises:
        InvalidExercise: when there are no questions to grade
    """
    if not questions:
        raise InvalidExercise({'content.questions': 'An exercise needs at least one question.'})

    per_question_correct = [
        is_answer_correct(question, answers.get(question.id))
        for question in questions
    ]
    correct_count = sum(1 for correct in per_question_correct if correct)

    return GradeResult(
        percentage=round_half_up(100 * correct_count / len(questions)),
        per_question_correct=per_question_correct
    )


def describe_results(questions: Sequence[Question], answers: Mapping[str, Answer],
                     result: GradeResult) -> List[Dict[str, Any]]:
    """Per-question breakdown shown after submitting an exercise"""
    details = []
    for question, correct in zip(questions, result.per_question_correct):
        details.append({
            'question_id': question.id,
            'question': question.question,
            'your_answer': answers.get(question.id),
            'correct_answer': question.expected_answer,
            'is_correct': correct,
            'explanation': question.explanation
        })
    return details
