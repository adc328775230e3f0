"""
Exercise authoring validation
Rejects exercises that could not be graded before they reach the catalog
"""
import string
from typing import Dict, Any, List, Optional

from shared.models import (
    Difficulty, Exercise, ExerciseType, SUPPORTED_LANGUAGES
)


class InvalidExercise(Exception):
    """Raised when exercise content fails authoring validation"""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__(f"Exercise validation failed: {', '.join(sorted(errors))}")


def option_keys(options: List[Any]) -> List[str]:
    """Letter keys for an option list: A, B, C, ..."""
    return list(string.ascii_uppercase[:len(options)])


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def question_id_for(question: Dict[str, Any], index: int) -> str:
    """Stored id of a question, q1, q2, ... when the author gave none"""
    return str(question.get('id') or f'q{index + 1}')


def validate_instructions(instructions: Any) -> Optional[str]:
    if isinstance(instructions, dict):
        unknown = [code for code in instructions if code not in SUPPORTED_LANGUAGES]
        if unknown:
            return f"Unsupported instruction languages: {', '.join(sorted(unknown))}"
        if not any(isinstance(text, str) and text.strip() for text in instructions.values()):
            return 'Please enter exercise instructions.'
        return None
    if _is_blank(instructions):
        return 'Please enter exercise instructions.'
    return None


def validate_question(exercise_type: ExerciseType, question: Any, index: int) -> Dict[str, str]:
    """Validate one question document for the given exercise type"""
    errors = {}
    prefix = f'questions[{index}]'
    number = index + 1

    if not isinstance(question, dict):
        errors[prefix] = f'Question {number} must be an object'
        return errors

    if _is_blank(question.get('question')):
        errors[f'{prefix}.question'] = f'Please enter question {number}.'

    correct_answer = question.get('correctAnswer')

    if exercise_type == ExerciseType.MULTIPLE_CHOICE:
        options = question.get('options')
        if not isinstance(options, list) or len(options) < 2 or any(_is_blank(opt) for opt in options):
            errors[f'{prefix}.options'] = f'Please fill all options for question {number}.'
        elif _is_blank(correct_answer):
            errors[f'{prefix}.correctAnswer'] = f'Please select the correct answer for question {number}.'
        elif correct_answer not in options:
            errors[f'{prefix}.correctAnswer'] = f'Correct answer for question {number} must be one of its options.'

    elif exercise_type == ExerciseType.MATCHING:
        left_column = question.get('leftColumn')
        options = question.get('options')
        if not isinstance(left_column, list) or not left_column or any(_is_blank(item) for item in left_column):
            errors[f'{prefix}.leftColumn'] = f'Please fill all left column items for question {number}.'
        if not isinstance(options, list) or not options or any(_is_blank(opt) for opt in options):
            errors[f'{prefix}.options'] = f'Please fill all options for question {number}.'
        if not errors:
            keys = option_keys(options)
            if not isinstance(correct_answer, list) or len(correct_answer) != len(left_column):
                errors[f'{prefix}.correctAnswer'] = (
                    f'Question {number} needs one match for each of its {len(left_column)} items.'
                )
            elif any(key not in keys for key in correct_answer):
                errors[f'{prefix}.correctAnswer'] = (
                    f"Matches for question {number} must be option letters {', '.join(keys)}."
                )

    elif exercise_type == ExerciseType.FILL_BLANKS:
        blanks = correct_answer if isinstance(correct_answer, list) else [correct_answer]
        if not blanks or any(_is_blank(blank) for blank in blanks):
            errors[f'{prefix}.correctAnswer'] = f'Please enter every blank answer for question {number}.'
        else:
            blanks_count = question.get('blanksCount')
            if blanks_count is not None and blanks_count != len(blanks):
                errors[f'{prefix}.blanksCount'] = (
                    f'Question {number} declares {blanks_count} blanks but has {len(blanks)} answers.'
                )

    elif exercise_type == ExerciseType.TRUE_FALSE:
        if not isinstance(correct_answer, bool) and correct_answer not in ('True', 'False'):
            errors[f'{prefix}.correctAnswer'] = f'Correct answer for question {number} must be True or False.'

    return errors


def validate_exercise_payload(data: Any) -> Dict[str, Any]:
    """
    Validate an exercise document as submitted by a content author

    Returns:
        {'valid': bool, 'errors': {field: message}}
    """
    errors = {}

    if not isinstance(data, dict):
        return {'valid': False, 'errors': {'exercise': 'Exercise must be a JSON object'}}

    if _is_blank(data.get('title')):
        errors['title'] = 'Please enter an exercise title.'
    elif len(data['title'].strip()) > 200:
        errors['title'] = 'Title must be at most 200 characters'

    if _is_blank(data.get('description')):
        errors['description'] = 'Please enter an exercise description.'

    instructions_error = validate_instructions(data.get('instructions'))
    if instructions_error:
        errors['instructions'] = instructions_error

    if _is_blank(data.get('category')):
        errors['category'] = 'Please select a category.'

    difficulty = data.get('difficulty', Difficulty.BEGINNER.value)
    if not isinstance(difficulty, str) or difficulty not in {d.value for d in Difficulty}:
        errors['difficulty'] = f"difficulty must be one of: {', '.join(d.value for d in Difficulty)}"

    files = data.get('downloadable_files')
    if files is not None and (not isinstance(files, list) or any(_is_blank(item) for item in files)):
        errors['downloadable_files'] = 'downloadable_files must be a list of file names'

    content = data.get('content')
    if not isinstance(content, dict):
        errors['content'] = 'content is required'
        return {'valid': False, 'errors': errors}

    try:
        exercise_type = ExerciseType(content.get('type'))
    except (TypeError, ValueError):
        errors['content.type'] = f"type must be one of: {', '.join(t.value for t in ExerciseType)}"
        return {'valid': False, 'errors': errors}

    questions = content.get('questions')
    if not isinstance(questions, list) or not questions:
        errors['content.questions'] = 'An exercise needs at least one question.'
    else:
        seen_ids = set()
        for index, question in enumerate(questions):
            errors.update(validate_question(exercise_type, question, index))
            if not isinstance(question, dict):
                continue
            question_id = question_id_for(question, index)
            if question_id in seen_ids:
                errors[f'questions[{index}].id'] = f'Question id "{question_id}" is used more than once.'
            seen_ids.add(question_id)

    return {'valid': not errors, 'errors': errors}


def parse_exercise_payload(data: Dict[str, Any], exercise_id: str = '') -> Exercise:
    """Validate an authoring payload and build the Exercise, raising InvalidExercise"""
    validation = validate_exercise_payload(data)
    if not validation['valid']:
        raise InvalidExercise(validation['errors'])

    content = dict(data['content'])
    content['questions'] = [
        dict(question, id=question_id_for(question, index))
        for index, question in enumerate(content['questions'])
    ]

    return Exercise.from_dict({
        'id': exercise_id,
        'title': data['title'].strip(),
        'description': data['description'].strip(),
        'instructions': data['instructions'],
        'category': data['category'],
        'difficulty': data.get('difficulty', Difficulty.BEGINNER.value),
        'content': content,
        'downloadable_files': data.get('downloadable_files') or []
    })
