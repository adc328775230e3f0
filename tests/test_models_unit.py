"""
Unit tests for domain models
Tests instructions resolution, question variants and serialization
"""
import pytest
from datetime import datetime, timezone
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.models import (
    Category,
    EssayQuestion,
    Exercise,
    ExerciseType,
    FillBlanksQuestion,
    LegacyInstructions,
    LocalizedInstructions,
    ProgressRecord,
    TrueFalseQuestion,
    instructions_from_value,
    instructions_to_value,
    question_from_dict,
    resolve_instructions
)


@pytest.mark.unit
class TestInstructions:
    """Test the legacy/localized instructions union"""

    def test_plain_string_is_legacy(self):
        instructions = instructions_from_value('Choose the right answer.')

        assert instructions == LegacyInstructions('Choose the right answer.')
        assert resolve_instructions(instructions, 'es') == 'Choose the right answer.'

    def test_requested_language(self):
        instructions = instructions_from_value({'en': 'Read', 'es': 'Lee'})

        assert resolve_instructions(instructions, 'es') == 'Lee'

    def test_falls_back_to_english(self):
        instructions = LocalizedInstructions({'en': 'Read', 'es': 'Lee'})

        assert resolve_instructions(instructions, 'de') == 'Read'

    def test_empty_when_nothing_matches(self):
        instructions = LocalizedInstructions({'fr': 'Lisez'})

        assert resolve_instructions(instructions, 'de') == ''

    def test_empty_translation_falls_back(self):
        instructions = LocalizedInstructions({'en': 'Read', 'it': ''})

        assert resolve_instructions(instructions, 'it') == 'Read'

    def test_none_becomes_empty_legacy(self):
        assert instructions_from_value(None) == LegacyInstructions('')

    def test_round_trip_values(self):
        assert instructions_to_value(LegacyInstructions('Go')) == 'Go'
        assert instructions_to_value(LocalizedInstructions({'en': 'Go'})) == {'en': 'Go'}


@pytest.mark.unit
class TestQuestionVariants:
    """Test building question variants from stored documents"""

    def test_true_false_from_string(self):
        question = question_from_dict(ExerciseType.TRUE_FALSE, {
            'id': '1', 'question': 'Tom is a doctor.', 'correctAnswer': 'False',
            'passageText': 'Tom works at a school.'
        })

        assert isinstance(question, TrueFalseQuestion)
        assert question.correct is False
        assert question.expected_answer == 'False'
        assert question.to_dict()['passageText'] == 'Tom works at a school.'

    def test_fill_blanks_string_answer_becomes_list(self):
        question = question_from_dict(ExerciseType.FILL_BLANKS, {
            'id': '1', 'question': 'She ___ tea.', 'correctAnswer': 'drinks'
        })

        assert isinstance(question, FillBlanksQuestion)
        assert question.blanks == ['drinks']
        assert question.to_dict()['blanksCount'] == 1

    def test_essay_has_no_expected_answer(self):
        question = question_from_dict(ExerciseType.ESSAY, {'id': '1', 'question': 'Write.'})

        assert isinstance(question, EssayQuestion)
        assert question.expected_answer is None

    def test_multiple_choice_to_dict(self):
        question = question_from_dict(ExerciseType.MULTIPLE_CHOICE, {
            'id': '2', 'question': 'Pick', 'options': ['a', 'b'], 'correctAnswer': 'b'
        })

        assert question.to_dict() == {'id': '2', 'question': 'Pick', 'options': ['a', 'b'], 'correctAnswer': 'b'}


@pytest.mark.unit
class TestCatalogSerialization:
    """Test exercise, category and progress serialization"""

    def test_exercise_round_trip(self):
        data = {
            'id': 'ex-1',
            'title': 'Past Simple Tense',
            'description': 'Practice past simple tense forms',
            'instructions': {'en': 'Choose', 'es': 'Elige'},
            'category': 'cat-tenses',
            'difficulty': 'intermediate',
            'content': {
                'type': 'multiple-choice',
                'questions': [{'id': '1', 'question': 'I ___ it.', 'options': ['do', 'did'],
                               'correctAnswer': 'did', 'explanation': 'Past of do.'}]
            }
        }
        exercise = Exercise.from_dict(data)
        serialized = exercise.to_dict()

        assert serialized['difficulty'] == 'intermediate'
        assert serialized['instructions'] == {'en': 'Choose', 'es': 'Elige'}
        assert serialized['content'] == data['content']

    def test_category_to_dict(self):
        exercise = Exercise.from_dict({'id': 'ex-1', 'title': 'T', 'category': 'c1',
                                       'content': {'type': 'essay', 'questions': []}})
        category = Category(id='c1', name='Grammar', icon='book', exercises=[exercise])

        assert category.to_dict()['exercise_count'] == 1
        assert len(category.to_dict()['exercises']) == 1
        assert 'exercises' not in category.to_dict(include_exercises=False)

    def test_progress_record_to_dict(self):
        moment = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
        record = ProgressRecord('u1', 'ex-1', completed=True, score=90, completed_at=moment)

        assert record.to_dict() == {
            'user_id': 'u1',
            'exercise_id': 'ex-1',
            'completed': True,
            'score': 90,
            'completed_at': '2024-03-15T12:00:00+00:00'
        }
