"""
Unit tests for attempt grading
Tests exact per-variant comparison and percentage rounding
"""
import pytest
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.exercise_validation import InvalidExercise
from shared.grading import describe_results, grade_attempt, is_answer_correct
from shared.models import (
    EssayQuestion,
    FillBlanksQuestion,
    MatchingQuestion,
    MultipleChoiceQuestion,
    TrueFalseQuestion
)


def multiple_choice(question_id, correct):
    return MultipleChoiceQuestion(id=question_id, question='Pick one', options=['A', 'B', 'C'],
                                  correct_option=correct, explanation=f'{correct} is right')


@pytest.mark.unit
class TestGradeAttempt:
    """Test grading of whole attempts"""

    def test_mixed_example_scores_half(self):
        questions = [
            multiple_choice('1', 'B'),
            TrueFalseQuestion(id='2', question='The sky is green.', correct=True)
        ]
        result = grade_attempt(questions, {'1': 'B', '2': 'False'})

        assert result.percentage == 50
        assert result.per_question_correct == [True, False]
        assert result.correct_count == 1
        assert result.total_questions == 2

    def test_percentage_rounds_half_up(self):
        questions = [multiple_choice(str(i), 'A') for i in range(8)]
        answers = {'0': 'A', '1': 'A', '2': 'A'}  # 3/8 = 37.5%

        assert grade_attempt(questions, answers).percentage == 38

    def test_two_thirds(self):
        questions = [multiple_choice(str(i), 'A') for i in range(3)]

        assert grade_attempt(questions, {'0': 'A', '1': 'A'}).percentage == 67

    def test_missing_answers_are_wrong(self):
        questions = [multiple_choice('1', 'A'), multiple_choice('2', 'B')]
        result = grade_attempt(questions, {})

        assert result.percentage == 0
        assert result.per_question_correct == [False, False]

    def test_zero_questions_rejected(self):
        with pytest.raises(InvalidExercise) as exc_info:
            grade_attempt([], {})

        assert 'content.questions' in exc_info.value.errors


@pytest.mark.unit
class TestAnswerComparison:
    """Test the comparison rule of each question variant"""

    def test_multiple_choice_is_exact(self):
        question = multiple_choice('1', 'goes')

        assert is_answer_correct(question, 'goes')
        assert not is_answer_correct(question, 'Goes')
        assert not is_answer_correct(question, ' goes')
        assert not is_answer_correct(question, ['goes'])

    def test_true_false_uses_strings(self):
        question = TrueFalseQuestion(id='1', question='?', correct=False, passage_text='Passage')

        assert is_answer_correct(question, 'False')
        assert not is_answer_correct(question, 'True')
        assert not is_answer_correct(question, False)

    def test_matching_is_element_wise(self):
        question = MatchingQuestion(id='1', question='Match', left_column=['cat', 'dog'],
                                    options=['perro', 'gato'], pairs=['B', 'A'])

        assert is_answer_correct(question, ['B', 'A'])
        assert not is_answer_correct(question, ['A', 'B'])
        assert not is_answer_correct(question, ['B'])

    def test_fill_blanks_exact_without_trimming(self):
        question = FillBlanksQuestion(id='1', question='I ___ and she ___.', blanks=['run', 'runs'])

        assert is_answer_correct(question, ['run', 'runs'])
        assert not is_answer_correct(question, ['run ', 'runs'])
        assert not is_answer_correct(question, ['Run', 'runs'])

    def test_single_blank_accepts_plain_string(self):
        question = FillBlanksQuestion(id='1', question='She ___ tea.', blanks=['drinks'])

        assert is_answer_correct(question, 'drinks')
        assert is_answer_correct(question, ['drinks'])

    def test_essay_needs_non_blank_text(self):
        question = EssayQuestion(id='1', question='Describe your weekend.')

        assert is_answer_correct(question, 'I went hiking.')
        assert not is_answer_correct(question, '   ')
        assert not is_answer_correct(question, None)


@pytest.mark.unit
class TestDescribeResults:
    """Test the per-question result breakdown"""

    def test_breakdown(self):
        questions = [multiple_choice('1', 'B'), multiple_choice('2', 'C')]
        answers = {'1': 'B', '2': 'A'}
        result = grade_attempt(questions, answers)

        details = describe_results(questions, answers, result)

        assert details[0] == {
            'question_id': '1',
            'question': 'Pick one',
            'your_answer': 'B',
            'correct_answer': 'B',
            'is_correct': True,
            'explanation': 'B is right'
        }
        assert details[1]['is_correct'] is False
        assert details[1]['your_answer'] == 'A'
        assert details[1]['correct_answer'] == 'C'
