"""
Domain models for the ESL exercises progress service
Exercises, questions, categories, progress records and derived statistics
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, List, Optional, Union


UNKNOWN_EXERCISE_TITLE = 'Unknown Exercise'

SUPPORTED_LANGUAGES = ('en', 'es', 'fr', 'de', 'it')
DEFAULT_LANGUAGE = 'en'


class Difficulty(Enum):
    """Exercise difficulty levels"""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ExerciseType(Enum):
    """Exercise content types, one question variant per type"""
    MULTIPLE_CHOICE = "multiple-choice"
    FILL_BLANKS = "fill-blanks"
    TRUE_FALSE = "true-false"
    MATCHING = "matching"
    ESSAY = "essay"


# Instructions

@dataclass(frozen=True)
class LegacyInstructions:
    """Single-language instructions stored as a plain string"""
    text: str


@dataclass(frozen=True)
class LocalizedInstructions:
    """Instructions keyed by language code"""
    texts: Dict[str, str]


Instructions = Union[LegacyInstructions, LocalizedInstructions]


def instructions_from_value(value: Any) -> Instructions:
    """Parse stored instructions (string or language mapping)"""
    if isinstance(value, dict):
        return LocalizedInstructions({str(code): str(text or '') for code, text in value.items()})
    return LegacyInstructions(value or '')


def instructions_to_value(instructions: Instructions) -> Union[str, Dict[str, str]]:
    if isinstance(instructions, LocalizedInstructions):
        return dict(instructions.texts)
    return instructions.text


def resolve_instructions(instructions: Instructions, language_code: str,
                         fallback: str = DEFAULT_LANGUAGE) -> str:
    """
    Resolve instructions for a language.
    Legacy instructions are returned as-is; localized ones fall back to the
    fallback language and finally to an empty string.
    """
    if isinstance(instructions, LegacyInstructions):
        return instructions.text
    return instructions.texts.get(language_code) or instructions.texts.get(fallback) or ''


# Questions

@dataclass
class MultipleChoiceQuestion:
    id: str
    question: str
    options: List[str]
    correct_option: str
    explanation: Optional[str] = None

    @property
    def expected_answer(self) -> str:
        return self.correct_option

    def to_dict(self) -> Dict[str, Any]:
        return _question_dict(self, options=list(self.options), correctAnswer=self.correct_option)


@dataclass
class MatchingQuestion:
    """Left column items matched to lettered options (A, B, ...)"""
    id: str
    question: str
    left_column: List[str]
    options: List[str]
    pairs: List[str]
    explanation: Optional[str] = None

    @property
    def expected_answer(self) -> List[str]:
        return self.pairs

    def to_dict(self) -> Dict[str, Any]:
        return _question_dict(self, leftColumn=list(self.left_column), options=list(self.options),
                              correctAnswer=list(self.pairs))


@dataclass
class FillBlanksQuestion:
    id: str
    question: str
    blanks: List[str]
    explanation: Optional[str] = None

    @property
    def blanks_count(self) -> int:
        return len(self.blanks)

    @property
    def expected_answer(self) -> List[str]:
        return self.blanks

    def to_dict(self) -> Dict[str, Any]:
        return _question_dict(self, blanksCount=self.blanks_count, correctAnswer=list(self.blanks))


@dataclass
class TrueFalseQuestion:
    id: str
    question: str
    correct: bool
    passage_text: Optional[str] = None
    explanation: Optional[str] = None

    @property
    def expected_answer(self) -> str:
        return 'True' if self.correct else 'False'

    def to_dict(self) -> Dict[str, Any]:
        data = _question_dict(self, options=['True', 'False'], correctAnswer=self.expected_answer)
        if self.passage_text:
            data['passageText'] = self.passage_text
        return data


@dataclass
class EssayQuestion:
    id: str
    question: str
    explanation: Optional[str] = None

    @property
    def expected_answer(self) -> None:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return _question_dict(self)


Question = Union[MultipleChoiceQuestion, MatchingQuestion, FillBlanksQuestion,
                 TrueFalseQuestion, EssayQuestion]


def _question_dict(question, **fields) -> Dict[str, Any]:
    data = {'id': question.id, 'question': question.question}
    data.update(fields)
    if question.explanation:
        data['explanation'] = question.explanation
    return data


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


def question_from_dict(exercise_type: ExerciseType, data: Dict[str, Any]) -> Question:
    """
    Build the question variant for an exercise type from its stored document.

    Stored documents share one shape: ``options``, ``correctAnswer`` (string or
    list) and the optional ``leftColumn``, ``passageText`` and ``blanksCount``.
    """
    question_id = str(data.get('id', ''))
    text = data.get('question', '')
    explanation = data.get('explanation') or None
    correct_answer = data.get('correctAnswer')

    if exercise_type == ExerciseType.MULTIPLE_CHOICE:
        return MultipleChoiceQuestion(
            id=question_id,
            question=text,
            options=_as_list(data.get('options')),
            correct_option='' if correct_answer is None else str(correct_answer),
            explanation=explanation
        )
    if exercise_type == ExerciseType.MATCHING:
        return MatchingQuestion(
            id=question_id,
            question=text,
            left_column=_as_list(data.get('leftColumn')),
            options=_as_list(data.get('options')),
            pairs=_as_list(correct_answer),
            explanation=explanation
        )
    if exercise_type == ExerciseType.FILL_BLANKS:
        return FillBlanksQuestion(
            id=question_id,
            question=text,
            blanks=_as_list(correct_answer),
            explanation=explanation
        )
    if exercise_type == ExerciseType.TRUE_FALSE:
        if isinstance(correct_answer, bool):
            correct = correct_answer
        else:
            correct = str(correct_answer) == 'True'
        return TrueFalseQuestion(
            id=question_id,
            question=text,
            correct=correct,
            passage_text=data.get('passageText') or None,
            explanation=explanation
        )
    return EssayQuestion(id=question_id, question=text, explanation=explanation)


# Catalog

@dataclass
class Exercise:
    id: str
    title: str
    description: str
    category: str
    difficulty: Difficulty
    exercise_type: ExerciseType
    questions: List[Question]
    instructions: Instructions = field(default_factory=lambda: LegacyInstructions(''))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    downloadable_files: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Exercise':
        content = data.get('content') or {}
        exercise_type = ExerciseType(content.get('type', ExerciseType.MULTIPLE_CHOICE.value))
        return cls(
            id=str(data['id']),
            title=data.get('title', ''),
            description=data.get('description', ''),
            category=str(data.get('category', '')),
            difficulty=Difficulty(data.get('difficulty', Difficulty.BEGINNER.value)),
            exercise_type=exercise_type,
            questions=[question_from_dict(exercise_type, q) for q in content.get('questions', [])],
            instructions=instructions_from_value(data.get('instructions')),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
            downloadable_files=list(data.get('downloadable_files') or [])
        )

    def content_dict(self) -> Dict[str, Any]:
        return {
            'type': self.exercise_type.value,
            'questions': [q.to_dict() for q in self.questions]
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'instructions': instructions_to_value(self.instructions),
            'category': self.category,
            'difficulty': self.difficulty.value,
            'content': self.content_dict(),
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'downloadable_files': list(self.downloadable_files)
        }


@dataclass
class Category:
    id: str
    name: str
    description: str = ''
    icon: str = ''
    exercises: List[Exercise] = field(default_factory=list)

    def to_dict(self, include_exercises: bool = True) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'icon': self.icon,
            'exercise_count': len(self.exercises)
        }
        if include_exercises:
            data['exercises'] = [exercise.to_dict() for exercise in self.exercises]
        return data


# Progress

@dataclass
class ProgressRecord:
    """Outcome of one user's latest attempt at one exercise"""
    user_id: str
    exercise_id: str
    completed: bool
    score: Optional[int] = None
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'exercise_id': self.exercise_id,
            'completed': self.completed,
            'score': self.score,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None
        }


@dataclass
class CategoryStats:
    name: str
    completed: int
    total: int
    avg_score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'completed': self.completed,
            'total': self.total,
            'avg_score': self.avg_score
        }


@dataclass
class ActivityEntry:
    exercise_id: str
    exercise_title: str
    score: int
    completed_at: datetime
    success: bool
    user_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'exercise_id': self.exercise_id,
            'exercise_title': self.exercise_title,
            'score': self.score,
            'completed_at': self.completed_at.isoformat(),
            'success': self.success
        }


@dataclass
class AggregatedStats:
    completed_exercises: int
    total_exercises: int
    average_score: int
    streak: int
    categories: List[CategoryStats]
    recent_activity: List[ActivityEntry]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'completed_exercises': self.completed_exercises,
            'total_exercises': self.total_exercises,
            'average_score': self.average_score,
            'streak': self.streak,
            'categories': [c.to_dict() for c in self.categories],
            'recent_activity': [a.to_dict() for a in self.recent_activity]
        }


@dataclass
class GradeResult:
    percentage: int
    per_question_correct: List[bool]

    @property
    def total_questions(self) -> int:
        return len(self.per_question_correct)

    @property
    def correct_count(self) -> int:
        return sum(1 for correct in self.per_question_correct if correct)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'percentage': self.percentage,
            'per_question_correct': list(self.per_question_correct),
            'correct_count': self.correct_count,
            'total_questions': self.total_questions
        }
