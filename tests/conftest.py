"""
Pytest configuration and fixtures for ESL progress service tests
Handles environment configuration and shared sample data
"""
import json
import os
import sys
import pytest
from datetime import datetime, timezone
from pathlib import Path

# Set environment variables BEFORE any imports of the shared modules
os.environ.setdefault('AWS_REGION', 'us-east-1')
os.environ.setdefault('ENVIRONMENT', 'local')

# Add src directories to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from shared.models import Category, Exercise, ProgressRecord  # noqa: E402


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (no external services)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (may be slow)"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment defaults"""
    required_env_vars = {
        'AWS_ACCESS_KEY_ID': 'test',
        'AWS_SECRET_ACCESS_KEY': 'test',
        'AWS_DEFAULT_REGION': 'us-east-1',
        'ENVIRONMENT': 'local',
        'DB_HOST': 'localhost',
        'DB_PORT': '5432',
        'DB_NAME': 'esl_progress',
        'DB_USER': 'esl_user',
        'DB_PASSWORD': 'esl_password',
        'AWS_REGION': 'us-east-1'
    }

    for key, default_value in required_env_vars.items():
        if key not in os.environ:
            os.environ[key] = default_value


def make_event(method, path, user_id='user-1', groups=None, body=None,
               path_parameters=None, query_parameters=None, authenticated=True):
    """API Gateway proxy event with Cognito authorizer claims"""
    event = {
        'httpMethod': method,
        'path': path,
        'pathParameters': path_parameters,
        'queryStringParameters': query_parameters,
        'body': json.dumps(body) if body is not None else None,
        'requestContext': {}
    }
    if authenticated:
        event['requestContext']['authorizer'] = {
            'claims': {
                'sub': user_id,
                'email': f'{user_id}@example.com',
                'cognito:username': f'{user_id}@example.com',
                'cognito:groups': ','.join(groups or ['student']),
                'email_verified': 'true'
            }
        }
    return event


def make_exercise(exercise_id, category, title=None, difficulty='beginner', questions=None,
                  exercise_type='multiple-choice', created_at=None):
    return Exercise.from_dict({
        'id': exercise_id,
        'title': title or f'Exercise {exercise_id}',
        'description': 'Sample exercise',
        'instructions': 'Choose the correct answer.',
        'category': category,
        'difficulty': difficulty,
        'content': {
            'type': exercise_type,
            'questions': questions if questions is not None else [
                {'id': '1', 'question': 'She ___ to work.', 'options': ['go', 'goes'], 'correctAnswer': 'goes'}
            ]
        },
        'created_at': created_at
    })


def completed(user_id, exercise_id, score, completed_at):
    return ProgressRecord(user_id=user_id, exercise_id=exercise_id, completed=True,
                          score=score, completed_at=completed_at)


@pytest.fixture
def now():
    return datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def catalog():
    """Two categories (Grammar, Tenses) and three exercises"""
    exercises = [
        make_exercise('ex-1', 'cat-tenses', title='Present Simple Tense'),
        make_exercise('ex-2', 'cat-tenses', title='Past Simple Tense', difficulty='intermediate'),
        make_exercise('ex-3', 'cat-grammar', title='Articles', difficulty='advanced'),
    ]
    categories = [
        Category(id='cat-grammar', name='Grammar', exercises=[exercises[2]]),
        Category(id='cat-tenses', name='Tenses', exercises=exercises[:2]),
    ]
    return {'exercises': exercises, 'categories': categories}
