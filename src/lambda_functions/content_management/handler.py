"""
Content Management Lambda Function Handler
Handles the exercise catalog: categories, exercises and localized instructions
"""
import logging
from typing import Dict, Any

from shared.auth_utils import UserContext, extract_user_from_cognito_event, get_user_context, require_admin
from shared.content_repository import (
    category_exists, category_name_taken, count_category_exercises, create_category,
    create_exercise, delete_category, delete_exercise, update_category, update_exercise
)
from shared.exercise_validation import InvalidExercise, parse_exercise_payload
from shared.models import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES, resolve_instructions
from shared.progress_repository import (
    fetch_all_categories, fetch_all_exercises, fetch_exercise_by_id, fetch_exercises_by_category,
    upsert_user
)
from shared.response_utils import (
    cors_middleware, create_created_response, create_error_response, create_not_found_response,
    create_success_response, create_unauthorized_response, create_validation_error_response,
    get_path_parameters, get_query_parameters, handle_error, parse_request_body
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


@cors_middleware
def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main handler for content management operations
    Routes:
    - GET /categories - List categories with their exercises
    - POST /categories - Create category (admin)
    - PUT /categories/{id} - Update category (admin)
    - DELETE /categories/{id} - Delete empty category (admin)
    - GET /exercises - List exercises, optionally ?category=ID
    - GET /exercises/{id} - Get exercise
    - GET /exercises/{id}/instructions - Instructions resolved for ?lang=xx
    - POST /exercises - Create exercise (admin)
    - PUT /exercises/{id} - Replace exercise (admin)
    - DELETE /exercises/{id} - Delete exercise (admin)
    """
    try:
        http_method = event.get('httpMethod')
        path = event.get('path', '').rstrip('/')

        auth_result = extract_user_from_cognito_event(event)
        if not auth_result['valid']:
            return create_unauthorized_response('Unauthorized - No user identity found')

        user = get_user_context(event)
        upsert_user(user)

        # Route to appropriate handler
        if http_method == 'GET' and path.endswith('/categories'):
            return handle_get_categories()
        elif http_method == 'POST' and path.endswith('/categories'):
            return handle_create_category(event, user)
        elif http_method == 'PUT' and '/categories/' in path:
            return handle_update_category(event, user)
        elif http_method == 'DELETE' and '/categories/' in path:
            return handle_delete_category(event, user)
        elif http_method == 'GET' and path.endswith('/instructions'):
            return handle_get_instructions(event)
        elif http_method == 'GET' and path.endswith('/exercises'):
            return handle_get_exercises(event)
        elif http_method == 'GET' and '/exercises/' in path:
            return handle_get_exercise(event)
        elif http_method == 'POST' and path.endswith('/exercises'):
            return handle_create_exercise(event, user)
        elif http_method == 'PUT' and '/exercises/' in path:
            return handle_update_exercise(event, user)
        elif http_method == 'DELETE' and '/exercises/' in path:
            return handle_delete_exercise(event, user)
        else:
            return create_not_found_response('Endpoint not found')

    except Exception as e:
        logger.error(f"Content management error: {e}", exc_info=True)
        return handle_error(e)


def _resource_id(event: Dict[str, Any], resource: str) -> str:
    path_params = get_path_parameters(event)
    if path_params.get('id'):
        return path_params['id']
    return event.get('path', '').split(f'/{resource}/')[-1].split('/')[0]


def _validate_category_fields(body: Dict[str, Any], partial: bool = False) -> Dict[str, str]:
    errors = {}

    if 'name' in body or not partial:
        name = body.get('name')
        if not isinstance(name, str) or not name.strip():
            errors['name'] = 'Name is required'
        elif len(name.strip()) < 2 or len(name.strip()) > 100:
            errors['name'] = 'Name must be between 2 and 100 characters'

    description = body.get('description')
    if description is not None:
        if not isinstance(description, str):
            errors['description'] = 'Description must be a string'
        elif len(description.strip()) > 500:
            errors['description'] = 'Description must be at most 500 characters'

    icon = body.get('icon')
    if icon is not None and not isinstance(icon, str):
        errors['icon'] = 'Icon must be a string'

    return errors


def handle_get_categories() -> Dict[str, Any]:
    """Categories ordered by name, each with its exercises"""
    categories = fetch_all_categories()
    return create_success_response({
        'categories': [category.to_dict() for category in categories],
        'count': len(categories)
    })


def handle_create_category(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """Create a new category"""
    require_admin(user)
    body = parse_request_body(event)

    errors = _validate_category_fields(body)
    if errors:
        return create_validation_error_response(errors)

    name = body['name'].strip()
    if category_name_taken(name):
        return create_error_response(409, 'Category with this name already exists', 'CONFLICT')

    category = create_category(
        name,
        (body.get('description') or '').strip(),
        (body.get('icon') or '').strip()
    )
    return create_created_response(category.to_dict(include_exercises=False), 'Category created successfully')


def handle_update_category(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """Update category name, description or icon"""
    require_admin(user)
    category_id = _resource_id(event, 'categories')
    body = parse_request_body(event)

    errors = _validate_category_fields(body, partial=True)
    if errors:
        return create_validation_error_response(errors)

    fields = {
        column: (body[column] or '').strip()
        for column in ('name', 'description', 'icon') if column in body
    }
    if not fields:
        return create_error_response(400, 'No valid fields to update', 'BAD_REQUEST')

    if 'name' in fields and category_name_taken(fields['name'], exclude_id=category_id):
        return create_error_response(409, 'Category with this name already exists', 'CONFLICT')

    category = update_category(category_id, fields)
    if not category:
        return create_not_found_response('Category not found')

    return create_success_response(category.to_dict(include_exercises=False), 'Category updated successfully')


def handle_delete_category(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """Delete a category that holds no exercises"""
    require_admin(user)
    category_id = _resource_id(event, 'categories')

    if not category_exists(category_id):
        return create_not_found_response('Category not found')

    exercise_count = count_category_exercises(category_id)
    if exercise_count:
        return create_error_response(
            409,
            f'Category still contains {exercise_count} exercises',
            'CONFLICT'
        )

    delete_category(category_id)
    return create_success_response({'id': category_id}, 'Category deleted successfully')


def handle_get_exercises(event: Dict[str, Any]) -> Dict[str, Any]:
    """All exercises, or those of one category"""
    category_id = get_query_parameters(event).get('category')
    exercises = fetch_exercises_by_category(category_id) if category_id else fetch_all_exercises()
    return create_success_response({
        'exercises': [exercise.to_dict() for exercise in exercises],
        'count': len(exercises)
    })


def handle_get_exercise(event: Dict[str, Any]) -> Dict[str, Any]:
    exercise = fetch_exercise_by_id(_resource_id(event, 'exercises'))
    if not exercise:
        return create_not_found_response('Exercise not found')
    return create_success_response(exercise.to_dict())


def handle_get_instructions(event: Dict[str, Any]) -> Dict[str, Any]:
    """Exercise instructions in the requested language, falling back to English"""
    exercise = fetch_exercise_by_id(_resource_id(event, 'exercises'))
    if not exercise:
        return create_not_found_response('Exercise not found')

    language = get_query_parameters(event).get('lang', DEFAULT_LANGUAGE)
    if language not in SUPPORTED_LANGUAGES:
        return create_error_response(
            400,
            f"lang must be one of: {', '.join(SUPPORTED_LANGUAGES)}",
            'BAD_REQUEST'
        )

    return create_success_response({
        'exercise_id': exercise.id,
        'language': language,
        'instructions': resolve_instructions(exercise.instructions, language)
    })


def handle_create_exercise(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """Validate and store a new exercise"""
    require_admin(user)
    exercise = parse_exercise_payload(parse_request_body(event))

    if not category_exists(exercise.category):
        raise InvalidExercise({'category': 'Please select a category.'})

    created = create_exercise(exercise)
    logger.info(f"Admin {user.user_id} created exercise {created.id}")
    return create_created_response(created.to_dict(), 'Exercise created successfully')


def handle_update_exercise(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """Validate and replace an existing exercise"""
    require_admin(user)
    exercise_id = _resource_id(event, 'exercises')
    exercise = parse_exercise_payload(parse_request_body(event), exercise_id)

    if not category_exists(exercise.category):
        raise InvalidExercise({'category': 'Please select a category.'})

    updated = update_exercise(exercise_id, exercise)
    if not updated:
        return create_not_found_response('Exercise not found')

    return create_success_response(updated.to_dict(), 'Exercise updated successfully')


def handle_delete_exercise(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    require_admin(user)
    exercise_id = _resource_id(event, 'exercises')

    if not delete_exercise(exercise_id):
        return create_not_found_response('Exercise not found')

    return create_success_response({'id': exercise_id}, 'Exercise deleted successfully')
