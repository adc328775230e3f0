"""
Progress Tracking Lambda Function Handler
Handles attempt submission, progress recording and per-user progress aggregation
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Any

from shared.activity_feed import build_recent_activity, format_relative_time
from shared.auth_utils import (
    UserContext, extract_user_from_cognito_event, get_user_context, require_admin
)
from shared.config import get_config
from shared.exercise_validation import InvalidExercise
from shared.grading import describe_results, grade_attempt
from shared.progress_repository import (
    delete_all_progress, delete_user, fetch_all_categories, fetch_all_exercises, fetch_category_name,
    fetch_exercise_by_id, fetch_user_progress, upsert_progress, upsert_user
)
from shared.progress_stats import compute_user_stats
from shared.reports import generate_progress_report, generate_results_report, grade_message
from shared.response_utils import (
    cors_middleware, create_error_response, create_not_found_response, create_success_response,
    create_text_response, create_unauthorized_response, get_path_parameters,
    get_query_parameters, handle_error, parse_request_body
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


@cors_middleware
def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main handler for progress tracking operations
    """
    try:
        http_method = event.get('httpMethod')
        path = event.get('path', '')

        # Verify authentication for all progress operations using Cognito
        auth_result = extract_user_from_cognito_event(event)
        if not auth_result['valid']:
            return create_unauthorized_response()

        user = get_user_context(event)
        upsert_user(user)

        if http_method == 'POST':
            if path.endswith('/progress/submit'):
                return handle_submit_attempt(event, user)
            elif path.endswith('/progress/record'):
                return handle_record_progress(event, user)
        elif http_method == 'GET':
            if '/progress/users/' in path:
                return handle_get_user_stats(event, user)
            elif path.endswith('/progress/stats'):
                return handle_get_stats(event, user)
            elif path.endswith('/progress/activity'):
                return handle_get_activity(event, user)
            elif path.endswith('/progress/report'):
                return handle_get_report(event, user)
        elif http_method == 'DELETE':
            if path.endswith('/progress/account'):
                return handle_delete_account(event, user)
            elif path.endswith('/progress'):
                return handle_reset_progress(event, user)

        return create_not_found_response('Endpoint not found')

    except Exception as e:
        logger.error(f"Progress tracking error: {str(e)}")
        return handle_error(e)


def _stats_payload(user_id: str) -> Dict[str, Any]:
    config = get_config()
    stats_config = config.get_stats_config()
    tz = config.get_stats_timezone()
    now = datetime.now(timezone.utc)

    progress = fetch_user_progress(user_id)
    exercises = fetch_all_exercises()
    categories = fetch_all_categories(exercises)

    stats = compute_user_stats(
        progress, exercises, categories,
        now=now,
        tz=tz,
        recent_limit=stats_config['recent_activity_limit'],
        success_threshold=stats_config['success_threshold']
    )

    payload = stats.to_dict()
    for entry, activity in zip(payload['recent_activity'], stats.recent_activity):
        entry['time_ago'] = format_relative_time(activity.completed_at, now=now, tz=tz)
    return payload


def handle_submit_attempt(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """
    Grade a submitted attempt and store the outcome as the user's latest result
    """
    body = parse_request_body(event)

    exercise_id = body.get('exercise_id')
    answers = body.get('answers')
    if not isinstance(exercise_id, str) or not exercise_id:
        return create_error_response(400, 'exercise_id is required', 'BAD_REQUEST')
    if not isinstance(answers, dict):
        return create_error_response(400, 'answers must be an object keyed by question id', 'BAD_REQUEST')

    exercise = fetch_exercise_by_id(exercise_id)
    if not exercise:
        return create_not_found_response('Exercise not found')

    try:
        result = grade_attempt(exercise.questions, answers)
    except InvalidExercise as e:
        logger.warning(f"Exercise {exercise_id} cannot be graded: {e.errors}")
        raise

    record = upsert_progress(user.user_id, exercise_id, completed=True, score=result.percentage)
    logger.info(f"User {user.user_id} scored {result.percentage}% on exercise {exercise_id}")

    return create_success_response({
        'exercise_id': exercise_id,
        'exercise_title': exercise.title,
        'grade': result.to_dict(),
        'message': grade_message(result.percentage),
        'results': describe_results(exercise.questions, answers, result),
        'report': generate_results_report(
            exercise, answers, result, record.completed_at,
            category_name=fetch_category_name(exercise.category)
        ),
        'progress': record.to_dict()
    }, 'Attempt graded successfully')


def handle_record_progress(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """
    Record progress directly, e.g. marking an exercise as started
    """
    body = parse_request_body(event)

    exercise_id = body.get('exercise_id')
    if not isinstance(exercise_id, str) or not exercise_id:
        return create_error_response(400, 'exercise_id is required', 'BAD_REQUEST')

    completed = body.get('completed')
    if not isinstance(completed, bool):
        return create_error_response(400, 'completed must be a boolean', 'BAD_REQUEST')

    score = body.get('score')
    if score is not None:
        if isinstance(score, bool) or not isinstance(score, int) or not 0 <= score <= 100:
            return create_error_response(400, 'score must be an integer between 0 and 100', 'BAD_REQUEST')

    record = upsert_progress(user.user_id, exercise_id, completed=completed, score=score)
    return create_success_response(record.to_dict(), 'Progress recorded successfully')


def handle_get_stats(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """Aggregated progress statistics for the caller"""
    return create_success_response(_stats_payload(user.user_id))


def handle_get_user_stats(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """Aggregated progress statistics for another user (admin only)"""
    require_admin(user)

    target_user_id = get_path_parameters(event).get('user_id')
    if not target_user_id:
        return create_error_response(400, 'user_id is required', 'BAD_REQUEST')

    logger.info(f"Admin {user.user_id} requested stats of user {target_user_id}")
    return create_success_response(_stats_payload(target_user_id))


def handle_get_activity(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """Recent activity feed of the caller"""
    config = get_config()
    stats_config = config.get_stats_config()
    query_params = get_query_parameters(event)

    try:
        limit = int(query_params.get('limit', stats_config['recent_activity_limit']))
    except (TypeError, ValueError):
        return create_error_response(400, 'limit must be an integer', 'BAD_REQUEST')
    if limit < 1:
        return create_error_response(400, 'limit must be positive', 'BAD_REQUEST')

    now = datetime.now(timezone.utc)
    tz = config.get_stats_timezone()
    activity = build_recent_activity(
        fetch_user_progress(user.user_id),
        fetch_all_exercises(),
        limit=limit,
        success_threshold=stats_config['success_threshold']
    )

    entries = []
    for item in activity:
        entry = item.to_dict()
        entry['time_ago'] = format_relative_time(item.completed_at, now=now, tz=tz)
        entries.append(entry)

    return create_success_response({'activity': entries, 'count': len(entries)})


def handle_get_report(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """Plain-text progress report of the caller"""
    now = datetime.now(timezone.utc)
    report = generate_progress_report(
        fetch_user_progress(user.user_id),
        user.label,
        exercises=fetch_all_exercises(),
        now=now
    )
    return create_text_response(report, f"ESL_Progress_Report_{now.strftime('%Y-%m-%d')}.txt")


def handle_reset_progress(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """Delete every progress record of the caller"""
    deleted = delete_all_progress(user.user_id)
    return create_success_response({'deleted_records': deleted}, 'All progress data has been cleared')


def handle_delete_account(event: Dict[str, Any], user: UserContext) -> Dict[str, Any]:
    """Delete the caller's account record and all of their progress"""
    delete_user(user.user_id)
    logger.info(f"User {user.user_id} deleted their account")
    return create_success_response({'id': user.user_id}, 'Account deleted successfully')
