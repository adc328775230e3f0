"""
Analytics Lambda Function Handler
Fleet-wide progress analytics and summary counts for administrators
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Any

from shared.activity_feed import build_admin_summary, build_analytics
from shared.auth_utils import UserContext, extract_user_from_cognito_event, get_user_context, require_admin
from shared.config import get_config
from shared.progress_repository import (
    count_users, fetch_all_categories, fetch_all_exercises, fetch_all_progress, fetch_user_labels,
    upsert_user
)
from shared.response_utils import (
    cors_middleware, create_not_found_response, create_success_response, create_unauthorized_response,
    handle_error
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


@cors_middleware
def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main handler for analytics operations
    Routes:
    - GET /analytics - Full analytics dashboard
    - GET /analytics/summary - Headline counts
    """
    try:
        http_method = event.get('httpMethod')
        path = event.get('path', '').rstrip('/')

        auth_result = extract_user_from_cognito_event(event)
        if not auth_result['valid']:
            return create_unauthorized_response()

        user = get_user_context(event)
        upsert_user(user)
        require_admin(user)

        if http_method == 'GET':
            if path.endswith('/analytics/summary'):
                return handle_get_summary(user)
            elif path.endswith('/analytics'):
                return handle_get_analytics(user)

        return create_not_found_response('Endpoint not found')

    except Exception as e:
        logger.error(f"Analytics error: {str(e)}")
        return handle_error(e)


def handle_get_analytics(user: UserContext) -> Dict[str, Any]:
    config = get_config()
    stats_config = config.get_stats_config()

    exercises = fetch_all_exercises()
    analytics = build_analytics(
        fetch_all_progress(),
        exercises,
        fetch_all_categories(exercises),
        count_users(),
        now=datetime.now(timezone.utc),
        tz=config.get_stats_timezone(),
        users=fetch_user_labels(),
        recent_limit=stats_config['recent_activity_limit'],
        top_limit=stats_config['top_exercises_limit'],
        trend_days=stats_config['activity_trend_days']
    )

    logger.info(f"Analytics requested by admin {user.user_id}")
    return create_success_response(analytics)


def handle_get_summary(user: UserContext) -> Dict[str, Any]:
    config = get_config()

    exercises = fetch_all_exercises()
    summary = build_admin_summary(
        exercises,
        fetch_all_categories(exercises),
        fetch_all_progress(),
        count_users(),
        now=datetime.now(timezone.utc),
        tz=config.get_stats_timezone(),
        active_window_days=config.get_stats_config()['active_user_window_days']
    )
    return create_success_response(summary)
