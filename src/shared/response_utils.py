"""
HTTP response utilities for Lambda functions
"""
import json
import logging
from typing import Dict, Any, Optional

import psycopg

from shared.auth_utils import AuthorizationError
from shared.config import get_config
from shared.exercise_validation import InvalidExercise

logger = logging.getLogger(__name__)


def create_response(
    status_code: int,
    body: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """Create standardized HTTP response for API Gateway"""
    default_headers = {
        'Content-Type': 'application/json',
        'Access-Control-Allow-Origin': get_config().get_api_config()['cors_origins'][0],
        'Access-Control-Allow-Headers': 'Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token',
        'Access-Control-Allow-Methods': 'GET,POST,PUT,DELETE,OPTIONS'
    }

    if headers:
        default_headers.update(headers)

    return {
        'statusCode': status_code,
        'headers': default_headers,
        'body': json.dumps(body, default=str)  # default=str handles datetime serialization
    }


def create_success_response(data: Any, message: str = None) -> Dict[str, Any]:
    """Create success response (200)"""
    body = {'success': True, 'data': data}
    if message:
        body['message'] = message

    return create_response(200, body)


def create_created_response(data: Any, message: str = None) -> Dict[str, Any]:
    """Create created response (201)"""
    body = {'success': True, 'data': data}
    if message:
        body['message'] = message

    return create_response(201, body)


def create_text_response(text: str, filename: str = None) -> Dict[str, Any]:
    """Create plain-text response (200), optionally as a download"""
    response = create_response(200, {})
    response['headers']['Content-Type'] = 'text/plain; charset=utf-8'
    if filename:
        response['headers']['Content-Disposition'] = f'attachment; filename="{filename}"'
    response['body'] = text
    return response


def create_error_response(
    status_code: int,
    error_message: str,
    error_code: str = None,
    details: Dict[str, Any] = None
) -> Dict[str, Any]:
    """Create error response"""
    body = {
        'success': False,
        'error': {
            'message': error_message
        }
    }

    if error_code:
        body['error']['code'] = error_code

    if details:
        body['error']['details'] = details

    return create_response(status_code, body)


def create_validation_error_response(validation_errors: Dict[str, str]) -> Dict[str, Any]:
    """Create validation error response (400)"""
    return create_error_response(
        400,
        'Validation failed',
        'VALIDATION_ERROR',
        {'validation_errors': validation_errors}
    )


def create_unauthorized_response(message: str = 'Unauthorized') -> Dict[str, Any]:
    """Create unauthorized response (401)"""
    return create_error_response(401, message, 'UNAUTHORIZED')


def create_forbidden_response(message: str = 'Forbidden') -> Dict[str, Any]:
    """Create forbidden response (403)"""
    return create_error_response(403, message, 'FORBIDDEN')


def create_not_found_response(message: str = 'Resource not found') -> Dict[str, Any]:
    """Create not found response (404)"""
    return create_error_response(404, message, 'NOT_FOUND')


def create_service_unavailable_response(
    message: str = 'Could not load data, please try again'
) -> Dict[str, Any]:
    """Create retryable error response (503)"""
    return create_error_response(503, message, 'SERVICE_UNAVAILABLE', {'retryable': True})


def create_internal_error_response(message: str = 'Internal server error') -> Dict[str, Any]:
    """Create internal server error response (500)"""
    return create_error_response(500, message, 'INTERNAL_ERROR')


def handle_error(error: Exception) -> Dict[str, Any]:
    """Handle and format exceptions into appropriate HTTP responses"""
    if isinstance(error, InvalidExercise):
        return create_validation_error_response(error.errors)
    if isinstance(error, AuthorizationError):
        return create_forbidden_response(str(error))
    if isinstance(error, psycopg.Error):
        logger.error(f"Persistence error: {error}", exc_info=True)
        return create_service_unavailable_response()
    if isinstance(error, ValueError):
        return create_error_response(400, str(error), 'BAD_REQUEST')

    logger.error(f"Unhandled error: {error}", exc_info=True)
    return create_internal_error_response('An unexpected error occurred')


def parse_request_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Parse request body from Lambda event"""
    body = event.get('body') or '{}'

    if isinstance(body, str):
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            raise ValueError('Invalid JSON in request body')

    if not isinstance(body, dict):
        raise ValueError('Request body must be a JSON object')

    return body


def get_path_parameters(event: Dict[str, Any]) -> Dict[str, str]:
    """Get path parameters from Lambda event"""
    return event.get('pathParameters') or {}


def get_query_parameters(event: Dict[str, Any]) -> Dict[str, str]:
    """Get query parameters from Lambda event"""
    return event.get('queryStringParameters') or {}


def _request_origin(event: Dict[str, Any]) -> Optional[str]:
    headers = event.get('headers') or {}
    for name, value in headers.items():
        if name.lower() == 'origin':
            return value
    return None


def apply_request_origin(response: Dict[str, Any], event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Echo the request Origin back when it is one of the configured CORS origins.
    With a wildcard or an unlisted origin the default header is left as is.
    """
    origins = get_config().get_api_config()['cors_origins']
    origin = _request_origin(event)
    if '*' in origins or not origin or origin not in origins:
        return response

    response.setdefault('headers', {})
    response['headers']['Access-Control-Allow-Origin'] = origin
    response['headers']['Vary'] = 'Origin'
    return response


def cors_middleware(func):
    """
    Decorator for Lambda handlers serving more than one allowed origin
    """
    def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        return apply_request_origin(func(event, context), event)

    wrapper.__name__ = func.__name__
    wrapper.__doc__ = func.__doc__
    return wrapper
