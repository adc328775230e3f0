"""
Authentication and authorization helpers for Cognito-authorized Lambda events
The caller's identity is extracted per request and passed explicitly to
every operation; nothing is kept between invocations.
"""
import os
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional


class AuthorizationError(Exception):
    """Custom exception for authorization errors"""
    pass


@dataclass(frozen=True)
class UserContext:
    """Identity of the caller for the duration of one request"""
    user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    groups: List[str] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return admin_group() in self.groups

    @property
    def label(self) -> str:
        return self.display_name or self.email or self.user_id


def admin_group() -> str:
    return os.environ.get('ADMIN_GROUP', 'admin')


def _parse_groups(raw: Any) -> List[str]:
    if not raw:
        return []
    if isinstance(raw, list):
        return [str(group) for group in raw]
    return [group.strip() for group in str(raw).strip('[]').replace(' ', ',').split(',') if group.strip()]


def extract_user_from_cognito_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract user information from Cognito-authorized Lambda event
    """
    request_context = event.get('requestContext') or {}
    authorizer = request_context.get('authorizer') or {}
    claims = authorizer.get('claims') or {}

    if not claims or not claims.get('sub'):
        return {'valid': False, 'error': 'No Cognito claims found'}

    return {
        'valid': True,
        'user_id': claims.get('sub'),
        'email': claims.get('email'),
        'username': claims.get('cognito:username'),
        'name': claims.get('name'),
        'groups': _parse_groups(claims.get('cognito:groups')),
        'email_verified': claims.get('email_verified') == 'true',
        'claims': claims
    }


def get_user_context(event: Dict[str, Any]) -> UserContext:
    """
    Build the request-scoped user context

    Raises:
        AuthorizationError: when the event carries no authenticated user
    """
    auth_result = extract_user_from_cognito_event(event)
    if not auth_result['valid']:
        raise AuthorizationError(auth_result['error'])

    return UserContext(
        user_id=auth_result['user_id'],
        email=auth_result['email'],
        display_name=auth_result['name'],
        groups=auth_result['groups']
    )


def require_admin(user: UserContext) -> None:
    """Raise AuthorizationError unless the user belongs to the admin group"""
    if not user.is_admin:
        raise AuthorizationError('Admin access required')
