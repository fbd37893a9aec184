import logging

from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import SAFE_METHODS, BasePermission

from campusdeals.exceptions import Unauthenticated
from campusdeals.jwt_utils import authenticate_token

logger = logging.getLogger(__name__)


class JWTAuthentication(BaseAuthentication):
    keyword = 'Bearer'

    def authenticate(self, request):
        """
        Authenticate a request using the JWT in the Authorization header.

        Returns ``None`` when no Authorization header is sent so that the
        permission layer answers 401; a malformed or invalid token fails
        immediately.

        Returns:
            tuple: ``(AuthenticatedUser, token)``
        """
        auth_header = request.headers.get('Authorization', '')
        if not auth_header:
            return None

        parts = auth_header.split()
        if len(parts) != 2 or parts[0] != self.keyword:
            raise AuthenticationFailed("Wrong token format. Expected 'Bearer token'")

        try:
            user = authenticate_token(parts[1])
        except Unauthenticated as e:
            raise AuthenticationFailed(e.message)

        request.user_id = user.id
        return (user, parts[1])

    def authenticate_header(self, request):
        return self.keyword


class IsAuthenticatedUser(BasePermission):
    """Allows access only to requests carrying a verified bearer token."""

    def has_permission(self, request, view):
        user = getattr(request, 'user', None)
        return bool(user and getattr(user, 'is_authenticated', False))


class IsAdminRole(IsAuthenticatedUser):
    """Allows access only to authenticated callers whose token carries the admin role."""
    message = "Insufficient permissions"

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        if request.user.role != 'admin':
            logger.warning(f"Access denied for user {request.user.id} ({request.user.role}); admin role required")
            return False
        return True


class AdminWritePermissionMixin:
    """Reads are open to every authenticated caller; writes need the admin role."""

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [IsAuthenticatedUser()]
        return [IsAdminRole()]
