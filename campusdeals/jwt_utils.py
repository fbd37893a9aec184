"""
JWT utilities for CampusDeals.

Tokens are issued by the identity provider; this module verifies them and
extracts the authenticated principal. ``generate_token`` exists for local
development and tests.
"""

import time
from dataclasses import dataclass

import jwt
from django.conf import settings

from campusdeals.exceptions import Unauthenticated


@dataclass(frozen=True)
class AuthenticatedUser:
    """Principal resolved from a bearer token."""

    id: int
    email: str = ''
    role: str = 'user'

    @property
    def is_authenticated(self):
        return True


class JWTManager:
    """
    JWT Manager for token generation and validation.
    """

    # Settings are read on every call so override_settings applies in tests
    def _get_secret(self):
        return getattr(settings, 'JWT_SECRET', 'campusdeals-dev-jwt-secret')

    def _get_algorithm(self):
        return getattr(settings, 'JWT_ALGORITHM', 'HS256')

    def generate_token(self, user_id, email='', role='user', expires_in_hours=None):
        """
        Generate a JWT token.

        Args:
            user_id (int): The user ID to include in the token
            email (str): Email claim
            role (str): Role claim
            expires_in_hours (int): Token expiration time in hours

        Returns:
            str: JWT token string
        """
        if expires_in_hours is None:
            expires_in_hours = getattr(settings, 'JWT_EXPIRES_IN_HOURS', 24)
        now = int(time.time())
        payload = {
            'sub': str(user_id),
            'id': user_id,
            'email': email,
            'role': role,
            'iat': now,
            'exp': now + int(expires_in_hours * 3600),
        }
        return jwt.encode(payload, self._get_secret(), algorithm=self._get_algorithm())

    def validate_token(self, token):
        """
        Validate a JWT token and extract the payload.

        Raises:
            Unauthenticated: If the token is invalid or expired
        """
        try:
            return jwt.decode(
                token,
                self._get_secret(),
                algorithms=[self._get_algorithm()],
            )
        except jwt.ExpiredSignatureError:
            raise Unauthenticated('Token has expired')
        except jwt.InvalidTokenError as e:
            raise Unauthenticated(f'Invalid token: {str(e)}')

    def authenticate(self, token):
        """Resolve a bearer credential into an ``AuthenticatedUser``."""
        if not token:
            raise Unauthenticated('Authentication token required')

        token = token.strip()
        if token.lower().startswith('bearer '):
            token = token[7:].strip()

        payload = self.validate_token(token)
        raw_id = payload.get('id', payload.get('sub'))
        try:
            user_id = int(raw_id)
        except (TypeError, ValueError):
            raise Unauthenticated('Invalid token: missing user id')

        return AuthenticatedUser(
            id=user_id,
            email=payload.get('email', ''),
            role=payload.get('role', 'user'),
        )


_jwt_manager = None


def _get_jwt_manager():
    """Get the global JWT manager instance, creating it if needed."""
    global _jwt_manager
    if _jwt_manager is None:
        _jwt_manager = JWTManager()
    return _jwt_manager


def generate_test_token(user_id, email='', role='user', expires_in_hours=24):
    """Generate a JWT token for the given user ID."""
    return _get_jwt_manager().generate_token(user_id, email, role, expires_in_hours)


def authenticate_token(token):
    """Verify a bearer credential and return the authenticated principal."""
    return _get_jwt_manager().authenticate(token)
