from unittest import mock

from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from campusdeals.authentication import IsAdminRole
from campusdeals.exceptions import Unauthenticated
from campusdeals.jwt_utils import JWTManager, authenticate_token, generate_test_token
from users.models import User


class JWTManagerTest(SimpleTestCase):
    def test_round_trip_claims(self):
        token = generate_test_token(42, email='ann@campus.test', role='admin')
        user = authenticate_token(token)
        self.assertEqual(user.id, 42)
        self.assertEqual(user.email, 'ann@campus.test')
        self.assertEqual(user.role, 'admin')
        self.assertTrue(user.is_authenticated)

    def test_bearer_prefix_is_accepted(self):
        token = generate_test_token(7)
        self.assertEqual(authenticate_token(f"Bearer {token}").id, 7)

    def test_expired_token(self):
        token = JWTManager().generate_token(7, expires_in_hours=-1)
        with self.assertRaises(Unauthenticated) as ctx:
            authenticate_token(token)
        self.assertEqual(ctx.exception.message, 'Token has expired')

    def test_token_signed_with_other_secret(self):
        token = generate_test_token(7)
        with override_settings(JWT_SECRET='another-secret'):
            with self.assertRaises(Unauthenticated):
                authenticate_token(token)

    def test_missing_token(self):
        with self.assertRaises(Unauthenticated):
            authenticate_token('')


class RestAuthenticationTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create(name="Ann", email="ann@campus.test")
        self.url = reverse('users:user-list')

    def test_missing_header_is_401(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'unauthenticated')
        self.assertEqual(response['WWW-Authenticate'], 'Bearer')

    def test_wrong_scheme_is_401(self):
        response = self.client.get(self.url, HTTP_AUTHORIZATION='Token abc')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('Bearer', response.data['message'])

    def test_invalid_token_is_401(self):
        response = self.client.get(self.url, HTTP_AUTHORIZATION='Bearer garbage')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertTrue(response.data['message'].startswith('Invalid token'))

    def test_valid_token(self):
        token = generate_test_token(self.user.id, email=self.user.email)
        response = self.client.get(self.url, HTTP_AUTHORIZATION=f'Bearer {token}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class AdminRolePermissionTest(SimpleTestCase):
    def request_for(self, user):
        return mock.Mock(user=user)

    def test_admin_role_is_allowed(self):
        user = authenticate_token(generate_test_token(1, role='admin'))
        self.assertTrue(IsAdminRole().has_permission(self.request_for(user), None))

    def test_user_role_is_denied(self):
        user = authenticate_token(generate_test_token(1, role='user'))
        self.assertFalse(IsAdminRole().has_permission(self.request_for(user), None))
        self.assertEqual(IsAdminRole.message, 'Insufficient permissions')

    def test_anonymous_is_denied(self):
        self.assertFalse(IsAdminRole().has_permission(self.request_for(None), None))
