from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from campusdeals.exceptions import InvalidArgument, NotFound
from campusdeals.jwt_utils import generate_test_token

from .models import User
from .services import build_user_filters, get_user_by_id


class UserServiceTestCase(APITestCase):
    def setUp(self):
        self.user = User.objects.create(name="Jane Doe", email="jane@campus.test")

    def test_get_user_by_id(self):
        self.assertEqual(get_user_by_id(self.user.id), self.user)

    def test_missing_user_uses_label(self):
        with self.assertRaises(NotFound) as ctx:
            get_user_by_id(self.user.id + 100, "Receiver")
        self.assertEqual(ctx.exception.message, "Receiver not found")

    def test_build_user_filters(self):
        filters, condition = build_user_filters({"role": " admin ", "is_verified": "true"})
        self.assertEqual(filters, {"role": "admin", "is_verified": True})
        self.assertIsNotNone(condition)

    def test_no_filters(self):
        self.assertEqual(build_user_filters({}), ({}, None))

    def test_invalid_boolean_filter(self):
        with self.assertRaises(InvalidArgument):
            build_user_filters({"is_verified": "sometimes"})


class UserEndpointsTestCase(APITestCase):
    def setUp(self):
        self.jane = User.objects.create(name="Jane Doe", email="jane@campus.test", is_verified=True)
        self.john = User.objects.create(name="John Smith", email="john@campus.test", role="admin")
        token = generate_test_token(self.jane.id, email=self.jane.email)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        self.list_url = reverse("users:user-list")

    def test_list_users(self):
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Users retrieved successfully")
        self.assertEqual(response.data["meta"]["total"], 2)
        self.assertEqual(len(response.data["data"]), 2)

    def test_list_users_filter_by_role(self):
        response = self.client.get(self.list_url, {"role": "admin"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u["id"] for u in response.data["data"]], [self.john.id])
        self.assertEqual(response.data["meta"]["query"]["filters"], {"role": "admin"})

    def test_list_users_filter_by_verification(self):
        response = self.client.get(self.list_url, {"is_verified": "true"})
        self.assertEqual([u["id"] for u in response.data["data"]], [self.jane.id])

    def test_search_users(self):
        response = self.client.get(self.list_url, {"search": "smith"})
        self.assertEqual([u["id"] for u in response.data["data"]], [self.john.id])

    def test_sort_by_name(self):
        response = self.client.get(self.list_url, {"sortBy": "name", "order": "desc"})
        self.assertEqual([u["name"] for u in response.data["data"]], ["John Smith", "Jane Doe"])

    def test_invalid_sort_field(self):
        response = self.client.get(self.list_url, {"sortBy": "password"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "invalid_argument")

    def test_user_detail(self):
        response = self.client.get(reverse("users:user-detail", kwargs={"user_id": self.john.id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["email"], "john@campus.test")
        self.assertEqual(response.data["data"]["role"], "admin")
        self.assertIn("isVerified", response.data["data"])

    def test_user_detail_not_found(self):
        response = self.client.get(reverse("users:user-detail", kwargs={"user_id": 99999}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "User not found")

    def test_user_detail_invalid_id(self):
        response = self.client.get(reverse("users:user-detail", kwargs={"user_id": "abc"}))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Invalid user ID")

    def test_requires_authentication(self):
        self.client.credentials()
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
