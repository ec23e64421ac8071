from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

User = get_user_model()


class RegisterTests(APITestCase):

    def test_register_returns_token(self):
        response = self.client.post(reverse("api_register"), {
            "username": "alice",
            "email": "alice@example.com",
            "password": "testpass123",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], "Welcome to StayBnb!")
        user = User.objects.get(username="alice")
        self.assertTrue(user.check_password("testpass123"))
        self.assertEqual(response.data["token"], Token.objects.get(user=user).key)
        self.assertNotIn("password", response.data["user"])

    def test_duplicate_email_rejected(self):
        User.objects.create_user(username="alice", email="alice@example.com", password="testpass123")

        response = self.client.post(reverse("api_register"), {
            "username": "alice2",
            "email": "alice@example.com",
            "password": "testpass123",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", response.data)

    def test_short_password_rejected(self):
        response = self.client.post(reverse("api_register"), {
            "username": "bob", "email": "bob@example.com", "password": "short",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class LoginTests(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(username="alice", email="alice@example.com", password="testpass123")

    def test_login_rotates_token(self):
        old = Token.objects.create(user=self.user)

        response = self.client.post(reverse("api_login"), {
            "username": "alice", "password": "testpass123",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotEqual(response.data["token"], old.key)
        self.assertEqual(Token.objects.filter(user=self.user).count(), 1)

    def test_missing_fields(self):
        response = self.client.post(reverse("api_login"), {"username": "alice"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_wrong_password(self):
        response = self.client.post(reverse("api_login"), {
            "username": "alice", "password": "nope",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_profile_with_token(self):
        token = Token.objects.create(user=self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

        response = self.client.get(reverse("api_profile"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["username"], "alice")

    def test_profile_requires_auth(self):
        response = self.client.get(reverse("api_profile"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
