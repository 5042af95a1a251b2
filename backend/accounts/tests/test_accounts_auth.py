"""
Integration tests for registration, role-checked login and the "me"
endpoint.

Reference endpoints:
- POST /api/accounts/auth/register/
- POST /api/accounts/auth/login/
- POST /api/accounts/auth/token/refresh/
- GET/PATCH /api/accounts/me/
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import UserRole

User = get_user_model()

VALID_ID = "8001015009087"
SECOND_VALID_ID = "9202204720083"


class TestRegistration(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("accounts:register")
        self.payload = {
            "full_name": "Sipho Dlamini",
            "national_id": VALID_ID,
            "phone_number": "0831234567",
            "password": "Secur3Pass!",
            "password_confirm": "Secur3Pass!",
            "role": "victim",
        }

    def test_register_victim(self):
        resp = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertEqual(resp.data["username"], VALID_ID)
        self.assertEqual(resp.data["role"], UserRole.VICTIM)
        self.assertEqual(resp.data["email"], f"{VALID_ID}@casetrack.saps.gov.za")
        self.assertNotIn("password", resp.data)

        user = User.objects.get(national_id=VALID_ID)
        self.assertTrue(user.check_password("Secur3Pass!"))

    def test_requested_staff_role_is_ignored(self):
        for role in ("admin", "police"):
            with self.subTest(role=role):
                User.objects.filter(national_id=VALID_ID).delete()
                self.payload["role"] = role
                resp = self.client.post(self.url, self.payload, format="json")

                self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
                self.assertEqual(resp.data["role"], UserRole.VICTIM)
                self.assertEqual(User.objects.get(national_id=VALID_ID).role, UserRole.VICTIM)

    def test_self_registered_user_cannot_sign_in_as_admin(self):
        self.payload["role"] = "admin"
        self.client.post(self.url, self.payload, format="json")

        resp = self.client.post(
            reverse("accounts:login"),
            {"identifier": VALID_ID, "password": "Secur3Pass!", "role": "admin"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

        login = self.client.post(
            reverse("accounts:login"),
            {"identifier": VALID_ID, "password": "Secur3Pass!", "role": "victim"},
            format="json",
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")
        resp = self.client.post(
            reverse("core:notification-broadcast"),
            {"message": "Station closed for the public holiday."},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_explicit_email_is_kept(self):
        self.payload["email"] = "Sipho@Example.com"
        resp = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(resp.data["email"], "sipho@example.com")

    def test_invalid_id_checksum(self):
        self.payload["national_id"] = "8001015009088"
        resp = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("national_id", resp.data)

    def test_invalid_phone(self):
        self.payload["phone_number"] = "+27831234567"
        resp = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("phone_number", resp.data)

    def test_password_mismatch(self):
        self.payload["password_confirm"] = "Different1!"
        resp = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_short_password(self):
        self.payload["password"] = self.payload["password_confirm"] = "short"
        resp = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_id_is_conflict(self):
        self.client.post(self.url, self.payload, format="json")

        self.payload["phone_number"] = "0839999999"
        resp = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(User.objects.filter(national_id=VALID_ID).count(), 1)

    def test_duplicate_phone_is_conflict(self):
        self.client.post(self.url, self.payload, format="json")

        self.payload["national_id"] = SECOND_VALID_ID
        resp = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)


class TestLogin(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.password = "P0lice!Login"
        cls.officer = User.objects.create_user(
            username=VALID_ID,
            password=cls.password,
            email="officer@saps.test",
            national_id=VALID_ID,
            phone_number="0820000001",
            full_name="Sgt Thabo Molefe",
            role=UserRole.POLICE,
        )

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("accounts:login")

    def login(self, identifier: str, role: str = "police", password: str | None = None):
        return self.client.post(
            self.url,
            {"identifier": identifier, "password": password or self.password, "role": role},
            format="json",
        )

    def test_login_with_each_identifier(self):
        for identifier in (VALID_ID, "0820000001", "OFFICER@saps.test"):
            with self.subTest(identifier=identifier):
                resp = self.login(identifier)
                self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=resp.data)
                self.assertIn("access", resp.data)
                self.assertIn("refresh", resp.data)
                self.assertEqual(resp.data["user"]["id"], self.officer.pk)

    def test_token_carries_role_claims(self):
        resp = self.login(VALID_ID)
        token = AccessToken(resp.data["access"])
        self.assertEqual(token["role"], "police")
        self.assertEqual(token["display_name"], "Sgt Thabo Molefe")

    def test_wrong_role_is_unauthorized(self):
        resp = self.login(VALID_ID, role="admin")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_wrong_password(self):
        resp = self.login(VALID_ID, password="nope-nope")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_unknown_identifier(self):
        resp = self.login("0000000000000")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_inactive_user(self):
        self.officer.is_active = False
        self.officer.save(update_fields=["is_active"])
        resp = self.login(VALID_ID)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        refresh = self.login(VALID_ID).data["refresh"]
        resp = self.client.post(reverse("accounts:token-refresh"), {"refresh": refresh}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertIn("access", resp.data)


class TestMe(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.victim = User.objects.create_user(
            username=VALID_ID,
            password="V1ctim!Pass",
            email="victim@saps.test",
            national_id=VALID_ID,
            phone_number="0820000002",
            full_name="Ayanda Zulu",
            role=UserRole.VICTIM,
        )
        cls.other = User.objects.create_user(
            username=SECOND_VALID_ID,
            password="V1ctim!Pass",
            email="other@saps.test",
            national_id=SECOND_VALID_ID,
            phone_number="0820000003",
            role=UserRole.VICTIM,
        )

    def setUp(self):
        self.client = APIClient()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(self.victim)}")
        self.url = reverse("accounts:me")

    def test_get_profile(self):
        resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["role"], "victim")
        self.assertEqual(resp.data["display_name"], "Ayanda Zulu")

    def test_anonymous_display_name(self):
        resp = self.client.patch(self.url, {"anonymous": True}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=resp.data)
        self.assertEqual(resp.data["display_name"], "Anonymous User")

    def test_phone_taken_by_someone_else(self):
        resp = self.client.patch(self.url, {"phone_number": "0820000003"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)

    def test_requires_authentication(self):
        self.assertEqual(APIClient().get(self.url).status_code, status.HTTP_401_UNAUTHORIZED)
