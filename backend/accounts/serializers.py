"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here — all domain
rules are delegated to ``services.py``.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import UserRole
from .validators import is_valid_phone, is_valid_sa_id

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class RegisterRequestSerializer(serializers.Serializer):
    """
    Validates new-user registration data.

    Required fields: full_name, national_id, phone_number, password,
    password_confirm.  ``email`` is optional.  Every self-registered
    account is a victim; staff accounts are created by ``seed_test_users``
    or through the Django admin.

    Uniqueness is checked by the service layer so that clashes surface
    as 409 Conflict rather than 400.
    """

    full_name = serializers.CharField(max_length=255)
    national_id = serializers.CharField(
        max_length=13,
        help_text="South African 13-digit identity number.",
    )
    phone_number = serializers.CharField(
        max_length=10,
        help_text="10 digits starting with 0, e.g. 0821234567.",
    )
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text="Minimum 8 characters.",
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="Must match 'password'.",
    )
    anonymous = serializers.BooleanField(required=False, default=False)

    def validate_national_id(self, value: str) -> str:
        value = value.strip()
        if not is_valid_sa_id(value):
            raise serializers.ValidationError(
                "National ID must be a valid 13-digit South African ID number."
            )
        return value

    def validate_phone_number(self, value: str) -> str:
        value = value.strip()
        if not is_valid_phone(value):
            raise serializers.ValidationError(
                "Phone number must be 10 digits starting with 0."
            )
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs["password"] != attrs["password_confirm"]:
            raise serializers.ValidationError(
                {"password_confirm": "Passwords do not match."}
            )

        # password_confirm is only needed for validation
        attrs.pop("password_confirm")
        return attrs


class LoginRequestSerializer(serializers.Serializer):
    """
    Accepts multi-field, role-checked login credentials.

    The client sends ``identifier`` (national ID, phone number, e-mail
    or username) together with ``password`` and the ``role`` selected on
    the login form.
    """

    identifier = serializers.CharField(
        help_text="National ID, Phone Number, Email, or Username.",
    )
    password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="User account password.",
    )
    role = serializers.ChoiceField(choices=UserRole.choices)


class TokenResponseSerializer(serializers.Serializer):
    """
    Serializes the JWT token pair returned after successful login.
    """

    access = serializers.CharField(read_only=True)
    refresh = serializers.CharField(read_only=True)
    user = serializers.SerializerMethodField()

    def get_user(self, obj: dict) -> dict | None:
        user = obj.get("user")
        if user:
            return UserDetailSerializer(user).data
        return None


# ═══════════════════════════════════════════════════════════════════
#  User Serializers
# ═══════════════════════════════════════════════════════════════════


class UserDetailSerializer(serializers.ModelSerializer):
    """
    The current principal as the frontend sees it.

    ``display_name`` is masked to "Anonymous User" when the user opted
    for anonymity.
    """

    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "full_name",
            "display_name",
            "email",
            "national_id",
            "phone_number",
            "role",
            "anonymous",
            "date_joined",
        ]
        read_only_fields = fields


class MeUpdateSerializer(serializers.ModelSerializer):
    """
    Fields a user may change on their own profile.

    Role, national ID and username are fixed after registration.
    """

    class Meta:
        model = User
        fields = ["full_name", "email", "phone_number", "anonymous"]
        extra_kwargs = {
            # Uniqueness is checked in the service layer (409, not 400)
            "email": {"validators": []},
            "phone_number": {"validators": []},
        }

    def validate_phone_number(self, value: str) -> str:
        if not is_valid_phone(value):
            raise serializers.ValidationError(
                "Phone number must be 10 digits starting with 0."
            )
        return value

    def validate_email(self, value: str) -> str:
        return value.strip().lower()
