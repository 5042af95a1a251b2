"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service method, and return the
result wrapped in a DRF ``Response``.

Architecture
------------
- ``UserRegistrationService``  — new-user creation flow.
- ``AuthenticationService``    — multi-field, role-checked login + JWT issuance.
- ``CurrentUserService``       — "Me" endpoint helpers.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import authenticate as django_authenticate
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from rest_framework_simplejwt.tokens import RefreshToken

from core.constants import DEFAULT_EMAIL_DOMAIN
from core.domain.access import get_user_role_name
from core.domain.exceptions import Conflict, Unauthorized, ValidationFailed

from .models import UserRole
from .validators import is_valid_phone, is_valid_sa_id

User = get_user_model()
logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Registration Service
# ═══════════════════════════════════════════════════════════════════


class UserRegistrationService:
    """
    Encapsulates the user registration flow.
    """

    @staticmethod
    def register_user(validated_data: dict[str, Any]) -> User:
        """
        Create a new victim account.

        Parameters
        ----------
        validated_data : dict
            Cleaned data from ``RegisterRequestSerializer`` containing
            ``full_name``, ``national_id``, ``phone_number``,
            ``password``, ``anonymous`` and optionally ``email``.
            ``password_confirm`` has already been consumed during
            serializer validation.

        Returns
        -------
        User
            The newly created (and saved) ``User`` instance.

        Notes
        -----
        - ``username`` is the national ID.
        - The role is always victim; any client-supplied ``role`` is dropped.
        - A blank e-mail is replaced by ``<national_id>@casetrack.saps.gov.za``.

        Raises
        ------
        core.domain.exceptions.ValidationFailed
            If the national ID checksum or the phone format is wrong.
        core.domain.exceptions.Conflict
            If the national ID, phone number or e-mail is already taken.
        """
        data = dict(validated_data)
        data.pop("password_confirm", None)
        password = data.pop("password")
        data["role"] = UserRole.VICTIM

        national_id = data["national_id"]
        if not is_valid_sa_id(national_id):
            raise ValidationFailed("National ID is not a valid South African ID number.")
        if not is_valid_phone(data["phone_number"]):
            raise ValidationFailed("Phone number must be 10 digits starting with 0.")

        data["email"] = (data.get("email") or "").strip().lower() or (
            f"{national_id}@{DEFAULT_EMAIL_DOMAIN}"
        )

        # Pre-check uniqueness for field-specific errors
        conflicts = []
        if User.objects.filter(national_id=national_id).exists():
            conflicts.append("national_id")
        if User.objects.filter(phone_number=data["phone_number"]).exists():
            conflicts.append("phone_number")
        if User.objects.filter(email__iexact=data["email"]).exists():
            conflicts.append("email")

        if conflicts:
            raise Conflict(
                f"The following field(s) already exist: {', '.join(conflicts)}."
            )

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=national_id,
                    password=password,
                    **data,
                )
        except IntegrityError:
            raise Conflict(
                "A user with one of the provided unique fields already exists."
            )

        logger.info("Registered user id=%s role=%s", user.pk, user.role)
        return user


# ═══════════════════════════════════════════════════════════════════
#  Authentication Service
# ═══════════════════════════════════════════════════════════════════


class AuthenticationService:
    """
    Handles multi-field, role-checked login and JWT token generation.
    """

    @staticmethod
    def login(identifier: str, password: str, role: str, request=None) -> User:
        """
        Validate credentials and the role the user signs in as.

        Parameters
        ----------
        identifier : str
            National ID, phone number, e-mail or username.
        password : str
            The raw password.
        role : str
            The role selected on the login form.

        Returns
        -------
        User
            The authenticated user.

        Raises
        ------
        core.domain.exceptions.Unauthorized
            On bad credentials, an inactive account, or a role that the
            user does not hold.  The message does not reveal which.
        """
        user = django_authenticate(request=request, identifier=identifier, password=password)
        if user is None:
            logger.info("Failed login for identifier=%s", identifier)
            raise Unauthorized("Invalid credentials.")

        if get_user_role_name(user) != role:
            logger.info("Role mismatch on login: user=%s claimed=%s", user.pk, role)
            raise Unauthorized("Invalid credentials.")

        return user

    @staticmethod
    def generate_tokens(user: User) -> dict[str, str]:
        """
        Issue a JWT access/refresh token pair for the given user.

        The access token carries ``role`` and ``display_name`` claims so
        the frontend can route to the right dashboard without a second
        request.

        Returns
        -------
        dict
            ``{"access": "<token>", "refresh": "<token>"}``.
        """
        refresh = RefreshToken.for_user(user)
        refresh["role"] = get_user_role_name(user)
        refresh["display_name"] = user.display_name
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  Current User Service
# ═══════════════════════════════════════════════════════════════════


class CurrentUserService:
    """Helpers for the ``/me/`` endpoint."""

    @staticmethod
    def get_profile(user: User) -> User:
        return user

    @staticmethod
    def update_profile(user: User, validated_data: dict[str, Any]) -> User:
        """
        Apply profile edits (full name, e-mail, phone, anonymity).

        Raises
        ------
        core.domain.exceptions.Conflict
            If the new e-mail or phone number belongs to someone else.
        """
        others = User.objects.exclude(pk=user.pk)
        if "email" in validated_data and others.filter(email__iexact=validated_data["email"]).exists():
            raise Conflict("This email is already in use.")
        if "phone_number" in validated_data and others.filter(phone_number=validated_data["phone_number"]).exists():
            raise Conflict("This phone number is already in use.")

        for field_name, value in validated_data.items():
            setattr(user, field_name, value)
        user.save(update_fields=list(validated_data))
        return user
