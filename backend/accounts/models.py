"""
Accounts app models.

Defines the custom ``User`` model that extends Django's ``AbstractUser``.
Every principal of the portal holds exactly one of three roles:
victim, police officer or administrator.  National ID (South African
13-digit ID number), phone number and e-mail are unique and can each
be used to sign in.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class UserRole(models.TextChoices):
    VICTIM = "victim", "Victim"
    POLICE = "police", "Police Officer"
    ADMIN = "admin", "Administrator"


class User(AbstractUser):
    """
    Custom user model for the CaseTrack portal.

    Registration requires: full name, national ID, phone number, password
    and role; e-mail is optional and synthesised from the ID number when
    omitted.  ``username`` is set to the national ID.

    Login is supported via *any one* of username / national_id /
    phone_number / email together with the password and the role the
    user claims to act as.
    """

    full_name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Full Name",
    )
    national_id = models.CharField(
        max_length=13,
        unique=True,
        verbose_name="National ID",
        help_text="South African 13-digit identity number.",
        db_index=True,
    )
    phone_number = models.CharField(
        max_length=10,
        unique=True,
        verbose_name="Phone Number",
        db_index=True,
    )
    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    role = models.CharField(
        max_length=10,
        choices=UserRole.choices,
        default=UserRole.VICTIM,
        verbose_name="Role",
        db_index=True,
    )
    anonymous = models.BooleanField(
        default=False,
        verbose_name="Anonymous",
        help_text="Hide the user's name from police and administrators.",
    )

    # Fields required when creating a superuser via CLI
    REQUIRED_FIELDS = ["email", "national_id", "phone_number"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} ({self.display_name}) - {self.get_role_display()}"

    def has_role(self, role: str) -> bool:
        """Check if the user's current role matches ``role``."""
        return self.role == role

    @property
    def display_name(self) -> str:
        """Name shown to other users; masked for anonymous reporters."""
        if self.anonymous:
            return "Anonymous User"
        return self.full_name or self.get_full_name() or self.username
