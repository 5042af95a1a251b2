"""
Login backend for CaseTrack identifiers.

Victims and officers sign in with whatever they remember: their
13-digit SA ID number, their cell number or their e-mail address.
The national ID doubles as the username, so all three resolve through
this single backend.  ``AuthenticationService.login`` then checks that
the user actually holds the role they picked on the login form.

Listed first in ``AUTHENTICATION_BACKENDS`` in ``casetrack/settings.py``.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.db.models import Q

User = get_user_model()


def _identifier_lookup(identifier: str) -> Q:
    return (
        Q(username=identifier)
        | Q(national_id=identifier)
        | Q(phone_number=identifier)
        | Q(email__iexact=identifier)
    )


class MultiFieldAuthBackend(ModelBackend):
    """Resolve a CaseTrack user from an ID number, phone or e-mail."""

    def authenticate(self, request, identifier=None, password=None, **kwargs):
        """
        Return the active user matching *identifier* and *password*.

        Parameters
        ----------
        request : HttpRequest | None
        identifier : str
            SA ID number, cell number (``0`` + 9 digits) or e-mail address.
            Surrounding whitespace is ignored; e-mail is matched
            case-insensitively.
        password : str

        Returns
        -------
        User | None
            ``None`` when nothing matches, the identifier is ambiguous,
            the password is wrong or the account is inactive.
        """
        if not identifier or password is None:
            return None

        matches = list(User.objects.filter(_identifier_lookup(identifier.strip()))[:2])
        if not matches:
            # Hash anyway so unknown identifiers take as long as wrong passwords
            User().set_password(password)
            return None
        if len(matches) > 1:
            return None

        user = matches[0]
        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
