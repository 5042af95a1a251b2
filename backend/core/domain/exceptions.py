"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations raised by the case
repository, the notification dispatcher and the app service layers.
They are deliberately **not** DRF exceptions so that the domain layer
stays framework-agnostic (the in-memory stores raise them too).
``core.domain.exception_handler`` maps them to HTTP responses.

Mapping cheatsheet
------------------
┌─────────────────────┬──────────────────────────────┬──────┐
│ Domain Exception    │ DRF / HTTP equivalent        │ Code │
├─────────────────────┼──────────────────────────────┼──────┤
│ DomainError         │ ValidationError / 400        │ 400  │
│ ValidationFailed    │ ValidationError / 400        │ 400  │
│ Unauthorized        │ AuthenticationFailed / 401   │ 401  │
│ PermissionDenied    │ PermissionDenied / 403       │ 403  │
│ NotFound            │ NotFound / 404               │ 404  │
│ Conflict            │ APIException / 409           │ 409  │
│ InvalidTransition   │ APIException / 409           │ 409  │
└─────────────────────┴──────────────────────────────┴──────┘

Usage inside a service::

    from core.domain.exceptions import NotFound

    if not repository.transition(case_id, status, note, user.pk):
        raise NotFound(f"Case {case_id} does not exist.")
"""

from __future__ import annotations


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Caught at the view boundary and converted to a 400 Bad Request.
    """

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class ValidationFailed(DomainError):
    """
    Input that passed serializer checks but violates a domain rule
    (e.g. an SA ID number whose checksum digit does not match).

    Maps to HTTP 400.
    """

    def __init__(self, message: str = "The supplied data is invalid.") -> None:
        super().__init__(message)


class Unauthorized(DomainError):
    """
    Credentials could not be verified, or the principal tried to sign
    in under a role they do not hold.

    Maps to HTTP 401.
    """

    def __init__(self, message: str = "Invalid credentials.") -> None:
        super().__init__(message)


class PermissionDenied(DomainError):
    """
    The authenticated user does not hold the role required for this
    operation.

    Maps to HTTP 403.
    """

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The requested resource does not exist (or is not visible to the
    requesting user given their role scope).

    Maps to HTTP 404.
    """

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource.

    Typical usage: duplicate registration, exhausted case-number
    generation attempts.  Maps to HTTP 409.
    """

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class InvalidTransition(Conflict):
    """
    A lifecycle transition that cannot be applied to the case.

    Inherits from ``Conflict`` because an invalid transition IS a conflict
    with the resource's current state.  Maps to HTTP 409.

    Example::

        raise InvalidTransition(
            current="submitted",
            target="archived",
            reason="Unknown case status.",
        )
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Invalid status transition"]
            if current and target:
                parts.append(f"from '{current}' to '{target}'")
            elif target:
                parts.append(f"to '{target}'")
            if reason:
                parts.append(f"({reason})")
            message = " ".join(parts) + "."
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason
