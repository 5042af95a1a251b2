"""
core.domain.access — Role-scoped data selectors (shared patterns).

This module provides shared utilities that each app's service layer
calls to obtain data filtered by the requesting user's role.

╔══════════════════════════════════════════════════════════════════╗
║  IMPORTANT — Per-app scoping logic does NOT live here.         ║
║  Each app's ``services.py`` owns its own scope config.         ║
║  This module provides:                                         ║
║    1) ``apply_role_scope`` — role-keyed scope dispatch.        ║
║    2) ``require_role`` — guard for staff-only operations.      ║
║    3) ``get_user_role_name`` — normalised role-name helper.    ║
╚══════════════════════════════════════════════════════════════════╝

Architecture overview
---------------------
The portal knows exactly three roles: ``victim``, ``police`` and
``admin``.  Victims only ever see their own cases; police officers and
administrators see every case.

    ┌─────────┐      ┌────────────────┐      ┌──────────────────┐
    │  View   │─────▶│  App service   │─────▶│ core.domain      │
    │ (thin)  │      │ (owns logic)   │      │   .access        │
    └─────────┘      └────────────────┘      │ (shared helpers) │
                                             └──────────────────┘

Usage in an app's service layer::

    from core.domain.access import apply_role_scope

    CASE_SCOPE = {
        "admin":  lambda qs, u: qs,
        "police": lambda qs, u: qs,
        "victim": lambda qs, u: qs.filter(victim=u),
    }

    qs = apply_role_scope(Case.objects.all(), user, scope_config=CASE_SCOPE)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from accounts.models import User

# Takes (source, user) and returns the filtered source.  ``source`` is
# usually a QuerySet but may be any iterable the caller filters itself.
ScopeFilter = Callable[[Any, "User"], Any]

# Role name → scope filter.
ScopeConfig = dict[str, ScopeFilter]


def get_user_role_name(user: User) -> str | None:
    """
    Return the role name for a user, or ``None`` if unassigned.

    Superusers created through ``createsuperuser`` are treated as
    administrators regardless of their stored role.

    Args:
        user: Authenticated User instance.

    Returns:
        ``"victim"``, ``"police"``, ``"admin"`` or ``None``.
    """
    if getattr(user, "is_superuser", False):
        return "admin"
    role = getattr(user, "role", None)
    if not role:
        return None
    return str(role).lower()


def apply_role_scope(
    source: Any,
    user: User,
    *,
    scope_config: ScopeConfig,
    default: str = "none",
) -> Any:
    """
    Apply the scope filter registered for the user's role.

    Args:
        source:       Base (unfiltered) queryset.
        user:         The authenticated user.
        scope_config: Mapping of role name → ``filter_fn(source, user)``.
        default:      What to do when the role has no entry.
                      ``"none"`` (default) → empty queryset.
                      ``"all"`` → return unfiltered.

    Returns:
        The (possibly filtered) queryset.
    """
    role_name = get_user_role_name(user)

    if role_name and role_name in scope_config:
        return scope_config[role_name](source, user)

    if default == "none":
        return source.none()
    return source


def require_role(user: User, *allowed_roles: str, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` if the user's role is not
    among ``allowed_roles``.

    Args:
        user:           Authenticated user.
        *allowed_roles: One or more role names.
        message:        Optional custom error message.

    Raises:
        core.domain.exceptions.PermissionDenied: If the role is not allowed.

    Example::

        require_role(request.user, "police", "admin")
    """
    from core.domain.exceptions import PermissionDenied as DomainPermissionDenied

    role_name = get_user_role_name(user)
    if role_name not in allowed_roles:
        raise DomainPermissionDenied(
            message
            or (
                f"Role '{role_name}' is not permitted for this operation. "
                f"Required: {', '.join(allowed_roles)}."
            )
        )
