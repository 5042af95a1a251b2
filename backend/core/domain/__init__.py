"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions     Domain-specific exceptions that map cleanly to HTTP responses.
change_feed    In-process publish/subscribe "something changed" signal.
notifications  Notification dispatcher for case events and notices.
transactions   Helpers for ``transaction.atomic`` + ``select_for_update``.
access         Role-scoped selectors and the staff-role guard.

Usage from any app::

    from core.domain.exceptions import DomainError, NotFound
    from core.domain.change_feed import ChangeFeed
    from core.domain.notifications import NotificationDispatcher
    from core.domain.transactions import locked_or_none
    from core.domain.access import apply_role_scope, require_role
"""
