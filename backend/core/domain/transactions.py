"""
core.domain.transactions — Helpers for safe row-level mutations.

Wraps ``select_for_update`` so that every ORM-backed store locks the
row it mutates the same way.  Both helpers must be called inside a
``transaction.atomic()`` block.

Usage::

    from core.domain.transactions import locked_or_none

    with transaction.atomic():
        case = locked_or_none(Case, case_id)
        if case is None:
            return None
        ...
"""

from __future__ import annotations

from typing import Any, TypeVar

from django.db import models

from core.domain.exceptions import NotFound

M = TypeVar("M", bound=models.Model)


def lock_for_update(model_class: type[M], pk: Any) -> M:
    """
    Acquire a row-level lock on the given model instance.

    Raises:
        NotFound: If no row with that PK exists.
    """
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except model_class.DoesNotExist:
        raise NotFound(f"{model_class.__name__} with pk={pk} does not exist.")


def locked_or_none(model_class: type[M], pk: Any) -> M | None:
    """Like ``lock_for_update`` but returns ``None`` for a missing row."""
    try:
        return lock_for_update(model_class, pk)
    except NotFound:
        return None
