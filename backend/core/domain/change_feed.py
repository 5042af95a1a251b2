"""
core.domain.change_feed — In-process "something changed" signal.

A ``ChangeFeed`` carries no payload: subscribers are told that the data
they display may be stale and re-fetch it themselves.  Two feeds exist
at runtime, one for case records (owned by ``CasesConfig``) and one for
notifications (owned by ``CoreConfig``); tests build their own.

Usage::

    feed = ChangeFeed("cases")
    unsubscribe = feed.subscribe(lambda: cache.delete(KEY))
    feed.publish()
    unsubscribe()

Semantics
---------
* Subscribers are called synchronously, in subscription order.
* ``publish`` iterates over a snapshot of the subscriber list, so a
  callback may subscribe or unsubscribe (itself or others) without
  affecting the delivery in progress.
* The function returned by ``subscribe`` may be called any number of
  times; only the first call has an effect.
* A subscriber that raises is logged and skipped; delivery continues
  with the next subscriber.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

Subscriber = Callable[[], None]


class ChangeFeed:
    """Publish/subscribe fan-out with no payload."""

    def __init__(self, name: str = "changes") -> None:
        self.name = name
        self._subscriptions: list[tuple[object, Subscriber]] = []
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<ChangeFeed {self.name!r} subscribers={self.subscriber_count}>"

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register ``callback`` and return a function that removes it.

        The same callable may be subscribed more than once; each
        subscription is removed independently.
        """
        token = object()
        with self._lock:
            self._subscriptions.append((token, callback))

        def unsubscribe() -> None:
            with self._lock:
                self._subscriptions = [
                    entry for entry in self._subscriptions if entry[0] is not token
                ]

        return unsubscribe

    def publish(self) -> None:
        """Notify every current subscriber once."""
        with self._lock:
            snapshot = list(self._subscriptions)

        for _, callback in snapshot:
            try:
                callback()
            except Exception:
                logger.exception(
                    "Subscriber %r of change feed %r failed", callback, self.name,
                )
