"""
Unit tests for ``core.domain.change_feed.ChangeFeed``.
"""

from __future__ import annotations

from core.domain.change_feed import ChangeFeed


class TestChangeFeed:

    def test_subscribers_called_once_in_order(self):
        feed = ChangeFeed("test")
        calls = []
        feed.subscribe(lambda: calls.append("first"))
        feed.subscribe(lambda: calls.append("second"))

        feed.publish()

        assert calls == ["first", "second"]

    def test_unsubscribed_listener_not_called(self):
        feed = ChangeFeed("test")
        calls = []
        feed.subscribe(lambda: calls.append("kept"))
        unsubscribe = feed.subscribe(lambda: calls.append("dropped"))

        unsubscribe()
        feed.publish()

        assert calls == ["kept"]
        assert feed.subscriber_count == 1

    def test_unsubscribe_is_idempotent(self):
        feed = ChangeFeed("test")
        unsubscribe = feed.subscribe(lambda: None)
        unsubscribe()
        unsubscribe()
        assert feed.subscriber_count == 0

    def test_same_callable_subscribed_twice(self):
        feed = ChangeFeed("test")
        calls = []

        def listener():
            calls.append(1)

        first = feed.subscribe(listener)
        feed.subscribe(listener)
        first()
        feed.publish()

        assert calls == [1]

    def test_publish_without_subscribers(self):
        ChangeFeed("test").publish()

    def test_subscribe_during_publish_takes_effect_next_time(self):
        feed = ChangeFeed("test")
        calls = []

        def late():
            calls.append("late")

        def early():
            calls.append("early")
            feed.subscribe(late)

        feed.subscribe(early)
        feed.publish()
        assert calls == ["early"]

        calls.clear()
        feed.publish()
        assert calls == ["early", "late"]

    def test_listener_can_unsubscribe_itself(self):
        feed = ChangeFeed("test")
        calls = []
        handle = {}

        def once():
            calls.append("once")
            handle["unsubscribe"]()

        handle["unsubscribe"] = feed.subscribe(once)
        feed.subscribe(lambda: calls.append("always"))

        feed.publish()
        feed.publish()

        assert calls == ["once", "always", "always"]

    def test_failing_subscriber_does_not_stop_delivery(self):
        feed = ChangeFeed("test")
        calls = []

        def broken():
            raise RuntimeError("stale view")

        feed.subscribe(broken)
        feed.subscribe(lambda: calls.append("after"))

        feed.publish()

        assert calls == ["after"]
