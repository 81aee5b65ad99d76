"""Tests for the change notifier."""

from iffidb.events import ChangeNotifier


class TestChangeNotifier:
    """Tests for ChangeNotifier."""

    def test_publish_in_registration_order(self):
        """Test that listeners run in the order they subscribed."""
        notifier = ChangeNotifier()
        calls = []
        notifier.subscribe(lambda: calls.append("a"))
        notifier.subscribe(lambda: calls.append("b"))
        notifier.publish()
        assert calls == ["a", "b"]

    def test_unsubscribe_removes_listener(self):
        """Test the disposer."""
        notifier = ChangeNotifier()
        calls = []
        unsubscribe = notifier.subscribe(lambda: calls.append("a"))
        unsubscribe()
        notifier.publish()
        assert calls == []
        assert len(notifier) == 0

    def test_unsubscribe_is_idempotent(self):
        """Test calling the disposer twice."""
        notifier = ChangeNotifier()
        calls = []
        unsubscribe = notifier.subscribe(lambda: calls.append("a"))
        notifier.subscribe(lambda: calls.append("b"))
        unsubscribe()
        unsubscribe()
        notifier.publish()
        assert calls == ["b"]

    def test_same_listener_twice_has_independent_handles(self):
        """Test that each subscription is removed on its own."""
        notifier = ChangeNotifier()
        calls = []

        def listener():
            calls.append("x")

        first = notifier.subscribe(listener)
        notifier.subscribe(listener)
        first()
        notifier.publish()
        assert calls == ["x"]

    def test_failing_listener_does_not_stop_others(self):
        """Test per-listener failure isolation."""
        notifier = ChangeNotifier()
        calls = []

        def broken():
            raise RuntimeError("boom")

        notifier.subscribe(broken)
        notifier.subscribe(lambda: calls.append("after"))
        assert notifier.publish() == 1
        assert calls == ["after"]

    def test_listener_added_during_publish_waits(self):
        """Test that late subscribers are not called in the same publish."""
        notifier = ChangeNotifier()
        calls = []

        def late():
            calls.append("late")

        def subscriber():
            calls.append("first")
            notifier.subscribe(late)

        notifier.subscribe(subscriber)
        notifier.publish()
        assert calls == ["first"]

    def test_publish_with_no_listeners(self):
        """Test publishing to nobody."""
        assert ChangeNotifier().publish() == 0
