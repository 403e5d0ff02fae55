"""Tests for the notification channel primitives."""

from unittest.mock import Mock

from settingsflow.features.channel import (
    AnonymousObserver,
    BehaviorSubject,
    CompositeDisposable,
    Disposable,
    ReplaySubject,
    Subject,
    combine_latest,
    latest,
    never,
    return_value,
)


class TestDisposable:

    def test_action_runs_once(self):
        """Test action runs once."""
        action = Mock()
        disposable = Disposable(action)

        disposable.dispose()
        disposable.dispose()

        action.assert_called_once()
        assert disposable.is_disposed

    def test_composite_disposes_late_additions(self):
        """Test composite disposes late additions."""
        composite = CompositeDisposable()
        composite.dispose()
        action = Mock()

        composite.add(Disposable(action))

        action.assert_called_once()


class TestSubjects:

    def test_subject_broadcasts_to_current_subscribers(self):
        """Test subject broadcasts to current subscribers."""
        subject = Subject()
        first, second = [], []
        subject.subscribe(first.append)
        subject.on_next(1)
        subject.subscribe(second.append)
        subject.on_next(2)

        assert first == [1, 2]
        assert second == [2]

    def test_disposing_stops_only_that_subscriber(self):
        """Test disposing stops only that subscriber."""
        subject = Subject()
        kept, dropped = [], []
        subject.subscribe(kept.append)
        subscription = subject.subscribe(dropped.append)

        subscription.dispose()
        subject.on_next("x")

        assert kept == ["x"]
        assert dropped == []

    def test_behavior_subject_replays_current_value(self):
        """Test behavior subject replays current value."""
        subject = BehaviorSubject(False)
        subject.on_next(True)
        received = []

        subject.subscribe(received.append)

        assert received == [True]
        assert subject.value is True

    def test_replay_subject_keeps_last_value(self):
        """Test replay subject keeps last value."""
        subject = ReplaySubject(buffer_size=1)
        subject.on_next("a")
        subject.on_next("b")
        received = []

        subject.subscribe(received.append)

        assert received == ["b"]

    def test_error_is_replayed_to_late_subscribers(self):
        """Test error is replayed to late subscribers."""
        subject = ReplaySubject()
        error = ValueError("boom")
        subject.on_error(error)
        on_error = Mock()

        subject.subscribe(on_error=on_error)

        on_error.assert_called_once_with(error)

    def test_observer_object_can_subscribe(self):
        """Test observer object can subscribe."""
        subject = Subject()
        observer = AnonymousObserver(Mock(), Mock(), Mock())

        subject.subscribe(observer)
        subject.on_next(1)
        subject.on_completed()

        observer._on_next.assert_called_once_with(1)
        observer._on_completed.assert_called_once()


class TestOperators:

    def test_map_and_filter(self):
        """Test map and filter."""
        subject = Subject()
        received = []
        subject.filter(lambda v: v % 2).map(lambda v: v * 10).subscribe(received.append)

        for value in range(5):
            subject.on_next(value)

        assert received == [10, 30]

    def test_distinct_until_changed(self):
        """Test distinct until changed."""
        subject = Subject()
        received = []
        subject.distinct_until_changed().subscribe(received.append)

        for value in [False, False, True, True, False, True]:
            subject.on_next(value)

        assert received == [False, True, False, True]

    def test_flat_map_merges_inner_channels(self):
        """Test flat map merges inner channels."""
        outer = Subject()
        inner = BehaviorSubject("first")
        received = []
        outer.flat_map(lambda v: inner if v == "inner" else return_value(v)).subscribe(received.append)

        outer.on_next("plain")
        outer.on_next("inner")
        inner.on_next("second")

        assert received == ["plain", "first", "second"]

    def test_combine_latest_waits_for_every_source(self):
        """Test combine latest waits for every source."""
        a, b = Subject(), Subject()
        received = []
        combine_latest([a, b], lambda x, y: (x, y)).subscribe(received.append)

        a.on_next(1)
        assert received == []
        b.on_next(2)
        a.on_next(3)

        assert received == [(1, 2), (3, 2)]

    def test_latest_value(self):
        """Test latest value."""
        assert latest(BehaviorSubject(7), 0) == 7
        assert latest(never(), "default") == "default"
