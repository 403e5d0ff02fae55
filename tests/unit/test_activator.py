"""Tests for dependency-gated feature activation."""

import threading
from unittest.mock import Mock

import pytest

from settingsflow.common.exceptions import SettingsFlowError
from settingsflow.features import (
    ActivationState,
    BehaviorSubject,
    BooleanFeatureActivator,
    FeatureActivator,
    Subject,
)


class TestFeatureActivator:
    """Activation lifecycle."""

    def test_activation_waits_for_first_subscriber(self):
        """Test activation waits for first subscriber."""
        activate = Mock(return_value="active")
        activator = FeatureActivator(activate, None, BehaviorSubject(True))

        activate.assert_not_called()

        received = []
        activator.subscribe(received.append)

        activate.assert_called_once()
        assert received == ["active"]

    def test_no_dependencies_activates_on_subscribe(self):
        """Test no dependencies activates on subscribe."""
        activator = BooleanFeatureActivator(Mock())
        received = []

        activator.subscribe(received.append)

        assert received == [True]
        assert activator.has_been_activated
        assert activator.state is ActivationState.ACTIVATED

    def test_toggling_dependency_is_deduplicated(self):
        """Test toggling dependency is deduplicated."""
        dependency = Subject()
        activate, deactivate = Mock(), Mock()
        activator = BooleanFeatureActivator(activate, deactivate, dependency)
        received = []
        activator.subscribe(received.append)

        for value in [False, False, True, True, True, True, False, False, False]:
            dependency.on_next(value)

        assert received == [False, True, False]
        activate.assert_called_once()
        deactivate.assert_called_once()

    def test_default_published_before_first_activation(self):
        """Test default published before first activation."""
        deactivate = Mock()
        activator = FeatureActivator(Mock(), deactivate, BehaviorSubject(False), default="idle")
        received = []

        activator.subscribe(received.append)

        assert received == ["idle"]
        deactivate.assert_not_called()
        assert not activator.has_been_activated

    def test_all_dependencies_must_be_available(self):
        """Test all dependencies must be available."""
        database, cache = BehaviorSubject(True), BehaviorSubject(False)
        activate = Mock()
        activator = BooleanFeatureActivator(activate, None, database, cache)
        received = []
        activator.subscribe(received.append)

        activate.assert_not_called()
        cache.on_next(True)
        activate.assert_called_once()
        database.on_next(False)

        assert received == [False, True, False]

    def test_reactivation_after_dependency_returns(self):
        """Test reactivation after dependency returns."""
        dependency = BehaviorSubject(True)
        activate = Mock()
        activator = BooleanFeatureActivator(activate, Mock(), dependency)
        received = []
        activator.subscribe(received.append)

        dependency.on_next(False)
        dependency.on_next(True)

        assert received == [True, False, True]
        assert activate.call_count == 2
        assert activator.activation_count == 2

    def test_late_subscriber_receives_last_value_without_reactivation(self):
        """Test late subscriber receives last value without reactivation."""
        activate = Mock(return_value="instance")
        activator = FeatureActivator(activate)
        activator.subscribe(Mock())
        late = []

        activator.subscribe(late.append)

        assert late == ["instance"]
        activate.assert_called_once()

    def test_concurrent_subscribers_activate_once(self):
        """Test concurrent subscribers activate once."""
        calls = []
        lock = threading.Lock()

        def activate():
            with lock:
                calls.append(1)
            return True

        activator = FeatureActivator(activate)
        barrier = threading.Barrier(10)
        received = []

        def worker():
            barrier.wait()
            activator.subscribe(received.append)

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert received == [True] * 10

    def test_activation_error_is_published_not_raised(self):
        """Test activation error is published not raised."""
        error = RuntimeError("cannot start")
        activate = Mock(side_effect=error)
        activator = FeatureActivator(activate)
        on_error = Mock()

        activator.subscribe(on_error=on_error)
        second = Mock()
        activator.subscribe(on_error=second)

        on_error.assert_called_once_with(error)
        second.assert_called_once_with(error)
        activate.assert_called_once()
        assert activator.state is ActivationState.FAILED

    def test_pending_dependency_publishes_nothing(self):
        """Test pending dependency publishes nothing."""
        activator = BooleanFeatureActivator(Mock(), None, Subject())
        received, errors, completed = [], [], []

        activator.subscribe(received.append, errors.append, lambda: completed.append(True))

        assert received == errors == completed == []

    def test_dispose_disconnects_dependencies(self):
        """Test dispose disconnects dependencies."""
        dependency = BehaviorSubject(True)
        deactivate = Mock()
        activator = BooleanFeatureActivator(Mock(), deactivate, dependency)
        activator.subscribe(Mock())

        activator.dispose()
        dependency.on_next(False)

        deactivate.assert_not_called()
        assert not activator.is_connected

    def test_subscribing_after_dispose_reconnects(self):
        """Test subscribing after dispose reconnects."""
        dependency = BehaviorSubject(True)
        activate = Mock()
        deactivate = Mock()
        activator = BooleanFeatureActivator(activate, deactivate, dependency)
        activator.subscribe(Mock())
        activator.dispose()

        received = []
        activator.subscribe(received.append)
        dependency.on_next(False)

        assert activator.is_connected
        assert received == [True, False]
        activate.assert_called_once()
        deactivate.assert_called_once()

    def test_activate_is_required(self):
        """Test activate is required."""
        with pytest.raises(SettingsFlowError):
            FeatureActivator(None)
