"""Test the cache circuit breaker."""
import pytest

from core.resilience import CircuitBreaker, CircuitState
from doubles import FakeClock


def test_circuit_breaker_closed():
    cb = CircuitBreaker(failure_threshold=3)
    assert cb.state == CircuitState.CLOSED
    assert cb.allow()


def test_circuit_breaker_opens():
    cb = CircuitBreaker(failure_threshold=3)
    for _ in range(3):
        cb.record_failure()
    assert cb.state == CircuitState.OPEN
    assert not cb.allow()


def test_success_resets_failure_count():
    cb = CircuitBreaker(failure_threshold=3)
    cb.record_failure()
    cb.record_failure()
    cb.record_success()
    cb.record_failure()
    assert cb.state == CircuitState.CLOSED
    assert cb.failure_count == 1


def test_half_open_after_recovery_timeout():
    clock = FakeClock()
    cb = CircuitBreaker(failure_threshold=1, recovery_timeout=30.0, clock=clock)
    cb.record_failure()
    assert cb.state == CircuitState.OPEN

    clock.advance(29.9)
    assert not cb.allow()

    clock.advance(0.1)
    assert cb.state == CircuitState.HALF_OPEN
    assert cb.allow()
    # Only one probe while half-open
    assert not cb.allow()


def test_half_open_probe_success_closes():
    clock = FakeClock()
    cb = CircuitBreaker(failure_threshold=1, recovery_timeout=5.0, clock=clock)
    cb.record_failure()
    clock.advance(5.0)
    assert cb.allow()
    cb.record_success()
    assert cb.state == CircuitState.CLOSED
    assert cb.allow()


def test_half_open_probe_failure_reopens():
    clock = FakeClock()
    cb = CircuitBreaker(failure_threshold=3, recovery_timeout=5.0, clock=clock)
    for _ in range(3):
        cb.record_failure()
    clock.advance(5.0)
    assert cb.allow()
    cb.record_failure()
    assert cb.state == CircuitState.OPEN
    assert not cb.allow()


def test_reset():
    cb = CircuitBreaker(failure_threshold=1)
    cb.record_failure()
    cb.reset()
    assert cb.state == CircuitState.CLOSED
    assert cb.failure_count == 0


def test_invalid_threshold():
    with pytest.raises(ValueError):
        CircuitBreaker(failure_threshold=0)
