"""
Circuit breaker for fail-open dependencies.

Protects request latency against:
- Extended outages (stop calling a dependency that keeps failing)
- Slow failures (skip the timeout cost while the circuit is open)
- Silent recovery (probe once after the recovery window)

The breaker only decides whether a call should be attempted. Callers
report outcomes with record_success() / record_failure(); there is no
retry loop here, retry policy belongs to the transport.
"""
from __future__ import annotations
from enum import Enum
from typing import Callable
import time

import structlog

logger = structlog.get_logger(__name__)


class CircuitState(str, Enum):
    CLOSED = "closed"        # Normal operation
    OPEN = "open"            # Failing, skip calls
    HALF_OPEN = "half_open"  # Testing recovery


class CircuitBreaker:
    """
    Consecutive-failure circuit breaker with a monotonic, injectable clock.
    """

    def __init__(
        self,
        name: str = "cache",
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: float | None = None
        self._probe_in_flight = False

    @property
    def state(self) -> CircuitState:
        if self._state == CircuitState.OPEN and self._opened_at is not None:
            if self._clock() - self._opened_at >= self.recovery_timeout:
                self._state = CircuitState.HALF_OPEN
                self._probe_in_flight = False
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def allow(self) -> bool:
        """Return True if a call may be attempted now."""
        state = self.state
        if state == CircuitState.CLOSED:
            return True
        if state == CircuitState.HALF_OPEN and not self._probe_in_flight:
            # One probe at a time while half-open
            self._probe_in_flight = True
            return True
        return False

    def record_success(self) -> None:
        if self._state != CircuitState.CLOSED:
            logger.info("circuit_closed", breaker=self.name)
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = None
        self._probe_in_flight = False

    def record_failure(self) -> None:
        self._failure_count += 1
        self._probe_in_flight = False

        if self._state == CircuitState.HALF_OPEN or self._failure_count >= self.failure_threshold:
            if self._state != CircuitState.OPEN:
                logger.warning(
                    "cache_breaker_opened",
                    breaker=self.name,
                    failures=self._failure_count,
                    recovery_seconds=self.recovery_timeout,
                )
            self._state = CircuitState.OPEN
            self._opened_at = self._clock()

    def release_probe(self) -> None:
        """Give back a half-open probe whose call never reported an outcome."""
        self._probe_in_flight = False

    def reset(self) -> None:
        """Force the breaker back to closed (tests, admin tooling)."""
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = None
        self._probe_in_flight = False
