"""
Core Resilience: Fault Tolerance Primitives.

Provides reliability patterns for calls to external dependencies:
- CircuitBreaker: Skip a failing fail-open dependency until it recovers
"""
from core.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitState,
)

__all__ = [
    "CircuitBreaker",
    "CircuitState",
]
