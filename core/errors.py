"""Infrastructure error types shared by every vertical.

Two families:
- RepositoryUnavailable: the data store could not answer. Fatal to the
  current request and surfaced to the caller ("try again later").
- CacheError: the cache could not answer. Never surfaced to callers; the
  cache-aside layer absorbs it and degrades to "treat as miss".
"""

from typing import Any


class InfrastructureError(Exception):
    """Base class for failures of an external dependency."""

    code = "INFRASTRUCTURE_ERROR"
    status_code = 503

    def __init__(self, message: str, operation: str = "", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": {"operation": self.operation, **self.details},
        }


class RepositoryUnavailable(InfrastructureError):
    """The relational data store could not be reached or failed mid-query."""

    code = "REPOSITORY_UNAVAILABLE"


class CacheError(InfrastructureError):
    """A cache operation failed (connection, timeout, protocol)."""

    code = "CACHE_ERROR"

    def __init__(self, message: str, operation: str = "", key: str = ""):
        super().__init__(message, operation=operation, details={"key": key})
        self.key = key
