"""Data errors raised while pricing a request.

These are caused by the request itself ("your input is unsellable"),
never retried, and surfaced verbatim to the caller as a rejected quote.
Infrastructure failures live in core.errors.
"""

from decimal import Decimal
from typing import Any


class QuoteError(Exception):
    """Base class for rejected quotes."""

    code = "QUOTE_ERROR"
    status_code = 422

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class NoRuleMatchedError(QuoteError):
    """No active pricing band covers the requested dimensions."""

    code = "NO_RULE_MATCHED"

    def __init__(self, thickness_id: str, height: Decimal, width: Decimal):
        self.thickness_id = thickness_id
        self.height = height
        self.width = width
        super().__init__(
            f"No pricing rule for thickness {thickness_id} at {height} x {width}",
            details={
                "thickness_id": thickness_id,
                "height": str(height),
                "width": str(width),
            },
        )


class InvalidConfigurationError(QuoteError):
    """The request references something unknown/unavailable or is malformed."""

    code = "INVALID_CONFIGURATION"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}", details={"field": field, "reason": reason})
