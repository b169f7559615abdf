"""
Failure classification for the HTTP layer.

The core never raises for "error-like" outcomes that are normal data
(parse errors, ambiguous imports, invalid decks). KnownError is reserved
for requests the caller must fix, and is mapped to a JSON response by the
application's exception handler.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    PARSE_FAILED = "parse_failed"
    UNRESOLVED_CARDS = "unresolved_cards"

    # Resource failures
    NOT_FOUND = "not_found"
    EMPTY_RESULT = "empty_result"

    # Constraint violations
    VALIDATION_FAILED = "validation_failed"
    INVALID_FORMAT_RULES = "invalid_format_rules"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )
    errors: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Per-item diagnostics (e.g., per-line parse errors)",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
        errors: list[dict[str, Any]] | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        self.errors = errors or []
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a serializable FailureDetail."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
            errors=self.errors,
        )


class ImportSelectionError(KnownError):
    """
    Raised when user selections cannot finalize an import.

    Covers selections for unknown lines, missing selections and printings
    that were not offered for the line.
    """

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"Line {line_number}: {reason}",
            suggestion="Pick one of the offered printings for every ambiguous line.",
            status_code=400,
            errors=[{"line_number": line_number, "error": reason}],
        )
