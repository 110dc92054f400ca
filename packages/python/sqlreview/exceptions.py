"""Exception hierarchy for sqlreview.

Engine-level failures are raised as exceptions and abort a review call.
Content findings are never raised; they are returned as Advice.

Hierarchy:
    SQLReviewError
    ├── ConfigurationError      - registry misuse, malformed policy documents
    │   └── DuplicateAdvisorError
    ├── InvalidConfigError      - a rule payload failed validation
    ├── NotSupportedError       - no advisor for a (dialect, rule type) pair
    ├── ParseError              - the script could not be parsed
    └── DiagnosticError         - a diagnostic query failed or could not be decoded
"""

from __future__ import annotations

from typing import Any


class SQLReviewError(Exception):
    """Base exception for all sqlreview errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary for structured error responses."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
        }


class ConfigurationError(SQLReviewError):
    """Invalid engine configuration (a programming or deployment mistake)."""


class DuplicateAdvisorError(ConfigurationError):
    """An advisor was registered twice for the same (dialect, rule type)."""

    def __init__(self, dialect: str, rule_type: str) -> None:
        self.dialect = dialect
        self.rule_type = rule_type
        super().__init__(f"Advisor for ({dialect}, {rule_type}) is already registered")


class InvalidConfigError(SQLReviewError):
    """A rule payload could not be decoded into its configuration."""

    def __init__(self, rule_type: str, detail: str) -> None:
        self.rule_type = rule_type
        self.detail = detail
        super().__init__(f"Invalid payload for rule '{rule_type}': {detail}")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["rule_type"] = self.rule_type
        result["detail"] = self.detail
        return result


class NotSupportedError(SQLReviewError):
    """No advisor is registered for the requested (dialect, rule type)."""

    def __init__(self, dialect: str, rule_type: str) -> None:
        self.dialect = dialect
        self.rule_type = rule_type
        super().__init__(f"Rule '{rule_type}' is not supported for dialect {dialect}")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["dialect"] = self.dialect
        result["rule_type"] = self.rule_type
        return result


class ParseError(SQLReviewError):
    """The script could not be parsed.

    Attributes:
        line: Best-effort 1-based line of the failure, 0 when unknown.
    """

    def __init__(self, message: str, line: int = 0) -> None:
        self.line = line
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["line"] = self.line
        return result


class DiagnosticError(SQLReviewError):
    """A diagnostic query failed, was cancelled, or returned an unexpected shape."""
