"""Structured exception hierarchy for the few failures that are not swallowed.

Canonical logging is instrumentation: data problems (missing context,
mismatched kinds, unparsable headers) degrade silently and never reach the
caller. Programming errors, such as wiring the middleware without a sink,
are the exception and fail loudly through this hierarchy.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for monitoring and alerting
- **ClogError**: Base exception with error code, severity and context
- **ConfigurationError**: Misconfiguration detected at construction time
"""

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """A required dependency was missing or invalid at construction time."""


class Severity(Enum):
    """Severity levels for errors in the application."""

    LOW = "LOW"
    """Low severity errors that don't significantly impact functionality."""

    MEDIUM = "MEDIUM"
    """Medium severity errors that may affect some features but not critical ops."""

    HIGH = "HIGH"
    """High severity errors impacting critical functionality or data integrity."""

    CRITICAL = "CRITICAL"
    """Critical errors requiring immediate attention, may cause system failures."""


class ClogError(Exception):
    """Base exception class for all application exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ConfigurationError(ClogError):
    """Exception raised when a component is constructed with a missing dependency.

    This indicates a programming error rather than a runtime data condition,
    so it is raised immediately instead of degrading to a no-op.

    Args:
        message: Description of what is misconfigured
        context: Additional context information about the error
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.CONFIGURATION_ERROR, message, Severity.CRITICAL, context
        )
