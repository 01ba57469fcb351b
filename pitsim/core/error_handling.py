"""
Centralized error types and error reporting for the simulator.
"""

import logging
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ErrorSeverity(Enum):
    """Enumeration of error severity levels for the simulator."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SimulatorError(Exception):
    """Base class for every error raised by the simulator."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}


class ContentNotFoundError(SimulatorError):
    """Raised when a creature, item or skill id is not in the repository."""

    def __init__(self, kind: str, content_id: str, suggestions: Optional[list[str]] = None) -> None:
        message = f"{kind.capitalize()} not found: '{content_id}'"
        if suggestions:
            message += f" (did you mean '{suggestions[0]}'?)"
        super().__init__(message, {"kind": kind, "id": content_id})
        self.kind = kind
        self.content_id = content_id
        self.suggestions = suggestions or []


class ContentLoadError(SimulatorError):
    """Raised when a data file is missing or malformed."""


class InvalidDiceExpressionError(SimulatorError, ValueError):
    """Raised when a dice expression does not follow the NdS+M notation."""


class InlineCreatureError(SimulatorError, ValueError):
    """Raised when an inline creature definition cannot be built."""


@dataclass
class SimulatorIssue:
    """A recorded problem with severity, context and optional exception."""

    message: str
    severity: ErrorSeverity
    context: dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None


class ErrorHandler:
    """Collects and logs the problems reported while running the simulator."""

    def __init__(self) -> None:
        self.logger = logging.getLogger("pitsim.errors")
        self.history: list[SimulatorIssue] = []

    def handle(
        self,
        message: str,
        severity: ErrorSeverity,
        context: Optional[dict[str, Any]] = None,
        exception: Optional[Exception] = None,
    ) -> SimulatorIssue:
        """Record an issue and log it at the level matching its severity."""
        issue = SimulatorIssue(
            message=message,
            severity=severity,
            context=context or {},
            exception=exception,
        )
        self.history.append(issue)

        # Prefix context keys to avoid clashes with reserved LogRecord keys.
        safe_context = {f"ctx_{key}": value for key, value in issue.context.items()}

        if severity == ErrorSeverity.CRITICAL:
            self.logger.critical(f"CRITICAL: {message}", extra=safe_context)
            if exception:
                self.logger.critical(
                    "".join(traceback.format_exception(exception))
                )
        elif severity == ErrorSeverity.HIGH:
            self.logger.error(f"ERROR: {message}", extra=safe_context)
        elif severity == ErrorSeverity.MEDIUM:
            self.logger.warning(f"WARNING: {message}", extra=safe_context)
        else:
            self.logger.info(f"INFO: {message}", extra=safe_context)
        return issue

    def handle_exception(self, exception: SimulatorError, severity: ErrorSeverity) -> SimulatorIssue:
        """Record a simulator exception, carrying over its context."""
        return self.handle(exception.message, severity, exception.context, exception)

    def clear(self) -> None:
        self.history.clear()


# Global error handler instance
ERROR_HANDLER = ErrorHandler()
