"""Error handling for typo-learn.

Provides:
- Custom exception hierarchy with categories
- Error context manager for logging failed operations
- Display formatting for the CLI
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from typo_learn.logging import get_logger

logger = get_logger(__name__)


class ErrorCategory(str, Enum):
    """Categories of errors for handling decisions."""

    STORAGE = "storage"  # Persistence read/write failed
    CONFIGURATION = "configuration"  # Bad config - don't retry
    VALIDATION = "validation"  # Bad input - don't retry
    INTERNAL = "internal"  # Bug in code - don't retry


class TypoLearnError(Exception):
    """Base exception for typo-learn errors.

    Attributes:
        message: Human-readable error message
        category: Error category for handling
        context: Additional context information
        recoverable: Whether the error is recoverable
    """

    category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        context: dict | None = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (context: {self.context})"
        return self.message


class StorageError(TypoLearnError):
    """Persistence failure.

    Raised by correction stores when they cannot read or write, and
    surfaced unchanged from LearningEngine.learn_from_edit.
    """

    category = ErrorCategory.STORAGE

    def __init__(
        self,
        message: str,
        context: dict | None = None,
        recoverable: bool = True,
    ):
        super().__init__(message, context, recoverable=recoverable)


class NotFoundError(StorageError):
    """Raised when a requested record or file does not exist."""

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=False)


class ConfigurationError(TypoLearnError):
    """Configuration error.

    Examples: no store bound to the engine, unreadable settings file.
    """

    category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=False)


class ValidationError(TypoLearnError):
    """Input validation error.

    Examples: threshold outside [0, 1], empty correction text.
    """

    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=False)


class ErrorContext:
    """Context manager that logs failures of a named operation.

    Exceptions are never suppressed.

    Example:
        with ErrorContext("learn_from_edit", context={"tokens": 12}):
            store.save_correction(correction)
    """

    def __init__(
        self,
        operation: str,
        context: dict | None = None,
        log_level: int = logging.ERROR,
    ):
        """Initialize error context.

        Args:
            operation: Name of the operation being performed
            context: Additional context to include in log records
            log_level: Level for the failure record; lower it when the
                caller reports the error itself
        """
        self.operation = operation
        self.context = context or {}
        self.log_level = log_level
        self.error: Exception | None = None

    def __enter__(self) -> "ErrorContext":
        logger.debug(f"Starting operation: {self.operation}")
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: Any) -> bool:
        if exc_val is not None:
            self.error = exc_val
            logger.log(
                self.log_level,
                f"Error in {self.operation}: {exc_val}",
                extra={
                    "operation": self.operation,
                    "error_type": type(exc_val).__name__,
                    **self.context,
                },
            )
        else:
            logger.debug(f"Completed operation: {self.operation}")

        return False


def format_error_for_display(error: Exception) -> str:
    """Format an error message for user display.

    Args:
        error: Error to format

    Returns:
        Human-readable error message
    """
    if isinstance(error, TypoLearnError):
        category = error.category.value
        base_message = error.message

        if error.context:
            context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())
            return f"[{category}] {base_message} ({context_str})"

        return f"[{category}] {base_message}"

    return f"[error] {type(error).__name__}: {error}"
