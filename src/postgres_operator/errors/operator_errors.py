"""
Operator error hierarchy with categorization and retry logic.

This module defines the error types used throughout the PostgreSQL operator,
providing clear categorization and integration with kopf's retry and
admission mechanisms.

Admission policy violations are never raised from the validation rules
themselves: they are collected as field errors and only wrapped in a
ValidationError at the admission boundary.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import kopf

if TYPE_CHECKING:
    from postgres_operator.models.field_errors import FieldError


class OperatorError(Exception):
    """
    Base error class for all operator-related exceptions.

    Provides categorization, retry behavior, and user guidance for resolution.
    """

    def __init__(
        self,
        message: str,
        category: str,
        retryable: bool = True,
        delay: int = 30,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize operator error.

        Args:
            message: Human-readable error description
            category: Error category (validation, configuration, bootstrap)
            retryable: Whether kopf should retry this operation
            delay: Suggested retry delay in seconds
            user_action: What user should do to resolve the issue
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.category = category
        self.retryable = retryable
        self.delay = delay
        self.user_action = user_action
        self.cause = cause

    def as_kopf_error(self):
        """Convert to appropriate kopf exception type."""
        if self.retryable:
            return kopf.TemporaryError(str(self), delay=self.delay)
        else:
            return kopf.PermanentError(str(self))

    def __str__(self) -> str:
        """Enhanced string representation with user guidance."""
        base_msg = super().__str__()
        if self.user_action:
            return f"{base_msg}\nAction required: {self.user_action}"
        return base_msg


class ValidationError(OperatorError):
    """Aggregated field errors found while validating a Cluster."""

    def __init__(
        self,
        errors: Sequence[FieldError],
        resource_name: str | None = None,
        user_action: str | None = None,
    ):
        self.errors = list(errors)
        self.resource_name = resource_name
        subject = f"Cluster {resource_name!r}" if resource_name else "Cluster"
        lines = "\n".join(f"- {error}" for error in self.errors)
        super().__init__(
            message=f"{subject} is invalid ({len(self.errors)} error(s)):\n{lines}",
            category="validation",
            retryable=False,
            user_action=user_action
            or "Fix every listed field and submit the Cluster again",
        )

    def as_admission_error(self) -> kopf.AdmissionError:
        """Convert to the error kopf turns into a denied admission review."""
        lines = "; ".join(str(error) for error in self.errors)
        return kopf.AdmissionError(f"Cluster validation failed: {lines}", code=422)


class ConfigurationError(OperatorError):
    """Error in operator configuration."""

    def __init__(
        self, message: str, retryable: bool = False, user_action: str | None = None
    ):
        super().__init__(
            message=message,
            category="configuration",
            retryable=retryable,
            user_action=user_action or "Review and correct operator configuration",
        )


class BootstrapError(OperatorError):
    """File-system failure while installing the operator entry-point."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(
            message=message,
            category="bootstrap",
            retryable=False,
            user_action="Check that the target volume is mounted and writable",
            cause=cause,
        )
