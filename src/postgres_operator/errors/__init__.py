"""
Error handling module for the PostgreSQL operator.

This module provides a small error hierarchy that integrates with kopf
and provides clear categorization for different types of failures.
"""

from .operator_errors import (
    BootstrapError,
    ConfigurationError,
    OperatorError,
    ValidationError,
)

__all__ = [
    "OperatorError",
    "ValidationError",
    "ConfigurationError",
    "BootstrapError",
]
