"""Error handling framework for Wiring Analyst.

This package provides:
- Error code registry with E-XXXX format codes
- Typed domain exceptions mapped to HTTP status codes
- Error formatting for API envelopes and terminal output

Error categories:
- E-1xxx: Client input errors (HTTP 400)
- E-2xxx: Configuration errors (HTTP 500)
- E-3xxx: Assistant service errors (HTTP 500)
- E-4xxx: System/internal errors (HTTP 500)
"""

from src.errors.domain import (
    ClientInputError,
    ConfigurationError,
    RemoteFailure,
    RunFailedError,
    RunTimeoutError,
)
from src.errors.formatter import AppError, error_envelope, format_error
from src.errors.registry import (
    ERROR_REGISTRY,
    ErrorCategory,
    ErrorCode,
    get_error,
    get_errors_by_category,
)

__all__ = [
    # Registry
    "ErrorCode",
    "ErrorCategory",
    "ERROR_REGISTRY",
    "get_error",
    "get_errors_by_category",
    # Formatter
    "AppError",
    "error_envelope",
    "format_error",
    # Domain
    "ClientInputError",
    "ConfigurationError",
    "RemoteFailure",
    "RunFailedError",
    "RunTimeoutError",
]
