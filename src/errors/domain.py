"""Typed domain exceptions for API error mapping.

Each exception is built from a registry code, so routes never match on
message strings. The API exception handler turns any AppError into the
``{error, error_code}`` envelope using its ``http_status``.

Usage:
    # In service layer
    raise ClientInputError("E-1001")

    # Raised errors reach the handler in src.api.main unchanged.
"""

from src.errors.formatter import AppError


class ClientInputError(AppError):
    """Rejected request input. Maps to HTTP 400."""

    def __init__(self, code: str, **context: object) -> None:
        base = AppError.from_code(code, **context)
        super().__init__(
            code=base.code,
            message=base.message,
            remediation=base.remediation,
            http_status=400,
            details=base.details,
        )


class ConfigurationError(AppError):
    """A required configuration value is absent. Maps to HTTP 500."""

    def __init__(self, name: str) -> None:
        base = AppError.from_code("E-2001", name=name)
        super().__init__(
            code=base.code,
            message=base.message,
            remediation=base.remediation,
            http_status=500,
        )
        self.name = name


class RemoteFailure(AppError):
    """The assistant service rejected a call or could not be reached."""

    def __init__(self, code: str = "E-3003", **context: object) -> None:
        base = AppError.from_code(code, **context)
        super().__init__(
            code=base.code,
            message=base.message,
            remediation=base.remediation,
            http_status=500,
            details=base.details,
        )


class RunFailedError(RemoteFailure):
    """A run reached a terminal failure status."""

    def __init__(self, run_id: str, status: str) -> None:
        super().__init__("E-3001", status=status)
        self.run_id = run_id
        self.status = status


class RunTimeoutError(RemoteFailure):
    """A run was still pending when the polling budget ran out."""

    def __init__(self, run_id: str, status: str, seconds: float) -> None:
        super().__init__("E-3002", run_id=run_id, status=status, seconds=seconds)
        self.run_id = run_id
        self.status = status
