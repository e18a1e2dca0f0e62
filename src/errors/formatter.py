"""AppError and its two renderings.

An AppError leaves the process either as the API's JSON envelope
(``error_envelope``) or as terminal text for the CLI (``format_error``).
"""

from dataclasses import dataclass, field

from src.errors.registry import get_error


@dataclass
class AppError(Exception):
    """Error raised anywhere in the service, keyed by a registry code.

    Attributes:
        code: Error code in E-XXXX format.
        message: Rendered message, safe to show to the caller.
        remediation: Suggested next step.
        http_status: Status returned at the API boundary.
        details: Structured context, when the raiser supplied a dict.
    """

    code: str
    message: str
    remediation: str = ""
    http_status: int = 500
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    @classmethod
    def from_code(cls, code: str, **context: object) -> "AppError":
        """Build an error from its registry entry.

        Unknown codes still produce an error (status 500) rather than
        raising while handling another failure.
        """
        entry = get_error(code)
        if entry is None:
            return cls(code=code, message=f"Unknown error: {code}", remediation="Contact support.")

        details = context.get("details")
        return cls(
            code=entry.code,
            message=entry.render(**context),
            remediation=entry.remediation,
            http_status=entry.http_status,
            details=details if isinstance(details, dict) else {},
        )


def format_error(error: AppError, include_remediation: bool = True) -> str:
    """Terminal rendering: ``CODE: message`` plus an indented action line."""
    text = str(error)
    if include_remediation and error.remediation:
        text += f"\n  Action: {error.remediation}"
    return text


def error_envelope(error: AppError) -> dict:
    """JSON body returned by the API for any failure."""
    return {"error": error.message, "error_code": error.code}
