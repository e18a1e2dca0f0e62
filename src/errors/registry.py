"""Error code registry with E-XXXX format codes.

This module defines the error code system for Wiring Analyst, organizing
errors into categories:
- E-1xxx: Client input errors
- E-2xxx: Configuration errors
- E-3xxx: Assistant service errors
- E-4xxx: System/internal errors

Each error includes a code, title, message template, remediation steps,
and the HTTP status it maps to at the API boundary.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error codes."""

    CLIENT_INPUT = "client_input"  # E-1xxx
    CONFIGURATION = "configuration"  # E-2xxx
    REMOTE = "remote"  # E-3xxx
    SYSTEM = "system"  # E-4xxx


# Client input errors are safe to surface verbatim with a 400;
# everything else is a server-side failure.
_CATEGORY_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.CLIENT_INPUT: 400,
    ErrorCategory.CONFIGURATION: 500,
    ErrorCategory.REMOTE: 500,
    ErrorCategory.SYSTEM: 500,
}


@dataclass
class ErrorCode:
    """Definition of an error code with metadata.

    Attributes:
        code: Error code in E-XXXX format.
        category: Error category for grouping.
        title: Short title for display.
        message_template: Message with {placeholders} for context.
        remediation: Action user should take to resolve.
    """

    code: str
    category: ErrorCategory
    title: str
    message_template: str
    remediation: str

    @property
    def http_status(self) -> int:
        """HTTP status code returned for this error."""
        return _CATEGORY_STATUS[self.category]

    def render(self, **context: object) -> str:
        """Fill the message template; the raw template is kept if context is short."""
        try:
            return self.message_template.format(**context)
        except (KeyError, ValueError):
            return self.message_template


ERROR_REGISTRY: dict[str, ErrorCode] = {
    # Client input errors (E-1xxx)
    "E-1001": ErrorCode(
        code="E-1001",
        category=ErrorCategory.CLIENT_INPUT,
        title="No Files",
        message_template="No files received.",
        remediation="Attach at least one document in the 'files' form field.",
    ),
    "E-1002": ErrorCode(
        code="E-1002",
        category=ErrorCategory.CLIENT_INPUT,
        title="Too Many Files",
        message_template="Too many files: received {count}, the limit is {limit} per request.",
        remediation="Split the documents across several analyze requests on the same thread.",
    ),
    "E-1003": ErrorCode(
        code="E-1003",
        category=ErrorCategory.CLIENT_INPUT,
        title="Missing Message",
        message_template=(
            "No message text received. Send {{ message: string }} or a messages array."
        ),
        remediation="Provide a non-empty chat message.",
    ),
    "E-1004": ErrorCode(
        code="E-1004",
        category=ErrorCategory.CLIENT_INPUT,
        title="File Too Large",
        message_template="File '{name}' is {size} bytes, the limit is {limit} bytes.",
        remediation="Reduce the document size or split it into several files.",
    ),
    "E-1005": ErrorCode(
        code="E-1005",
        category=ErrorCategory.CLIENT_INPUT,
        title="Invalid Request",
        message_template="Invalid request: {details}",
        remediation="Check the request body against the API documentation.",
    ),
    # Configuration errors (E-2xxx)
    "E-2001": ErrorCode(
        code="E-2001",
        category=ErrorCategory.CONFIGURATION,
        title="Missing Configuration",
        message_template="Server misconfigured: {name} is not set.",
        remediation="Set the value in the environment or the wiring-analyst.yaml config file.",
    ),
    # Assistant service errors (E-3xxx)
    "E-3001": ErrorCode(
        code="E-3001",
        category=ErrorCategory.REMOTE,
        title="Run Failed",
        message_template="Run status: {status}",
        remediation="Retry the request. A retry starts a new run on the same thread.",
    ),
    "E-3002": ErrorCode(
        code="E-3002",
        category=ErrorCategory.REMOTE,
        title="Run Timeout",
        message_template=(
            "Run {run_id} did not finish within {seconds:g} seconds (last status: {status})."
        ),
        remediation=(
            "The run may still complete remotely. Ask for the result in chat "
            "on the same thread before starting a new analysis."
        ),
    ),
    "E-3003": ErrorCode(
        code="E-3003",
        category=ErrorCategory.REMOTE,
        title="Assistant Service Unavailable",
        message_template="Assistant service request failed during {operation}: {details}",
        remediation="Check connectivity and credentials, then retry.",
    ),
    "E-3004": ErrorCode(
        code="E-3004",
        category=ErrorCategory.REMOTE,
        title="File Upload Failed",
        message_template="Upload of '{name}' failed: {details}",
        remediation="Retry the analysis. No files were attached to the conversation.",
    ),
    # System errors (E-4xxx)
    "E-4001": ErrorCode(
        code="E-4001",
        category=ErrorCategory.SYSTEM,
        title="Internal Error",
        message_template="{details}",
        remediation="This is a system error. Retry the operation.",
    ),
}


def get_error(code: str) -> ErrorCode | None:
    """Get error definition by code.

    Args:
        code: Error code in E-XXXX format.

    Returns:
        ErrorCode if found, None otherwise.
    """
    return ERROR_REGISTRY.get(code)


def get_errors_by_category(category: ErrorCategory) -> list[ErrorCode]:
    """Get all errors in a category."""
    return [e for e in ERROR_REGISTRY.values() if e.category == category]
