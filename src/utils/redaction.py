"""Secret redaction for log lines and outgoing error messages.

Two entry points:

    redact_for_logging(payload)   structured data (request bodies, config dumps)
    sanitize_error_message(text)  free text (SDK exceptions, upstream errors)

Structured redaction matches key names; free-text redaction matches
``key=value`` style pairs, bearer headers and bare provider keys. Key names
stay visible in the output so a redacted line is still useful for debugging.
"""

import re
from typing import Any

REDACTED = "***REDACTED***"

_SENSITIVE_KEY = re.compile(
    r"secret|token|authorization|api_?key|password|credential",
    re.IGNORECASE,
)

# Keys whose whole value is replaced, whatever its type.
_OPAQUE_KEYS = frozenset({"credentials", "headers"})

_TEXT_RULES: tuple[tuple[re.Pattern, str], ...] = (
    (
        re.compile(r"(Authorization\s*:\s*Bearer\s+)\S+", re.IGNORECASE),
        r"\1" + REDACTED,
    ),
    (
        re.compile(
            r'("(?:[\w-]*(?:secret|token|password|api_?key|credential)[\w-]*)"\s*:\s*)"[^"]*"',
            re.IGNORECASE,
        ),
        r"\1" + f'"{REDACTED}"',
    ),
    (
        re.compile(
            r"(\b[\w-]*(?:secret|token|password|api_?key|credential)[\w-]*\s*[=:]\s*)"
            r"(?:\"[^\"]*\"|\S+)",
            re.IGNORECASE,
        ),
        r"\1" + REDACTED,
    ),
    (re.compile(r"\bsk-[A-Za-z0-9_\-*]{8,}"), REDACTED),
)


def _redact_value(key: str, value: Any) -> Any:
    if key.lower() in _OPAQUE_KEYS or _SENSITIVE_KEY.search(key):
        return REDACTED
    if isinstance(value, dict):
        return redact_for_logging(value)
    if isinstance(value, (list, tuple)):
        return [redact_for_logging(v) if isinstance(v, dict) else v for v in value]
    return value


def redact_for_logging(obj: dict) -> dict:
    """Return a copy of ``obj`` with secret-looking values replaced.

    Nested dicts, and dicts inside lists, are redacted recursively. The
    input is not mutated.
    """
    return {key: _redact_value(str(key), value) for key, value in obj.items()}


def sanitize_error_message(msg: str | None, max_length: int = 2000) -> str | None:
    """Redact secrets from free text and cap its length.

    Args:
        msg: Message to sanitize (None passes through).
        max_length: Maximum length of the result, including the ellipsis.

    Returns:
        Sanitized message, or None.
    """
    if msg is None:
        return None
    for pattern, replacement in _TEXT_RULES:
        msg = pattern.sub(replacement, msg)
    if len(msg) > max_length:
        msg = msg[:max_length - 3] + "..."
    return msg
