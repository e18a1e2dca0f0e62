"""Extract the terminal assignment table from an assistant reply.

The assistant is asked to put the table in a single fenced ```json block,
but compliance is best-effort. Extraction tries, in order:

1. the first fenced code block (language tag optional, case-insensitive)
2. the whole reply text

and returns the first candidate that parses as JSON and passes the shape
check. A table is either returned whole or not at all.
"""

import json
import logging
import re
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)

Strictness = Literal["shallow", "strict"]

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


class Controller(str, Enum):
    """Supported compound controllers."""

    CAREL = "Carel"
    DANFOSS = "Danfoss"
    WURM = "Wurm"


class SignalCategory(str, Enum):
    SENSOR = "Sensor"
    ACTUATOR = "Actuator"
    LOAD = "Load"


class IoType(str, Enum):
    DIGITAL_IN = "DigitalIn"
    DIGITAL_OUT = "DigitalOut"
    ANALOG_IN = "AnalogIn"
    ANALOG_OUT = "AnalogOut"
    PWM = "PWM"
    BUS = "Bus"


class TerminalRow(BaseModel):
    """One signal's terminal assignment."""

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    signal: str
    category: SignalCategory
    ioType: IoType
    module: str
    slot: str
    terminal: str
    voltage: str
    cable: str
    article: str
    source: str


class TerminalTable(BaseModel):
    """Terminal assignment for one controller."""

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    controller: Controller
    assumptions: str
    rows: list[TerminalRow]


# Column order used by the schema instruction and the spreadsheet export.
ROW_FIELDS: tuple[str, ...] = tuple(TerminalRow.model_fields.keys())


def has_table_shape(obj: Any) -> bool:
    """Minimal shape check: an object with ``controller`` and a ``rows`` list."""
    return (
        isinstance(obj, dict)
        and "controller" in obj
        and "rows" in obj
        and isinstance(obj["rows"], list)
    )


def _try_parse(raw: str, strictness: Strictness) -> dict | None:
    try:
        obj = json.loads(raw)
    except (json.JSONDecodeError, ValueError):
        return None

    if not has_table_shape(obj):
        return None
    if strictness == "shallow":
        return obj

    try:
        return TerminalTable.model_validate(obj).model_dump()
    except ValidationError as e:
        logger.info("Table rejected by strict validation: %d error(s)", e.error_count())
        return None


def extract_table(reply_text: str, strictness: Strictness = "shallow") -> dict | None:
    """Extract a terminal table from free-form reply text.

    Args:
        reply_text: Assistant reply.
        strictness: ``shallow`` returns the parsed object once the minimal
            shape check passes; ``strict`` requires every field and enum
            value to validate and returns the normalized table.

    Returns:
        The table as a dict, or None when no valid table was found.
    """
    if not reply_text:
        return None

    fence = _FENCE_PATTERN.search(reply_text)
    if fence and fence.group(1):
        parsed = _try_parse(fence.group(1), strictness)
        if parsed is not None:
            return parsed

    return _try_parse(reply_text, strictness)
