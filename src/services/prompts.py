"""User-turn text sent with an analysis request.

The schema block is embedded in the user turn, not the assistant's stored
instructions, so the analysis assistant can be reconfigured remotely
without breaking table extraction.
"""

import json

from src.services.table_extractor import Controller, IoType, SignalCategory


def _choices(enum_cls) -> str:
    return "|".join(member.value for member in enum_cls)


_EXAMPLE_TABLE = {
    "controller": _choices(Controller),
    "assumptions": "short note on assumptions made",
    "rows": [
        {
            "signal": "e.g. suction pressure sensor",
            "category": _choices(SignalCategory),
            "ioType": _choices(IoType),
            "module": "e.g. CAREL I/O expander 8DI/8DO",
            "slot": "e.g. terminal block / module slot",
            "terminal": "e.g. DI1 / DO3 / AI2",
            "voltage": "e.g. 24V AC/DC",
            "cable": "recommended cable type / cross-section",
            "article": "article number / type, if available",
            "source": "reference: file + page/position",
        }
    ],
}

TABLE_SCHEMA_INSTRUCTION = (
    "Return the terminal assignment **first as JSON**, with exactly this "
    "structure (no additional fields):\n"
    + json.dumps(_EXAMPLE_TABLE, indent=2)
    + "\n**IMPORTANT:** The JSON output MUST be inside a single ```json code block. "
    "Afterwards (optionally) add a brief Markdown summary."
)

ANALYSIS_REQUEST = (
    "Analyze the uploaded P&ID / documents and create a terminal assignment.\n"
    "1) Identify actuators, sensors and electrical loads.\n"
    "2) Determine the additional modules required for the specified compound controller.\n"
    "3) First return the terminal assignment **as JSON** in the required schema.\n"
)

EMPTY_ANALYSIS_REPLY = "Analysis completed - no text content found."

TABLE_FOUND_NOTE = "JSON table recognized and included."
TABLE_MISSING_NOTE = (
    "Note: JSON table not recognized. You can request it in the chat: "
    "'Output the terminal assignment only as JSON according to the schema.'"
)


def build_analysis_prompt() -> str:
    """Full user-turn text for an analysis request."""
    return ANALYSIS_REQUEST + "\n" + TABLE_SCHEMA_INSTRUCTION
