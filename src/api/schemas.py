"""Pydantic schemas for the analyze, chat and export endpoints.

Field names follow the JSON contract consumed by the web client
(camelCase), so no alias generation is involved.
"""

from typing import Any

from pydantic import BaseModel, Field


class FileSummary(BaseModel):
    """Echo of one received file."""

    name: str
    size: int
    type: str


class AnalyzeResponse(BaseModel):
    """Response for POST /api/analyze."""

    received: int
    files: list[FileSummary]
    threadId: str
    reply: str
    table: dict[str, Any] | None = Field(
        default=None,
        description="Extracted terminal table, null when the reply held no valid table",
    )
    note: str


class ChatRequest(BaseModel):
    """Request for POST /api/chat.

    Accepts either ``{message}`` or a chat-SDK style ``{messages: [...]}``
    list, in which case the last message's text is used. A non-string
    ``message`` is ignored in favor of ``messages``.
    """

    message: Any = None
    messages: list[Any] | None = None
    threadId: str | None = None
    assistantId: str | None = None

    def resolve_input_text(self) -> str:
        """Return the user text to send, or "" if none was supplied."""
        if isinstance(self.message, str) and self.message.strip():
            return self.message.strip()
        if not self.messages:
            return ""
        return _message_text(self.messages[-1]).strip()


def _message_text(message: Any) -> str:
    """Resolve text from the message shapes chat clients send.

    Supported: ``{content: [{text: {value}}]}``, ``{content: {text: {value}}}``
    and ``{content: "..."}``.
    """
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list) and content:
        first = content[0]
        if isinstance(first, dict):
            text = first.get("text")
            if isinstance(text, dict) and isinstance(text.get("value"), str):
                return text["value"]
            if isinstance(text, str):
                return text
        return ""
    if isinstance(content, dict):
        text = content.get("text")
        if isinstance(text, dict) and isinstance(text.get("value"), str):
            return text["value"]
    return ""


class ChatResponse(BaseModel):
    """Response for POST /api/chat."""

    threadId: str
    reply: str


class ExportRequest(BaseModel):
    """Request for POST /api/export."""

    table: dict[str, Any]
    sourceName: str | None = Field(
        default=None,
        description="Name of the analyzed document, used in the download file name",
    )


class ErrorResponse(BaseModel):
    """Error envelope returned with 4xx/5xx statuses."""

    error: str
    error_code: str | None = None
