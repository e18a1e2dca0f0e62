"""Async adapter around the external assistant service.

This is the only module that touches the OpenAI SDK. Everything above it
works with the local value types defined here (RemoteRun, Turn, content
parts) and the AssistantService protocol, so tests can inject an
in-memory double instead of a network client.

Example:
    service = OpenAIAssistantService(config.openai)
    thread_id = await service.create_thread()
    await service.append_message(thread_id, "user", "Hello")
    run = await service.create_run(thread_id, "asst_123")
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol, Union

from openai import AsyncOpenAI, OpenAIError

from src.config import OpenAIConfig
from src.errors import RemoteFailure

logger = logging.getLogger(__name__)

FILE_SEARCH_TOOL = "file_search"

PENDING_STATUSES = frozenset({"queued", "in_progress", "requires_action", "cancelling"})
FAILURE_STATUSES = frozenset({"failed", "cancelled", "expired", "incomplete"})
COMPLETED_STATUS = "completed"


@dataclass(frozen=True)
class TextPart:
    """Text segment of a turn."""

    text: str
    type: str = "text"


@dataclass(frozen=True)
class OtherPart:
    """Any non-text content segment (image, file reference, refusal...)."""

    type: str


ContentPart = Union[TextPart, OtherPart]


@dataclass(frozen=True)
class Turn:
    """One immutable message in a thread."""

    id: str
    role: str
    parts: tuple[ContentPart, ...]
    created_at: datetime | None = None
    run_id: str | None = None

    @property
    def text(self) -> str:
        """Text parts joined with a blank line, in their given order."""
        return "\n\n".join(
            part.text for part in self.parts if isinstance(part, TextPart) and part.text
        )


@dataclass(frozen=True)
class RemoteRun:
    """Observed state of a run."""

    id: str
    thread_id: str
    status: str

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED_STATUS

    @property
    def is_failed(self) -> bool:
        return self.status in FAILURE_STATUSES


@dataclass(frozen=True)
class UploadedFileRef:
    """A file stored by the assistant service, ready to attach to a turn."""

    local_name: str
    byte_size: int
    mime_type: str
    remote_id: str


@dataclass(frozen=True)
class RawFile:
    """An uploaded document as received from the caller."""

    name: str
    content: bytes = field(repr=False)
    mime_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


class AssistantService(Protocol):
    """Remote operations the orchestrator consumes."""

    async def create_thread(self) -> str:
        ...

    async def append_message(
        self,
        thread_id: str,
        role: str,
        content: str,
        attachments: list[UploadedFileRef] | None = None,
    ) -> str:
        ...

    async def create_run(self, thread_id: str, assistant_id: str) -> RemoteRun:
        ...

    async def get_run(self, thread_id: str, run_id: str) -> RemoteRun:
        ...

    async def list_recent_turns(self, thread_id: str, limit: int) -> list[Turn]:
        ...

    async def upload_file(
        self, content: bytes, name: str, mime_type: str, purpose: str
    ) -> str:
        ...


def _to_content_part(raw: Any) -> ContentPart:
    """Convert one SDK content block into a local content part."""
    part_type = getattr(raw, "type", None) or "unknown"
    if part_type == "text":
        text_obj = getattr(raw, "text", None)
        value = getattr(text_obj, "value", None)
        if isinstance(value, str):
            return TextPart(text=value)
    return OtherPart(type=part_type)


def _to_turn(raw: Any) -> Turn:
    """Convert an SDK thread message into a Turn."""
    created = getattr(raw, "created_at", None)
    created_at = (
        datetime.fromtimestamp(created, tz=timezone.utc)
        if isinstance(created, (int, float))
        else None
    )
    return Turn(
        id=raw.id,
        role=raw.role,
        parts=tuple(_to_content_part(block) for block in (raw.content or [])),
        created_at=created_at,
        run_id=getattr(raw, "run_id", None),
    )


class OpenAIAssistantService:
    """AssistantService backed by the OpenAI Assistants (threads/runs) API.

    The SDK client is created lazily so a missing API key surfaces as a
    ConfigurationError on first use, after request input was validated.

    Attributes:
        _config: OpenAI section of the application config.
        _client: Lazily constructed AsyncOpenAI client.
    """

    def __init__(self, config: OpenAIConfig, client: AsyncOpenAI | None = None) -> None:
        self._config = config
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._config.require_api_key(),
                base_url=self._config.base_url or None,
                timeout=self._config.request_timeout_seconds,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client, if one was created."""
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def create_thread(self) -> str:
        try:
            thread = await self.client.beta.threads.create()
        except OpenAIError as e:
            raise RemoteFailure(operation="create_thread", details=str(e)) from e
        return thread.id

    async def append_message(
        self,
        thread_id: str,
        role: str,
        content: str,
        attachments: list[UploadedFileRef] | None = None,
    ) -> str:
        kwargs: dict[str, Any] = {"role": role, "content": content}
        if attachments:
            kwargs["attachments"] = [
                {"file_id": ref.remote_id, "tools": [{"type": FILE_SEARCH_TOOL}]}
                for ref in attachments
            ]
        try:
            message = await self.client.beta.threads.messages.create(thread_id, **kwargs)
        except OpenAIError as e:
            raise RemoteFailure(operation="append_message", details=str(e)) from e
        return message.id

    async def create_run(self, thread_id: str, assistant_id: str) -> RemoteRun:
        try:
            run = await self.client.beta.threads.runs.create(
                thread_id=thread_id, assistant_id=assistant_id
            )
        except OpenAIError as e:
            raise RemoteFailure(operation="create_run", details=str(e)) from e
        return RemoteRun(id=run.id, thread_id=thread_id, status=run.status)

    async def get_run(self, thread_id: str, run_id: str) -> RemoteRun:
        try:
            run = await self.client.beta.threads.runs.retrieve(
                run_id=run_id, thread_id=thread_id
            )
        except OpenAIError as e:
            raise RemoteFailure(operation="get_run", details=str(e)) from e
        return RemoteRun(id=run.id, thread_id=thread_id, status=run.status)

    async def list_recent_turns(self, thread_id: str, limit: int) -> list[Turn]:
        """List the newest turns of a thread, newest first."""
        try:
            page = await self.client.beta.threads.messages.list(
                thread_id=thread_id, limit=limit, order="desc"
            )
        except OpenAIError as e:
            raise RemoteFailure(operation="list_recent_turns", details=str(e)) from e
        return [_to_turn(message) for message in page.data]

    async def upload_file(
        self, content: bytes, name: str, mime_type: str, purpose: str
    ) -> str:
        try:
            uploaded = await self.client.files.create(
                file=(name, content, mime_type),
                purpose=purpose,
            )
        except OpenAIError as e:
            raise RemoteFailure("E-3004", name=name, details=str(e)) from e
        logger.debug("Uploaded %s (%d bytes) as %s", name, len(content), uploaded.id)
        return uploaded.id
