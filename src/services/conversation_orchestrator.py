"""Compose thread resolution, ingestion, runs and extraction per request.

Two flows share the same pipeline:

    analyze: validate files → check identity → resolve thread → upload →
             run turn (analysis assistant, schema prompt) → extract table
    chat:    validate text → check identity → resolve thread →
             run turn (chat assistant)

Retrying a request starts a new run; nothing here is idempotent beyond
what the assistant service guarantees.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from src.config import AppConfig
from src.errors import ClientInputError
from src.services.assistant_client import AssistantService, RawFile, UploadedFileRef
from src.services.file_ingestion import FileIngestionAdapter
from src.services.prompts import (
    EMPTY_ANALYSIS_REPLY,
    TABLE_FOUND_NOTE,
    TABLE_MISSING_NOTE,
    build_analysis_prompt,
)
from src.services.run_driver import RunDriver
from src.services.table_extractor import extract_table
from src.services.thread_session_manager import ThreadLockRegistry, ThreadSessionManager

logger = logging.getLogger(__name__)


@dataclass
class AnalyzeResult:
    """Outcome of an analyze request."""

    thread_id: str
    reply: str
    table: dict | None
    files: list[UploadedFileRef] = field(default_factory=list)

    @property
    def note(self) -> str:
        return TABLE_FOUND_NOTE if self.table is not None else TABLE_MISSING_NOTE


@dataclass
class ChatResult:
    """Outcome of a chat request."""

    thread_id: str
    reply: str


class ConversationOrchestrator:
    """Entry point for the analyze and chat flows.

    Attributes:
        _config: Application configuration.
        _sessions: Thread resolution and optional per-thread locking.
        _ingestion: Upload adapter.
        _driver: Run driver.
    """

    def __init__(
        self,
        service: AssistantService,
        config: AppConfig,
        lock_registry: ThreadLockRegistry | None = None,
        run_driver: RunDriver | None = None,
    ) -> None:
        self._config = config
        self._sessions = ThreadSessionManager(
            service,
            serialize_runs=config.server.serialize_thread_runs,
            registry=lock_registry,
        )
        self._ingestion = FileIngestionAdapter(
            service,
            max_files=config.uploads.max_files,
            max_file_bytes=config.uploads.max_file_bytes,
            purpose=config.uploads.purpose,
        )
        self._driver = run_driver or RunDriver(
            service,
            poll_interval=config.runs.poll_interval_seconds,
            max_attempts=config.runs.max_poll_attempts,
            recent_turn_limit=config.runs.recent_turn_limit,
        )

    @property
    def max_files(self) -> int:
        """Upload limit per analyze request."""
        return self._ingestion.max_files

    async def analyze(
        self,
        files: Sequence[RawFile],
        thread_id: str | None = None,
    ) -> AnalyzeResult:
        """Upload documents, run the analysis assistant, extract the table.

        The assistant identity always comes from configuration, never from
        the caller.

        Raises:
            ClientInputError: No files, too many files, or a file too large.
            ConfigurationError: Analysis assistant id not configured.
            RemoteFailure: Upload, run, or service failure.
        """
        self._ingestion.validate_batch(files)
        assistant_id = self._config.openai.require_analyze_assistant()

        resolved = await self._sessions.resolve_thread(thread_id)
        logger.info("Analyze: thread_id=%s files=%d", resolved, len(files))

        refs = await self._ingestion.ingest(files)

        async with self._sessions.thread_lock(resolved):
            reply = await self._driver.run_turn(
                resolved, build_analysis_prompt(), assistant_id, attachments=refs
            )

        reply = reply or EMPTY_ANALYSIS_REPLY
        table = extract_table(reply, strictness=self._config.extraction.strictness)
        if table is None:
            logger.info("Analyze: no table extracted on thread %s", resolved)
        else:
            logger.info(
                "Analyze: table extracted on thread %s rows=%d",
                resolved, len(table.get("rows", [])),
            )
        return AnalyzeResult(thread_id=resolved, reply=reply, table=table, files=refs)

    async def chat(
        self,
        message: str,
        thread_id: str | None = None,
        assistant_id: str | None = None,
    ) -> ChatResult:
        """Send one follow-up message and return the assistant's reply.

        Args:
            message: User message text.
            thread_id: Thread to continue, if any.
            assistant_id: Per-request override of the chat assistant, honored
                only when overrides are allowed by configuration.

        Raises:
            ClientInputError: Empty message.
            ConfigurationError: Chat assistant id not configured.
            RemoteFailure: Run or service failure.
        """
        text = (message or "").strip()
        if not text:
            raise ClientInputError("E-1003")

        openai_config = self._config.openai
        if assistant_id and openai_config.allow_chat_assistant_override:
            resolved_assistant = assistant_id
        else:
            if assistant_id:
                logger.warning("Ignoring chat assistant override (not allowed by config)")
            resolved_assistant = openai_config.require_chat_assistant()

        resolved = await self._sessions.resolve_thread(thread_id)
        logger.info("Chat: thread_id=%s assistant_id=%s", resolved, resolved_assistant)

        async with self._sessions.thread_lock(resolved):
            reply = await self._driver.run_turn(resolved, text, resolved_assistant)

        return ChatResult(thread_id=resolved, reply=reply)
