"""Thread session manager for conversation lineage.

A conversation lives in the assistant service as a thread. This manager
resolves which thread a request continues: the caller's id is reused
unchanged, otherwise one new thread is created remotely.

Runs on one thread are not serialized by default; callers must await one
request before sending the next on the same thread. When serialization is
enabled, an asyncio.Lock keyed by thread id is held for the duration of a
turn and dropped once no request holds it.

Example:
    mgr = ThreadSessionManager(service, serialize_runs=True)
    thread_id = await mgr.resolve_thread(None)
    async with mgr.thread_lock(thread_id):
        ...
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from src.services.assistant_client import AssistantService

logger = logging.getLogger(__name__)


class ThreadLockRegistry:
    """Per-thread asyncio locks with reference counting.

    Safe for single-process usage (FastAPI's async loop). Not designed for
    multi-process deployment.

    Attributes:
        _locks: Dict of thread_id → (lock, holder count).
    """

    def __init__(self) -> None:
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def hold(self, thread_id: str) -> AsyncIterator[None]:
        """Hold the lock for a thread until the block exits."""
        lock, holders = self._locks.get(thread_id, (asyncio.Lock(), 0))
        self._locks[thread_id] = (lock, holders + 1)
        try:
            async with lock:
                yield
        finally:
            lock, holders = self._locks[thread_id]
            if holders <= 1:
                del self._locks[thread_id]
            else:
                self._locks[thread_id] = (lock, holders - 1)

    def active_threads(self) -> list[str]:
        """Thread ids currently held or awaited."""
        return list(self._locks.keys())


class ThreadSessionManager:
    """Resolves conversation threads and optionally serializes runs per thread.

    Attributes:
        _service: Assistant service used to create threads.
        _serialize_runs: Whether thread_lock() actually locks.
        _registry: Shared lock registry (process-wide when serializing).
    """

    def __init__(
        self,
        service: AssistantService,
        serialize_runs: bool = False,
        registry: ThreadLockRegistry | None = None,
    ) -> None:
        self._service = service
        self._serialize_runs = serialize_runs
        self._registry = registry or ThreadLockRegistry()

    async def resolve_thread(self, existing_id: str | None = None) -> str:
        """Return the caller's thread id, or create a new thread.

        The supplied id is not validated remotely; an unknown id fails on
        first use.

        Args:
            existing_id: Thread id from a previous response, if any.

        Returns:
            Thread id to use for this request.
        """
        if isinstance(existing_id, str) and existing_id:
            return existing_id
        thread_id = await self._service.create_thread()
        logger.info("Created new thread: %s", thread_id)
        return thread_id

    @asynccontextmanager
    async def thread_lock(self, thread_id: str) -> AsyncIterator[None]:
        """Serialize the enclosed turn against others on the same thread."""
        if not self._serialize_runs:
            yield
            return
        async with self._registry.hold(thread_id):
            yield
