"""Drive one conversational turn through a run to its terminal state.

The driver appends a user turn, starts a run, and polls its status at a
fixed interval. It never changes a run's state; it only observes. Waiting
uses ``asyncio.sleep`` so polling never occupies a worker.

Outcomes:
    completed                      → newest assistant turn's text is returned
    failed/cancelled/expired/...   → RunFailedError
    still pending after budget     → RunTimeoutError (no reply is fetched)
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from src.errors import RunFailedError, RunTimeoutError
from src.services.assistant_client import AssistantService, RemoteRun, UploadedFileRef

logger = logging.getLogger(__name__)

_PROGRESS_LOG_EVERY = 10


class RunDriver:
    """Submits a turn and polls the resulting run.

    Attributes:
        _service: Assistant service.
        _poll_interval: Seconds between status polls.
        _max_attempts: Polls allowed before giving up.
        _recent_turn_limit: How many recent turns to scan for the reply.
        _sleep: Awaitable sleep, injectable for tests.
    """

    def __init__(
        self,
        service: AssistantService,
        poll_interval: float = 1.0,
        max_attempts: int = 120,
        recent_turn_limit: int = 15,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._service = service
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._recent_turn_limit = recent_turn_limit
        self._sleep = sleep

    async def run_turn(
        self,
        thread_id: str,
        user_text: str,
        assistant_id: str,
        attachments: list[UploadedFileRef] | None = None,
    ) -> str:
        """Append a user turn, run the assistant, and return its reply text.

        Args:
            thread_id: Thread to append to.
            user_text: Full user message, including any instruction block.
            assistant_id: Assistant identity executing the run.
            attachments: Uploaded files to attach for file search.

        Returns:
            Text of the newest assistant turn (may be empty).

        Raises:
            RunFailedError: Run reached a terminal failure status.
            RunTimeoutError: Run did not finish within the polling budget.
            RemoteFailure: Any service call failed.
        """
        await self._service.append_message(thread_id, "user", user_text, attachments)

        run = await self._service.create_run(thread_id, assistant_id)
        logger.info(
            "Run started: run_id=%s thread_id=%s assistant_id=%s",
            run.id, thread_id, assistant_id,
        )

        await self.wait_for_run(thread_id, run)
        return await self.fetch_latest_reply(thread_id)

    async def wait_for_run(self, thread_id: str, run: RemoteRun) -> RemoteRun:
        """Poll a run until it completes, fails, or the budget is exhausted.

        Returns:
            The completed run.
        """
        started_at = time.perf_counter()
        status = run.status
        attempts = 0
        while attempts < self._max_attempts:
            current = await self._service.get_run(thread_id, run.id)
            status = current.status
            if current.is_completed:
                logger.info(
                    "Run completed: run_id=%s polls=%d elapsed=%.1fs",
                    run.id, attempts + 1, time.perf_counter() - started_at,
                )
                return current
            if current.is_failed:
                logger.error("Run failed: run_id=%s status=%s", run.id, status)
                raise RunFailedError(run.id, status)

            await self._sleep(self._poll_interval)
            attempts += 1
            if attempts % _PROGRESS_LOG_EVERY == 0:
                logger.info(
                    "Polling run %s: attempt %d/%d status=%s",
                    run.id, attempts, self._max_attempts, status,
                )

        logger.error(
            "Run timed out: run_id=%s status=%s attempts=%d",
            run.id, status, attempts,
        )
        raise RunTimeoutError(
            run.id, status, seconds=self._poll_interval * self._max_attempts
        )

    async def fetch_latest_reply(self, thread_id: str) -> str:
        """Return the text of the newest assistant turn, or "" if none."""
        turns = await self._service.list_recent_turns(thread_id, self._recent_turn_limit)
        latest = next((t for t in turns if t.role == "assistant"), None)
        if latest is None:
            logger.warning("No assistant turn found on thread %s", thread_id)
            return ""
        return latest.text
