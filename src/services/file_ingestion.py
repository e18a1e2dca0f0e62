"""Concurrent document upload to assistant service storage.

Validates the whole batch before any network call, then uploads every
file concurrently. The batch succeeds or fails as a unit: a turn never
gets a mix of uploaded and failed attachments.
"""

import asyncio
import logging
from collections.abc import Sequence

from src.errors import ClientInputError, RemoteFailure
from src.services.assistant_client import AssistantService, RawFile, UploadedFileRef

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


class FileIngestionAdapter:
    """Uploads raw documents and returns remote file references.

    Attributes:
        _service: Assistant service performing uploads.
        _max_files: Maximum number of files per batch.
        _max_file_bytes: Maximum size of a single file.
        _purpose: Purpose tag declared on each upload (retrieval).
    """

    def __init__(
        self,
        service: AssistantService,
        max_files: int = 50,
        max_file_bytes: int = 50 * 1024 * 1024,
        purpose: str = "assistants",
    ) -> None:
        self._service = service
        self._max_files = max_files
        self._max_file_bytes = max_file_bytes
        self._purpose = purpose

    @property
    def max_files(self) -> int:
        return self._max_files

    def validate_batch(self, files: Sequence[RawFile]) -> None:
        """Reject a batch that is empty, too large, or holds an oversized file.

        Raises:
            ClientInputError: E-1001, E-1002 or E-1004.
        """
        if not files:
            raise ClientInputError("E-1001")
        if len(files) > self._max_files:
            raise ClientInputError("E-1002", count=len(files), limit=self._max_files)
        for f in files:
            if f.size > self._max_file_bytes:
                raise ClientInputError(
                    "E-1004", name=f.name, size=f.size, limit=self._max_file_bytes
                )

    async def _upload_one(self, f: RawFile) -> UploadedFileRef:
        mime_type = f.mime_type or DEFAULT_MIME_TYPE
        remote_id = await self._service.upload_file(
            f.content, f.name, mime_type, self._purpose
        )
        return UploadedFileRef(
            local_name=f.name,
            byte_size=f.size,
            mime_type=mime_type,
            remote_id=remote_id,
        )

    async def ingest(self, files: Sequence[RawFile]) -> list[UploadedFileRef]:
        """Upload all files concurrently, preserving input order.

        Args:
            files: Documents to upload.

        Returns:
            One UploadedFileRef per input file, in input order.

        Raises:
            ClientInputError: If the batch fails validation.
            RemoteFailure: If any single upload fails.
        """
        self.validate_batch(files)
        logger.info("Uploading %d file(s)", len(files))

        results = await asyncio.gather(
            *(self._upload_one(f) for f in files),
            return_exceptions=True,
        )

        refs: list[UploadedFileRef] = []
        for f, result in zip(files, results):
            if isinstance(result, BaseException):
                logger.error("Upload failed for %s: %s", f.name, result)
                if isinstance(result, RemoteFailure) or not isinstance(result, Exception):
                    raise result
                raise RemoteFailure("E-3004", name=f.name, details=str(result)) from result
            refs.append(result)

        logger.info("Uploaded file ids: %s", [r.remote_id for r in refs])
        return refs
