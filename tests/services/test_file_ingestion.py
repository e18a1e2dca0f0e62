"""Tests for FileIngestionAdapter.

Batch validation happens before any upload; uploads run concurrently and
results keep input order; one failure fails the whole batch.
"""

import pytest

from src.errors import ClientInputError, RemoteFailure
from src.services.assistant_client import RawFile
from src.services.file_ingestion import FileIngestionAdapter
from tests.helpers import FakeAssistantService


def _files(*names: str) -> list[RawFile]:
    return [RawFile(name=n, content=n.encode(), mime_type="application/pdf") for n in names]


class TestValidateBatch:

    def test_empty_batch_rejected(self):
        service = FakeAssistantService()
        with pytest.raises(ClientInputError) as exc_info:
            FileIngestionAdapter(service).validate_batch([])
        assert exc_info.value.code == "E-1001"
        assert exc_info.value.message == "No files received."
        assert exc_info.value.http_status == 400

    def test_too_many_files_names_limit(self):
        adapter = FileIngestionAdapter(FakeAssistantService(), max_files=2)
        with pytest.raises(ClientInputError) as exc_info:
            adapter.validate_batch(_files("a", "b", "c"))
        assert exc_info.value.code == "E-1002"
        assert "received 3" in exc_info.value.message
        assert "limit is 2" in exc_info.value.message

    def test_limit_itself_accepted(self):
        adapter = FileIngestionAdapter(FakeAssistantService(), max_files=2)
        adapter.validate_batch(_files("a", "b"))

    def test_oversized_file_rejected(self):
        adapter = FileIngestionAdapter(FakeAssistantService(), max_file_bytes=4)
        big = RawFile(name="big.pdf", content=b"12345")
        with pytest.raises(ClientInputError) as exc_info:
            adapter.validate_batch([big])
        assert exc_info.value.code == "E-1004"
        assert "big.pdf" in exc_info.value.message


class TestIngest:

    @pytest.mark.asyncio
    async def test_results_follow_input_order(self):
        """Completion order is shuffled by delays; output order is not."""
        service = FakeAssistantService(
            upload_delays={"first.pdf": 0.03, "second.pdf": 0.01, "third.pdf": 0.0}
        )
        adapter = FileIngestionAdapter(service)
        refs = await adapter.ingest(_files("first.pdf", "second.pdf", "third.pdf"))

        assert [r.local_name for r in refs] == ["first.pdf", "second.pdf", "third.pdf"]
        assert [r.remote_id for r in refs] == [
            "file-first.pdf", "file-second.pdf", "file-third.pdf",
        ]

    @pytest.mark.asyncio
    async def test_ref_carries_size_and_type(self):
        service = FakeAssistantService()
        refs = await FileIngestionAdapter(service).ingest(
            [RawFile(name="notes.txt", content=b"abcdef", mime_type="text/plain")]
        )
        assert refs[0].byte_size == 6
        assert refs[0].mime_type == "text/plain"

    @pytest.mark.asyncio
    async def test_missing_mime_type_defaults(self):
        service = FakeAssistantService()
        refs = await FileIngestionAdapter(service).ingest(
            [RawFile(name="blob", content=b"x", mime_type="")]
        )
        assert refs[0].mime_type == "application/octet-stream"
        assert service.calls[0] == (
            "upload_file", "blob", "application/octet-stream", "assistants",
        )

    @pytest.mark.asyncio
    async def test_one_failure_fails_batch(self):
        service = FakeAssistantService(fail_uploads={"second.pdf"})
        adapter = FileIngestionAdapter(service)
        with pytest.raises(RemoteFailure) as exc_info:
            await adapter.ingest(_files("first.pdf", "second.pdf", "third.pdf"))
        assert exc_info.value.code == "E-3004"
        assert "second.pdf" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_unexpected_upload_error_wrapped(self):
        class Exploding(FakeAssistantService):
            async def upload_file(self, content, name, mime_type, purpose):
                raise RuntimeError("socket closed")

        with pytest.raises(RemoteFailure) as exc_info:
            await FileIngestionAdapter(Exploding()).ingest(_files("a.pdf"))
        assert exc_info.value.code == "E-3004"
        assert "socket closed" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_invalid_batch_makes_no_network_call(self):
        service = FakeAssistantService()
        adapter = FileIngestionAdapter(service, max_files=1)
        with pytest.raises(ClientInputError):
            await adapter.ingest(_files("a.pdf", "b.pdf"))
        assert service.calls == []
