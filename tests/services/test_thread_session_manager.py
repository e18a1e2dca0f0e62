"""Tests for ThreadSessionManager and ThreadLockRegistry."""

import asyncio

import pytest

from src.services.thread_session_manager import ThreadLockRegistry, ThreadSessionManager
from tests.helpers import FakeAssistantService


@pytest.mark.asyncio
async def test_existing_thread_reused_unchanged():
    service = FakeAssistantService()
    mgr = ThreadSessionManager(service)
    assert await mgr.resolve_thread("thread_abc") == "thread_abc"
    assert await mgr.resolve_thread(" thread_abc ") == " thread_abc "
    assert service.count("create_thread") == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("existing", [None, ""])
async def test_missing_thread_creates_one(existing):
    service = FakeAssistantService()
    mgr = ThreadSessionManager(service)
    thread_id = await mgr.resolve_thread(existing)
    assert thread_id.startswith("thread_")
    assert service.count("create_thread") == 1


@pytest.mark.asyncio
async def test_lock_noop_when_not_serializing():
    registry = ThreadLockRegistry()
    mgr = ThreadSessionManager(FakeAssistantService(), registry=registry)
    async with mgr.thread_lock("t1"):
        assert registry.active_threads() == []


@pytest.mark.asyncio
async def test_serialized_turns_do_not_overlap():
    registry = ThreadLockRegistry()
    mgr = ThreadSessionManager(FakeAssistantService(), serialize_runs=True, registry=registry)
    events: list[str] = []

    async def turn(name: str) -> None:
        async with mgr.thread_lock("t1"):
            events.append(f"{name}-start")
            await asyncio.sleep(0.01)
            events.append(f"{name}-end")

    await asyncio.gather(turn("a"), turn("b"))

    assert events == ["a-start", "a-end", "b-start", "b-end"]
    assert registry.active_threads() == []


@pytest.mark.asyncio
async def test_different_threads_run_concurrently():
    registry = ThreadLockRegistry()
    mgr = ThreadSessionManager(FakeAssistantService(), serialize_runs=True, registry=registry)
    both_inside = asyncio.Event()
    inside = 0

    async def turn(thread_id: str) -> None:
        nonlocal inside
        async with mgr.thread_lock(thread_id):
            inside += 1
            if inside == 2:
                both_inside.set()
            await asyncio.wait_for(both_inside.wait(), timeout=1)

    await asyncio.gather(turn("t1"), turn("t2"))
    assert both_inside.is_set()


@pytest.mark.asyncio
async def test_registry_releases_lock_after_error():
    registry = ThreadLockRegistry()
    with pytest.raises(ValueError):
        async with registry.hold("t1"):
            assert registry.active_threads() == ["t1"]
            raise ValueError("boom")
    assert registry.active_threads() == []
