"""Tests for the in-memory session store."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from docutalk.domain.errors import SessionNotFoundError
from docutalk.domain.messages.models import MessageRole
from docutalk.infrastructure.sessions.in_memory_repository import InMemorySessionStore


class Clock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def store(clock):
    return InMemorySessionStore(max_messages=4, timeout_seconds=1800, sweep_interval_seconds=300, now=clock)


@pytest.mark.asyncio
async def test_get_or_create_creates_empty_session(store):
    session = await store.get_or_create("s1")

    assert session.id == "s1"
    assert session.messages == []
    assert session.context is None
    assert await store.exists("s1")


@pytest.mark.asyncio
async def test_get_or_create_returns_existing_and_refreshes_access(store, clock):
    first = await store.get_or_create("s1")
    clock.advance(minutes=5)
    second = await store.get_or_create("s1")

    assert first is second
    assert second.last_accessed_at == clock.now


@pytest.mark.asyncio
@pytest.mark.parametrize("appends", [0, 1, 3, 4, 5, 9])
async def test_windowing_keeps_last_messages_in_order(store, appends):
    for i in range(appends):
        role = MessageRole.USER if i % 2 == 0 else MessageRole.ASSISTANT
        await store.append_message("s1", role, f"m{i}")

    messages = await store.get_messages("s1")

    assert len(messages) == min(appends, 4)
    assert [m.content for m in messages] == [f"m{i}" for i in range(appends)][-4:]


@pytest.mark.asyncio
async def test_get_messages_returns_a_snapshot(store):
    await store.append_message("s1", MessageRole.USER, "hello")
    snapshot = await store.get_messages("s1")
    await store.append_message("s1", MessageRole.ASSISTANT, "hi")

    assert [m.content for m in snapshot] == ["hello"]


@pytest.mark.asyncio
async def test_context_last_write_wins(store):
    assert await store.get_context("s1") is None

    await store.set_context("s1", {"user": "a"})
    await store.set_context("s1", {"user": "b", "currentUrl": "/x"})

    assert await store.get_context("s1") == {"user": "b", "currentUrl": "/x"}


@pytest.mark.asyncio
async def test_get_context_for_unknown_session_does_not_create_it(store):
    assert await store.get_context("ghost") is None
    assert not await store.exists("ghost")


@pytest.mark.asyncio
async def test_clear_is_idempotent(store):
    await store.append_message("s1", MessageRole.USER, "hello")

    await store.clear("s1")
    assert not await store.exists("s1")
    await store.clear("s1")
    await store.clear("never-existed")

    assert not await store.exists("s1")
    with pytest.raises(SessionNotFoundError):
        await store.get_info("s1")


@pytest.mark.asyncio
async def test_get_info(store, clock):
    await store.append_message("s1", MessageRole.USER, "hello")
    await store.append_message("s1", MessageRole.ASSISTANT, "hi")
    last = clock.now
    clock.advance(minutes=7, seconds=30)

    info = await store.get_info("s1")

    assert info == {
        "sessionId": "s1",
        "messageCount": 2,
        "lastAccessed": last.isoformat(),
        "ageMinutes": 7,
    }


@pytest.mark.asyncio
async def test_get_info_does_not_refresh_access(store, clock):
    await store.get_or_create("s1")
    clock.advance(minutes=10)
    await store.get_info("s1")
    clock.advance(minutes=10)

    assert (await store.get_info("s1"))["ageMinutes"] == 20


@pytest.mark.asyncio
async def test_sweep_evicts_only_idle_sessions(store, clock):
    await store.get_or_create("old")
    clock.advance(minutes=20)
    await store.get_or_create("recent")
    clock.advance(minutes=15)

    removed = store.sweep()

    assert removed == 1
    assert not await store.exists("old")
    assert await store.exists("recent")


@pytest.mark.asyncio
async def test_sweep_keeps_session_touched_at_cutoff(store, clock):
    await store.get_or_create("edge")
    clock.advance(seconds=1800)

    assert store.sweep() == 0
    assert await store.exists("edge")


@pytest.mark.asyncio
async def test_sessions_are_independent(store):
    await store.append_message("a", MessageRole.USER, "for a")
    await store.append_message("b", MessageRole.USER, "for b")
    await store.clear("a")

    assert [m.content for m in await store.get_messages("b")] == ["for b"]


def test_max_messages_must_be_positive():
    with pytest.raises(ValueError):
        InMemorySessionStore(max_messages=0)


@pytest.mark.asyncio
async def test_background_sweep_start_and_stop():
    real_store = InMemorySessionStore(timeout_seconds=0, sweep_interval_seconds=0.01)
    await real_store.get_or_create("s1")

    await real_store.start()
    assert real_store.sweep_running
    for _ in range(50):
        if not await real_store.exists("s1"):
            break
        await asyncio.sleep(0.01)
    await real_store.stop()

    assert not await real_store.exists("s1")
    assert not real_store.sweep_running


@pytest.mark.asyncio
async def test_start_twice_keeps_single_task():
    real_store = InMemorySessionStore(sweep_interval_seconds=60)
    await real_store.start()
    task = real_store._sweep_task
    await real_store.start()

    assert real_store._sweep_task is task
    await real_store.stop()


@pytest.mark.asyncio
async def test_stop_without_start_is_safe():
    await InMemorySessionStore().stop()
