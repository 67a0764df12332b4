from __future__ import annotations

import asyncio

from habit_hero.outbox import RemoteOutbox
from habit_hero.storage import StorageError


class RecordingRemote:
    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.calls = 0
        self.saved: list[tuple[str, dict]] = []
        self.gate: asyncio.Event | None = None

    async def load_snapshot(self, player_id):
        return None

    async def save_snapshot(self, player_id, snapshot) -> None:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.failures > 0:
            self.failures -= 1
            raise StorageError("offline")
        self.saved.append((player_id, snapshot))

    async def aclose(self) -> None:
        return None


def test_submit_then_flush_delivers() -> None:
    async def scenario() -> RecordingRemote:
        remote = RecordingRemote()
        outbox = RemoteOutbox(remote, retry_delay=0)
        outbox.submit("p", {"n": 1})
        await outbox.flush()
        await outbox.stop()
        assert outbox.delivered == 1
        return remote

    remote = asyncio.run(scenario())
    assert remote.saved == [("p", {"n": 1})]


def test_latest_snapshot_wins_while_a_write_is_in_flight() -> None:
    async def scenario() -> RecordingRemote:
        remote = RecordingRemote()
        remote.gate = asyncio.Event()
        outbox = RemoteOutbox(remote, retry_delay=0)
        outbox.submit("p", {"n": 1})
        for _ in range(5):
            await asyncio.sleep(0)
        outbox.submit("p", {"n": 2})
        outbox.submit("p", {"n": 3})
        assert outbox.pending == 1
        remote.gate.set()
        await outbox.stop()
        return remote

    remote = asyncio.run(scenario())
    assert [s["n"] for _, s in remote.saved] == [1, 3]


def test_retries_with_backoff_until_success() -> None:
    async def scenario() -> tuple[RecordingRemote, RemoteOutbox]:
        remote = RecordingRemote(failures=2)
        outbox = RemoteOutbox(remote, max_attempts=3, retry_delay=0)
        outbox.submit("p", {"n": 1})
        await outbox.stop()
        return remote, outbox

    remote, outbox = asyncio.run(scenario())
    assert remote.calls == 3
    assert outbox.delivered == 1
    assert outbox.failed == 0


def test_gives_up_and_reports_failure() -> None:
    failures: list[tuple[str, Exception]] = []

    async def scenario() -> RemoteOutbox:
        remote = RecordingRemote(failures=10)
        outbox = RemoteOutbox(
            remote,
            max_attempts=2,
            retry_delay=0,
            on_failure=lambda player_id, exc: failures.append((player_id, exc)),
        )
        outbox.submit("p", {"n": 1})
        await outbox.stop()
        return outbox

    outbox = asyncio.run(scenario())
    assert outbox.failed == 1
    assert failures[0][0] == "p"
    assert isinstance(failures[0][1], StorageError)


def test_flush_without_work_returns() -> None:
    async def scenario() -> None:
        outbox = RemoteOutbox(RecordingRemote())
        await outbox.flush()
        await outbox.stop()

    asyncio.run(scenario())
