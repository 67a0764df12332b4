from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Callable

from habit_hero.storage import RemoteStore, Snapshot, StorageError

logger = logging.getLogger(__name__)

FailureCallback = Callable[[str, Exception], None]


class RemoteOutbox:
    """Single writer that drains snapshots to the remote store.

    Only the latest snapshot per player is kept while a write is pending, and
    every write is a full overwrite, so an older snapshot can never land after
    a newer one.
    """

    def __init__(
        self,
        remote: RemoteStore,
        max_attempts: int = 3,
        retry_delay: float = 0.5,
        on_failure: FailureCallback | None = None,
    ) -> None:
        self.remote = remote
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = max(0.0, retry_delay)
        self.on_failure = on_failure
        self.delivered = 0
        self.failed = 0
        self._pending: dict[str, Snapshot] = {}
        self._wake = asyncio.Event()
        self._idle = asyncio.Event()
        self._idle.set()
        self._worker: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._run())

    def submit(self, player_id: str, snapshot: Snapshot) -> None:
        self._pending[player_id] = snapshot
        self._idle.clear()
        self._wake.set()
        self.start()

    async def _run(self) -> None:
        while True:
            await self._wake.wait()
            self._wake.clear()
            while self._pending:
                player_id = next(iter(self._pending))
                snapshot = self._pending.pop(player_id)
                await self._deliver(player_id, snapshot)
            self._idle.set()

    async def _deliver(self, player_id: str, snapshot: Snapshot) -> None:
        delay = self.retry_delay
        last_error: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                await self.remote.save_snapshot(player_id, snapshot)
            except StorageError as exc:
                last_error = exc
                logger.warning(
                    "Remote write attempt %s/%s failed for player=%s: %s",
                    attempt,
                    self.max_attempts,
                    player_id,
                    exc,
                )
            except Exception as exc:
                last_error = exc
                logger.exception("Unexpected remote write failure for player=%s", player_id)
                break
            else:
                self.delivered += 1
                return
            if player_id in self._pending:
                # A newer snapshot is queued; it replaces this one.
                logger.debug("Dropping superseded snapshot for player=%s", player_id)
                return
            if attempt < self.max_attempts:
                await asyncio.sleep(delay)
                delay *= 2

        self.failed += 1
        logger.error("Giving up on remote write for player=%s: %s", player_id, last_error)
        if self.on_failure is not None and last_error is not None:
            self.on_failure(player_id, last_error)

    async def flush(self) -> None:
        if self._pending:
            self.start()
        await self._idle.wait()

    async def stop(self) -> None:
        await self.flush()
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None
