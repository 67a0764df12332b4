from __future__ import annotations

from typing import Any, Protocol

Snapshot = dict[str, Any]


class StorageError(RuntimeError):
    pass


class LocalStore(Protocol):
    def load_snapshot(self, player_id: str) -> Snapshot | None: ...

    def save_snapshot(self, player_id: str, snapshot: Snapshot) -> None: ...

    def get_player_id(self) -> str | None: ...

    def set_player_id(self, player_id: str) -> None: ...


class RemoteStore(Protocol):
    async def load_snapshot(self, player_id: str) -> Snapshot | None: ...

    async def save_snapshot(self, player_id: str, snapshot: Snapshot) -> None: ...

    async def aclose(self) -> None: ...
