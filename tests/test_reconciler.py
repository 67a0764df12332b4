from __future__ import annotations

import asyncio

from habit_hero.constants import default_state
from habit_hero.converters import state_to_snapshot
from habit_hero.models import DailyTask, GameState
from habit_hero.reconciler import (
    LOADED_FRESH,
    LOADED_FROM_LOCAL_REPAIR,
    LOADED_FROM_REMOTE,
    reconcile,
)
from habit_hero.storage import StorageError


class MemoryLocal:
    def __init__(self, snapshot=None, fail_load: bool = False, fail_save: bool = False) -> None:
        self.snapshots = {"p": snapshot} if snapshot is not None else {}
        self.fail_load = fail_load
        self.fail_save = fail_save
        self.saves: list[dict] = []

    def load_snapshot(self, player_id):
        if self.fail_load:
            raise StorageError("disk gone")
        return self.snapshots.get(player_id)

    def save_snapshot(self, player_id, snapshot) -> None:
        if self.fail_save:
            raise StorageError("read-only")
        self.saves.append(snapshot)
        self.snapshots[player_id] = snapshot


class MemoryRemote:
    def __init__(self, snapshot=None, fail_load: bool = False, fail_save: bool = False) -> None:
        self.snapshots = {"p": snapshot} if snapshot is not None else {}
        self.fail_load = fail_load
        self.fail_save = fail_save
        self.saves: list[dict] = []

    async def load_snapshot(self, player_id):
        if self.fail_load:
            raise StorageError("offline")
        return self.snapshots.get(player_id)

    async def save_snapshot(self, player_id, snapshot) -> None:
        self.saves.append(snapshot)
        if self.fail_save:
            raise StorageError("offline")
        self.snapshots[player_id] = snapshot

    async def aclose(self) -> None:
        return None


def _snapshot(task_name: str) -> dict:
    task = DailyTask(id=task_name.lower(), name=task_name, penalty="x")
    return state_to_snapshot(GameState(tasks=(task,), shop_items=default_state().shop_items))


def test_remote_wins_and_overwrites_local() -> None:
    local = MemoryLocal(_snapshot("B"))
    remote = MemoryRemote(_snapshot("A"))
    result = asyncio.run(reconcile("p", local, remote))
    assert result.source == LOADED_FROM_REMOTE
    assert result.state.tasks[0].name == "A"
    assert local.snapshots["p"] == _snapshot("A")
    assert remote.saves == []


def test_local_repairs_empty_remote() -> None:
    local = MemoryLocal(_snapshot("B"))
    remote = MemoryRemote()
    result = asyncio.run(reconcile("p", local, remote))
    assert result.source == LOADED_FROM_LOCAL_REPAIR
    assert result.state.tasks[0].name == "B"
    assert remote.snapshots["p"] == _snapshot("B")


def test_fresh_start_writes_nothing() -> None:
    local, remote = MemoryLocal(), MemoryRemote()
    result = asyncio.run(reconcile("p", local, remote))
    assert result.source == LOADED_FRESH
    assert result.state == default_state()
    assert local.saves == [] and remote.saves == []


def test_remote_failure_falls_back_to_local() -> None:
    local = MemoryLocal(_snapshot("B"))
    remote = MemoryRemote(_snapshot("A"), fail_load=True, fail_save=True)
    result = asyncio.run(reconcile("p", local, remote))
    assert result.source == LOADED_FROM_LOCAL_REPAIR
    assert result.state.tasks[0].name == "B"
    assert len(remote.saves) == 1


def test_local_failure_falls_back_to_defaults() -> None:
    result = asyncio.run(reconcile("p", MemoryLocal(fail_load=True), MemoryRemote(fail_load=True)))
    assert result.source == LOADED_FRESH


def test_cache_write_failure_is_not_fatal() -> None:
    local = MemoryLocal(fail_save=True)
    result = asyncio.run(reconcile("p", local, MemoryRemote(_snapshot("A"))))
    assert result.source == LOADED_FROM_REMOTE
    assert result.state.tasks[0].name == "A"


def test_snapshot_merges_over_defaults() -> None:
    remote = MemoryRemote({"bonus_xp": 40})
    result = asyncio.run(reconcile("p", MemoryLocal(), remote))
    assert result.state.bonus_xp == 40
    assert len(result.state.shop_items) == 4


def test_undecodable_remote_falls_back_to_local() -> None:
    local = MemoryLocal(_snapshot("B"))
    remote = MemoryRemote(["not", "a", "snapshot"])
    result = asyncio.run(reconcile("p", local, remote))
    assert result.source == LOADED_FROM_LOCAL_REPAIR
    assert result.state.tasks[0].name == "B"
    assert remote.snapshots["p"] == _snapshot("B")


def test_corrupted_local_values_still_load() -> None:
    local = MemoryLocal({"bonus_xp": float("inf"), "class_id": ["warrior"]})
    result = asyncio.run(reconcile("p", local, MemoryRemote()))
    assert result.source == LOADED_FROM_LOCAL_REPAIR
    assert result.state.bonus_xp == 0
    assert result.state.class_id is None


def test_nothing_decodable_starts_fresh() -> None:
    result = asyncio.run(reconcile("p", MemoryLocal("garbage"), MemoryRemote(["garbage"])))
    assert result.source == LOADED_FRESH
    assert result.state == default_state()
