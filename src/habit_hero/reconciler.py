from __future__ import annotations

import logging
from dataclasses import dataclass

from habit_hero.constants import default_state
from habit_hero.converters import state_from_snapshot, state_to_snapshot
from habit_hero.models import GameState
from habit_hero.storage import LocalStore, RemoteStore, Snapshot, StorageError

logger = logging.getLogger(__name__)

LOADED_FROM_REMOTE = "loaded-from-remote"
LOADED_FROM_LOCAL_REPAIR = "loaded-from-local-repair"
LOADED_FRESH = "loaded-fresh"


@dataclass(frozen=True)
class LoadResult:
    state: GameState
    source: str


async def _fetch_remote(player_id: str, remote: RemoteStore) -> Snapshot | None:
    try:
        return await remote.load_snapshot(player_id)
    except StorageError as exc:
        logger.warning("Remote load failed for player=%s: %s", player_id, exc)
        return None


def _fetch_local(player_id: str, local: LocalStore) -> Snapshot | None:
    try:
        return local.load_snapshot(player_id)
    except StorageError as exc:
        logger.warning("Local load failed for player=%s: %s", player_id, exc)
        return None


def _decode(player_id: str, raw: Snapshot | None, where: str) -> GameState | None:
    if not raw:
        return None
    try:
        return state_from_snapshot(raw)
    except (AttributeError, KeyError, TypeError, ValueError, OverflowError) as exc:
        logger.warning("Ignoring undecodable %s snapshot for player=%s: %s", where, player_id, exc)
        return None


async def reconcile(player_id: str, local: LocalStore, remote: RemoteStore) -> LoadResult:
    """Pick the starting state: remote wins, then the local cache, then defaults."""
    state = _decode(player_id, await _fetch_remote(player_id, remote), "remote")
    if state is not None:
        try:
            local.save_snapshot(player_id, state_to_snapshot(state))
        except StorageError as exc:
            logger.warning("Could not refresh local cache for player=%s: %s", player_id, exc)
        logger.info("Loaded state for player=%s from remote", player_id)
        return LoadResult(state=state, source=LOADED_FROM_REMOTE)

    state = _decode(player_id, _fetch_local(player_id, local), "local")
    if state is not None:
        try:
            await remote.save_snapshot(player_id, state_to_snapshot(state))
        except StorageError as exc:
            logger.warning("Could not repair remote snapshot for player=%s: %s", player_id, exc)
        logger.info("Loaded state for player=%s from local cache", player_id)
        return LoadResult(state=state, source=LOADED_FROM_LOCAL_REPAIR)

    logger.info("No snapshot found for player=%s, starting fresh", player_id)
    return LoadResult(state=default_state(), source=LOADED_FRESH)
