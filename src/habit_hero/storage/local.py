from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from habit_hero.storage.base import Snapshot, StorageError

logger = logging.getLogger(__name__)


class LocalSnapshotStore:
    """SQLite-backed snapshot cache plus the persisted player identity."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """
            )
            current = {row["version"] for row in conn.execute("SELECT version FROM schema_migrations")}

            migrations: dict[int, str] = {
                1: """
                    CREATE TABLE snapshots (
                        player_id TEXT PRIMARY KEY,
                        data TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );

                    CREATE TABLE player_identity (
                        id INTEGER PRIMARY KEY CHECK(id = 1),
                        player_id TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    );
                """,
            }

            now = datetime.now().isoformat(timespec="seconds")
            for version in sorted(migrations):
                if version in current:
                    continue
                conn.executescript(migrations[version])
                conn.execute(
                    "INSERT INTO schema_migrations(version, applied_at) VALUES (?, ?)",
                    (version, now),
                )

    def load_snapshot(self, player_id: str) -> Snapshot | None:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT data FROM snapshots WHERE player_id = ?",
                    (player_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"local read failed: {exc}") from exc
        if row is None:
            return None
        try:
            data = json.loads(row["data"])
        except json.JSONDecodeError as exc:
            raise StorageError(f"local snapshot is not valid JSON: {exc}") from exc
        if not isinstance(data, dict) or not data:
            return None
        return data

    def save_snapshot(self, player_id: str, snapshot: Snapshot) -> None:
        payload = json.dumps(snapshot, ensure_ascii=False)
        now = datetime.now().isoformat(timespec="seconds")
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO snapshots(player_id, data, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(player_id) DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at
                    """,
                    (player_id, payload, now),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"local write failed: {exc}") from exc
        logger.debug("Saved local snapshot player=%s bytes=%s", player_id, len(payload))

    def get_player_id(self) -> str | None:
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT player_id FROM player_identity WHERE id = 1").fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"identity read failed: {exc}") from exc
        return str(row["player_id"]) if row else None

    def set_player_id(self, player_id: str) -> None:
        now = datetime.now().isoformat(timespec="seconds")
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO player_identity(id, player_id, created_at) VALUES (1, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET player_id = excluded.player_id
                    """,
                    (player_id, now),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"identity write failed: {exc}") from exc
