from __future__ import annotations

import uvicorn

from habit_hero.api import build_app
from habit_hero.config import Settings, load_settings
from habit_hero.logging_setup import setup_logging
from habit_hero.outbox import RemoteOutbox
from habit_hero.session import GameSession
from habit_hero.storage import LocalSnapshotStore, NullRemoteStore, RemoteSnapshotStore, RemoteStore


def build_remote_store(settings: Settings) -> RemoteStore:
    if not settings.remote_store_url:
        return NullRemoteStore()
    return RemoteSnapshotStore(
        settings.remote_store_url,
        api_key=settings.remote_store_key,
        table=settings.remote_store_table,
        timeout=settings.remote_timeout,
    )


def build_session(settings: Settings) -> GameSession:
    remote = build_remote_store(settings)
    outbox = RemoteOutbox(
        remote,
        max_attempts=settings.outbox_max_attempts,
        retry_delay=settings.outbox_retry_delay,
    )
    return GameSession(
        local=LocalSnapshotStore(settings.database_path),
        remote=remote,
        outbox=outbox,
        tuning=settings.economy_tuning,
        lang=settings.language,
        tz_name=settings.tz,
    )


def run_server() -> None:
    setup_logging()
    settings = load_settings()
    app = build_app(build_session(settings), settings.api_token)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
