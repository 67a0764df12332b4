from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from habit_hero.economy import DEFAULT_ECONOMY_TUNING, effective_tuning
from habit_hero.i18n import normalize_language_code

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    database_path: Path
    tz: str
    language: str
    remote_store_url: str | None
    remote_store_key: str | None
    remote_store_table: str
    remote_timeout: float
    outbox_max_attempts: int
    outbox_retry_delay: float
    economy_config_path: Path
    economy_tuning: dict[str, int]
    api_token: str | None
    api_host: str
    api_port: int


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        raw = line.strip()
        if not raw or raw.startswith("#") or "=" not in raw:
            continue
        key, value = raw.split("=", maxsplit=1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _parse_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def load_economy_tuning(path: Path) -> dict[str, int]:
    """Merge integer overrides from a YAML mapping over the default tuning."""
    if not path.exists():
        return effective_tuning()
    try:
        raw = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        logger.warning("Ignoring unreadable economy config %s: %s", path, exc)
        return effective_tuning()
    if not isinstance(raw, dict):
        return effective_tuning()

    overrides: dict[str, int] = {}
    for key, value in raw.items():
        if key not in DEFAULT_ECONOMY_TUNING:
            logger.warning("Unknown economy key %s in %s", key, path)
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            logger.warning("Economy key %s must be an integer, got %r", key, value)
            continue
        overrides[str(key)] = value
    return effective_tuning(overrides)


def load_settings() -> Settings:
    _load_env_file(Path(".env"))

    economy_path = Path(os.getenv("ECONOMY_CONFIG", "./economy.yaml"))
    remote_url = (os.getenv("REMOTE_STORE_URL") or "").strip() or None

    return Settings(
        database_path=Path(os.getenv("DATABASE_PATH", "./data/habit_hero.db")),
        tz=os.getenv("TZ", "Europe/Lisbon"),
        language=normalize_language_code(os.getenv("LANGUAGE"), default="en"),
        remote_store_url=remote_url,
        remote_store_key=os.getenv("REMOTE_STORE_KEY") or None,
        remote_store_table=os.getenv("REMOTE_STORE_TABLE", "profiles"),
        remote_timeout=_parse_float(os.getenv("REMOTE_TIMEOUT"), 10.0),
        outbox_max_attempts=_parse_int(os.getenv("OUTBOX_MAX_ATTEMPTS"), 3),
        outbox_retry_delay=_parse_float(os.getenv("OUTBOX_RETRY_DELAY"), 0.5),
        economy_config_path=economy_path,
        economy_tuning=load_economy_tuning(economy_path),
        api_token=os.getenv("API_TOKEN") or None,
        api_host=os.getenv("API_HOST", "127.0.0.1"),
        api_port=_parse_int(os.getenv("API_PORT"), 8080),
    )
