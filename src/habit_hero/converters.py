from __future__ import annotations

import logging
import math
from dataclasses import asdict
from datetime import date, datetime, timezone
from typing import Any, Callable, TypeVar

from habit_hero.constants import HERO_CLASSES, default_state
from habit_hero.difficulty import get_tier
from habit_hero.economy import DEFAULT_ECONOMY_TUNING
from habit_hero.models import (
    EVENT_STATES,
    HABIT_STATES,
    ITEM_EFFECTS,
    MISSION_TABS,
    SCHEMA_VERSION,
    SCREENS,
    SHOP_CATEGORIES,
    TASK_KINDS,
    TASK_STATES,
    AttributeSet,
    BadHabit,
    DailyTask,
    GameState,
    Goal,
    InventoryEntry,
    Purchase,
    Quest,
    ScheduledEvent,
    ShopItem,
)
from habit_hero.time_utils import parse_date

logger = logging.getLogger(__name__)

T = TypeVar("T")

COLLECTIONS = ("tasks", "habits", "quests", "goals", "events", "purchases", "shop_items", "inventory")


def to_jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def state_to_snapshot(state: GameState) -> dict[str, Any]:
    snapshot = to_jsonable(asdict(state))
    snapshot["version"] = SCHEMA_VERSION
    return snapshot


def _as_bool(raw: Any, default: bool = False) -> bool:
    if raw is None:
        return default
    if isinstance(raw, str):
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    return bool(raw)


def _as_int(raw: Any, default: int = 0) -> int:
    if raw is None or raw == "" or isinstance(raw, bool):
        return default
    try:
        return int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return default


def _as_number(raw: Any, default: float = 0) -> int | float:
    if raw is None or raw == "" or isinstance(raw, bool):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(value):
        return default
    return int(value) if value.is_integer() else value


def _choice(raw: Any, allowed: tuple[str, ...], default: str) -> str:
    return raw if raw in allowed else default


def _id(raw: dict[str, Any]) -> str:
    value = raw["id"]
    if value is None or str(value).strip() == "":
        raise ValueError("entity without id")
    return str(value)


def _row_to_task(raw: dict[str, Any]) -> DailyTask:
    return DailyTask(
        id=_id(raw),
        name=str(raw["name"]),
        penalty=str(raw.get("penalty") or ""),
        kind=_choice(raw.get("kind"), TASK_KINDS, "one_shot"),
        state=_choice(raw.get("state"), TASK_STATES, "pending"),
        difficulty=get_tier(raw.get("difficulty")).key,
        penalty_resolved=_as_bool(raw.get("penalty_resolved")),
        protected=_as_bool(raw.get("protected")),
        target=_as_number(raw.get("target")),
        progress=_as_number(raw.get("progress")),
        unit=str(raw.get("unit") or ""),
    )


def _row_to_habit(raw: dict[str, Any]) -> BadHabit:
    return BadHabit(
        id=_id(raw),
        name=str(raw["name"]),
        penalty=str(raw.get("penalty") or ""),
        strategy=str(raw.get("strategy") or ""),
        description=str(raw.get("description") or ""),
        reward_xp=max(0, _as_int(raw.get("reward_xp"), DEFAULT_ECONOMY_TUNING["habit_default_xp"])),
        reward_coins=max(0, _as_int(raw.get("reward_coins"), DEFAULT_ECONOMY_TUNING["habit_default_coins"])),
        status=_choice(raw.get("status"), HABIT_STATES, "pending"),
        penalty_resolved=_as_bool(raw.get("penalty_resolved")),
        protected=_as_bool(raw.get("protected")),
    )


def _row_to_quest(raw: dict[str, Any]) -> Quest:
    return Quest(
        id=_id(raw),
        name=str(raw["name"]),
        difficulty=get_tier(raw.get("difficulty")).key,
        completed=_as_bool(raw.get("completed")),
    )


def _row_to_goal(raw: dict[str, Any]) -> Goal:
    total = _as_number(raw.get("total"))
    if total <= 0:
        raise ValueError("goal total must be positive")
    return Goal(
        id=_id(raw),
        name=str(raw["name"]),
        total=total,
        progress=min(total, max(0, _as_number(raw.get("progress")))),
        unit=str(raw.get("unit") or ""),
        completed=_as_bool(raw.get("completed")),
        start_date=parse_date(raw.get("start_date")),
        end_date=parse_date(raw.get("end_date")),
        notified_upcoming=_as_bool(raw.get("notified_upcoming")),
        notified_today=_as_bool(raw.get("notified_today")),
    )


def _row_to_event(raw: dict[str, Any]) -> ScheduledEvent:
    when = parse_date(raw.get("date"))
    if when is None:
        raise ValueError("event without a valid date")
    return ScheduledEvent(
        id=_id(raw),
        name=str(raw["name"]),
        date=when,
        description=str(raw.get("description") or ""),
        lead_days=max(0, _as_int(raw.get("lead_days"), 1)),
        status=_choice(raw.get("status"), EVENT_STATES, "pending"),
        notified_upcoming=_as_bool(raw.get("notified_upcoming")),
        notified_today=_as_bool(raw.get("notified_today")),
    )


def _row_to_shop_item(raw: dict[str, Any]) -> ShopItem:
    effect = raw.get("effect")
    return ShopItem(
        id=_id(raw),
        name=str(raw["name"]),
        description=str(raw.get("description") or ""),
        cost=max(0, _as_int(raw.get("cost"))),
        category=_choice(raw.get("category"), SHOP_CATEGORIES, "reward"),
        effect=effect if effect in ITEM_EFFECTS else None,
    )


def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw
    try:
        return datetime.fromisoformat(str(raw))
    except (TypeError, ValueError):
        return datetime.fromtimestamp(0, tz=timezone.utc)


def _row_to_purchase(raw: dict[str, Any]) -> Purchase:
    return Purchase(
        id=_id(raw),
        item_id=str(raw["item_id"]),
        price=max(0, _as_int(raw.get("price"))),
        purchased_at=_parse_timestamp(raw.get("purchased_at")),
    )


def _row_to_inventory(raw: dict[str, Any]) -> InventoryEntry:
    return InventoryEntry(id=_id(raw), item_id=str(raw["item_id"]))


def _row_to_attributes(raw: Any) -> AttributeSet:
    if not isinstance(raw, dict):
        return AttributeSet()
    defaults = AttributeSet()
    return AttributeSet(
        force=_as_int(raw.get("force"), defaults.force),
        discipline=_as_int(raw.get("discipline"), defaults.discipline),
        consistency=_as_int(raw.get("consistency"), defaults.consistency),
        agility=_as_int(raw.get("agility"), defaults.agility),
    )


_ROW_PARSERS: dict[str, Callable[[dict[str, Any]], Any]] = {
    "tasks": _row_to_task,
    "habits": _row_to_habit,
    "quests": _row_to_quest,
    "goals": _row_to_goal,
    "events": _row_to_event,
    "purchases": _row_to_purchase,
    "shop_items": _row_to_shop_item,
    "inventory": _row_to_inventory,
}


def _parse_rows(key: str, rows: Any, parser: Callable[[dict[str, Any]], T]) -> tuple[T, ...]:
    if not isinstance(rows, list):
        logger.warning("Snapshot field %s is not a list, using empty collection", key)
        return ()
    parsed: list[T] = []
    for raw in rows:
        if not isinstance(raw, dict):
            logger.warning("Skipping malformed %s entry: %r", key, raw)
            continue
        try:
            parsed.append(parser(raw))
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            logger.warning("Skipping unreadable %s entry id=%s: %s", key, raw.get("id"), exc)
    return tuple(parsed)


def state_from_snapshot(raw: dict[str, Any] | None) -> GameState:
    """Build a GameState, filling every absent top-level key from the defaults."""
    defaults = default_state()
    if not raw:
        return defaults
    if not isinstance(raw, dict):
        raise ValueError(f"snapshot must be a mapping, got {type(raw).__name__}")

    values: dict[str, Any] = {}
    for key in COLLECTIONS:
        if key in raw:
            values[key] = _parse_rows(key, raw[key], _ROW_PARSERS[key])
        else:
            values[key] = getattr(defaults, key)

    class_id = raw.get("class_id")
    screen = raw.get("screen", defaults.screen)
    tab = raw.get("mission_tab", defaults.mission_tab)

    return GameState(
        version=SCHEMA_VERSION,
        screen=screen if isinstance(screen, str) and screen in SCREENS else defaults.screen,
        mission_tab=tab if isinstance(tab, str) and tab in MISSION_TABS else defaults.mission_tab,
        class_id=class_id if isinstance(class_id, str) and class_id in HERO_CLASSES else None,
        initial_attributes=(
            _row_to_attributes(raw["initial_attributes"])
            if "initial_attributes" in raw
            else defaults.initial_attributes
        ),
        bonus_xp=max(0, _as_int(raw.get("bonus_xp"), defaults.bonus_xp)),
        protection_active=_as_bool(raw.get("protection_active"), defaults.protection_active),
        **values,
    )
