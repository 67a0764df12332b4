from __future__ import annotations

import logging
from datetime import date, datetime, timezone

import pytest

from habit_hero.constants import default_state
from habit_hero.converters import state_from_snapshot, state_to_snapshot
from habit_hero.models import (
    SCHEMA_VERSION,
    AttributeSet,
    BadHabit,
    DailyTask,
    GameState,
    Goal,
    InventoryEntry,
    Purchase,
    ScheduledEvent,
)


def _populated() -> GameState:
    return GameState(
        screen="shop",
        tasks=(DailyTask(id="t", name="Gym", penalty="burpees", difficulty="epico", state="failed"),),
        habits=(BadHabit(id="h", name="Sugar", penalty="no dessert", reward_xp=30),),
        goals=(Goal(id="g", name="Read", total=12, progress=3, end_date=date(2026, 5, 1), notified_upcoming=True),),
        events=(ScheduledEvent(id="e", name="Exam", date=date(2026, 6, 2), lead_days=3),),
        purchases=(Purchase(id="p", item_id="1", price=40, purchased_at=datetime(2026, 3, 1, tzinfo=timezone.utc)),),
        shop_items=default_state().shop_items,
        inventory=(InventoryEntry(id="i", item_id="1"),),
        class_id="hunter",
        initial_attributes=AttributeSet(force=2, discipline=3, consistency=1, agility=0),
        bonus_xp=50,
        protection_active=True,
    )


def test_snapshot_is_json_friendly_and_restores_state() -> None:
    state = _populated()
    snapshot = state_to_snapshot(state)
    assert snapshot["goals"][0]["end_date"] == "2026-05-01"
    assert snapshot["purchases"][0]["purchased_at"].startswith("2026-03-01T00:00:00")
    assert snapshot["version"] == SCHEMA_VERSION
    assert state_from_snapshot(snapshot) == state


def test_empty_snapshot_is_default_state() -> None:
    assert state_from_snapshot({}) == default_state()
    assert state_from_snapshot(None) == default_state()


def test_absent_keys_take_defaults() -> None:
    state = state_from_snapshot({"tasks": [{"id": "a", "name": "Walk", "penalty": "x"}], "version": 0})
    assert state.version == SCHEMA_VERSION
    assert len(state.shop_items) == 4
    assert state.tasks[0].difficulty == "normal"
    assert state.tasks[0].state == "pending"
    assert state.initial_attributes == AttributeSet()


def test_unreadable_entities_are_skipped(caplog) -> None:
    raw = {
        "tasks": [{"name": "no id"}, {"id": "ok", "name": "Walk", "penalty": "x"}, "junk"],
        "goals": [{"id": "g", "name": "Zero", "total": 0}],
        "events": [{"id": "e", "name": "Someday", "date": "soon"}],
        "class_id": "bard",
        "screen": "casino",
    }
    with caplog.at_level(logging.WARNING, logger="habit_hero.converters"):
        state = state_from_snapshot(raw)
    assert [t.id for t in state.tasks] == ["ok"]
    assert state.goals == ()
    assert state.events == ()
    assert state.class_id is None
    assert state.screen == "journey"
    assert "Skipping" in caplog.text


def test_lenient_field_values() -> None:
    raw = {
        "habits": [{"id": 7, "name": "Sugar", "penalty": "x", "reward_xp": "12", "status": "weird"}],
        "goals": [{"id": "g", "name": "Run", "total": "10", "progress": 50}],
        "protection_active": "true",
        "bonus_xp": -5,
    }
    state = state_from_snapshot(raw)
    assert state.habits[0].id == "7"
    assert state.habits[0].reward_xp == 12
    assert state.habits[0].status == "pending"
    assert state.goals[0].progress == 10
    assert state.protection_active is True
    assert state.bonus_xp == 0


def test_out_of_range_and_wrongly_typed_values_fall_back() -> None:
    raw = {
        "bonus_xp": float("inf"),
        "class_id": ["warrior"],
        "screen": {"name": "shop"},
        "mission_tab": ["goals"],
        "initial_attributes": {"force": "1e999", "discipline": 10**400},
        "tasks": [{"id": "t", "name": "Gym", "penalty": "x", "difficulty": ["epico"], "target": float("-inf")}],
        "habits": [{"id": "h", "name": "Sugar", "penalty": "x", "reward_xp": 10**400}],
        "goals": [{"id": "g", "name": "Run", "total": float("inf")}],
    }
    state = state_from_snapshot(raw)
    assert state.bonus_xp == 0
    assert state.class_id is None
    assert state.screen == "journey"
    assert state.mission_tab == "daily"
    assert state.initial_attributes.force == 1
    assert state.initial_attributes.discipline == 1
    assert state.tasks[0].difficulty == "normal"
    assert state.tasks[0].target == 0
    assert state.habits[0].reward_xp == 20
    assert state.goals == ()


def test_non_mapping_snapshot_is_rejected() -> None:
    with pytest.raises(ValueError):
        state_from_snapshot(["tasks"])
