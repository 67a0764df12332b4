from __future__ import annotations

from habit_hero.models import BadHabit, DailyTask, GameState
from habit_hero.penalties import (
    active_penalties,
    find_active_penalty,
    outstanding_fines,
    penalty_status,
    protected_failures,
    resolved_penalties,
)


def _state() -> GameState:
    return GameState(
        tasks=(
            DailyTask(id="t1", name="Gym", penalty="50 burpees", state="failed", difficulty="epico"),
            DailyTask(id="t2", name="Read", penalty="no phone", state="failed", penalty_resolved=True),
            DailyTask(id="t3", name="Walk", penalty="extra walk", state="failed", protected=True),
            DailyTask(id="t4", name="Code", penalty="none", state="pending"),
        ),
        habits=(
            BadHabit(id="h1", name="Sugar", penalty="no dessert", status="failed"),
            BadHabit(id="h2", name="Doomscroll", penalty="delete app", status="resisted"),
        ),
    )


def test_penalty_status() -> None:
    assert penalty_status(False, False, False) is None
    assert penalty_status(True, False, False) == "active"
    assert penalty_status(True, True, False) == "resolved"
    assert penalty_status(True, True, True) == "protected"


def test_ledger_buckets() -> None:
    state = _state()
    assert [(p.source, p.id) for p in active_penalties(state)] == [("task", "t1"), ("habit", "h1")]
    assert [p.id for p in resolved_penalties(state)] == ["t2"]
    assert [p.id for p in protected_failures(state)] == ["t3"]


def test_fines_follow_tier_for_tasks_only() -> None:
    fines = {p.id: p.fine for p in active_penalties(_state())}
    assert fines == {"t1": 8, "h1": 5}
    assert outstanding_fines(_state()) == 13


def test_find_active_penalty() -> None:
    state = _state()
    assert find_active_penalty(state, "t1").penalty == "50 burpees"
    assert find_active_penalty(state, "h1", source="habit") is not None
    assert find_active_penalty(state, "h1", source="task") is None
    assert find_active_penalty(state, "t2") is None
    assert find_active_penalty(state, None) is None
