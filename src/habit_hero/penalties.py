from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from habit_hero.economy import failure_penalty, freeze_tuning
from habit_hero.models import BadHabit, DailyTask, GameState

PENALTY_SOURCES = ("task", "habit")


@dataclass(frozen=True)
class PenaltyEntry:
    source: str
    id: str
    name: str
    penalty: str
    difficulty: str
    fine: int


def penalty_status(failed: bool, resolved: bool, protected: bool) -> str | None:
    if not failed:
        return None
    if protected:
        return "protected"
    if resolved:
        return "resolved"
    return "active"


def _task_status(task: DailyTask) -> str | None:
    return penalty_status(task.state == "failed", task.penalty_resolved, task.protected)


def _habit_status(habit: BadHabit) -> str | None:
    return penalty_status(habit.status == "failed", habit.penalty_resolved, habit.protected)


@lru_cache(maxsize=128)
def _ledger(
    tasks: tuple[DailyTask, ...],
    habits: tuple[BadHabit, ...],
    tuning_key: tuple[tuple[str, int], ...],
) -> dict[str, tuple[PenaltyEntry, ...]]:
    tuning = dict(tuning_key)
    buckets: dict[str, list[PenaltyEntry]] = {"active": [], "resolved": [], "protected": []}
    for t in tasks:
        status = _task_status(t)
        if status is None:
            continue
        buckets[status].append(
            PenaltyEntry(
                source="task",
                id=t.id,
                name=t.name,
                penalty=t.penalty,
                difficulty=t.difficulty,
                fine=failure_penalty("task", t.difficulty, tuning=tuning),
            )
        )
    for h in habits:
        status = _habit_status(h)
        if status is None:
            continue
        buckets[status].append(
            PenaltyEntry(
                source="habit",
                id=h.id,
                name=h.name,
                penalty=h.penalty,
                difficulty="normal",
                fine=failure_penalty("habit", tuning=tuning),
            )
        )
    return {key: tuple(values) for key, values in buckets.items()}


def active_penalties(state: GameState, tuning: dict[str, int] | None = None) -> tuple[PenaltyEntry, ...]:
    return _ledger(state.tasks, state.habits, freeze_tuning(tuning))["active"]


def resolved_penalties(state: GameState, tuning: dict[str, int] | None = None) -> tuple[PenaltyEntry, ...]:
    return _ledger(state.tasks, state.habits, freeze_tuning(tuning))["resolved"]


def protected_failures(state: GameState, tuning: dict[str, int] | None = None) -> tuple[PenaltyEntry, ...]:
    return _ledger(state.tasks, state.habits, freeze_tuning(tuning))["protected"]


def outstanding_fines(state: GameState, tuning: dict[str, int] | None = None) -> int:
    return sum(p.fine for p in active_penalties(state, tuning=tuning))


def find_active_penalty(state: GameState, target_id: str | None, source: str | None = None) -> PenaltyEntry | None:
    if not target_id:
        return None
    for p in active_penalties(state):
        if p.id == target_id and (source is None or p.source == source):
            return p
    return None
