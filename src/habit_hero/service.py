from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from habit_hero.attributes import AttributeSheet, derive_attributes, get_class
from habit_hero.economy import effective_tuning
from habit_hero.models import ClassDefinition, DailyTask, GameState
from habit_hero.penalties import PenaltyEntry, active_penalties, resolved_penalties
from habit_hero.progression import ProgressSnapshot, compute_progress
from habit_hero.reminders import Reminder, scan_reminders

PENDING_PREVIEW_LIMIT = 3


@dataclass(frozen=True)
class HeroStatus:
    hero_class: ClassDefinition | None
    attributes: AttributeSheet
    progress: ProgressSnapshot
    active_penalties: tuple[PenaltyEntry, ...]
    resolved_penalties: tuple[PenaltyEntry, ...]
    reminders: tuple[Reminder, ...]
    pending_tasks: tuple[DailyTask, ...]
    pending_task_count: int
    protection_active: bool
    inventory_count: int

    @property
    def level(self) -> int:
        return self.progress.level.level

    @property
    def coins(self) -> int:
        return self.progress.coins


def build_status(state: GameState, today: date, tuning: dict[str, int] | None = None) -> HeroStatus:
    cfg = effective_tuning(tuning)
    pending = tuple(t for t in state.tasks if t.state == "pending")
    return HeroStatus(
        hero_class=get_class(state.class_id),
        attributes=derive_attributes(state, tuning=tuning),
        progress=compute_progress(state, tuning=tuning),
        active_penalties=active_penalties(state, tuning=tuning),
        resolved_penalties=resolved_penalties(state, tuning=tuning),
        reminders=scan_reminders(state, today, goal_window=int(cfg["goal_reminder_days"])),
        pending_tasks=pending[:PENDING_PREVIEW_LIMIT],
        pending_task_count=len(pending),
        protection_active=state.protection_active,
        inventory_count=len(state.inventory),
    )
