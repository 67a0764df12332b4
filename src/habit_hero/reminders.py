from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from functools import lru_cache

from habit_hero.i18n import t
from habit_hero.models import GameState, Goal, ScheduledEvent
from habit_hero.time_utils import days_until

GOAL_REMINDER_DAYS = 5


@dataclass(frozen=True)
class Reminder:
    key: str
    kind: str
    entity_id: str
    name: str
    days_left: int
    already_notified: bool

    def message(self, lang: str = "en") -> str:
        if self.kind == "goal":
            if self.days_left == 0:
                return t("reminder_goal_today", lang, name=self.name)
            return t("reminder_goal", lang, name=self.name, days=self.days_left)
        if self.days_left == 0:
            return t("reminder_event_today", lang, name=self.name)
        return t("reminder_event", lang, name=self.name, days=self.days_left)


def _notified(days_left: int, upcoming: bool, today_flag: bool) -> bool:
    return today_flag if days_left == 0 else upcoming


@lru_cache(maxsize=64)
def _scan(
    goals: tuple[Goal, ...],
    events: tuple[ScheduledEvent, ...],
    today: date,
    goal_window: int,
) -> tuple[Reminder, ...]:
    found: list[Reminder] = []
    for g in goals:
        if g.completed or g.end_date is None:
            continue
        diff = days_until(g.end_date, today)
        if 0 <= diff <= goal_window:
            found.append(
                Reminder(
                    key=f"goal-{g.id}",
                    kind="goal",
                    entity_id=g.id,
                    name=g.name,
                    days_left=diff,
                    already_notified=_notified(diff, g.notified_upcoming, g.notified_today),
                )
            )
    for e in events:
        if e.status != "pending":
            continue
        diff = days_until(e.date, today)
        if 0 <= diff <= max(0, e.lead_days):
            found.append(
                Reminder(
                    key=f"event-{e.id}",
                    kind="event",
                    entity_id=e.id,
                    name=e.name,
                    days_left=diff,
                    already_notified=_notified(diff, e.notified_upcoming, e.notified_today),
                )
            )
    return tuple(found)


def scan_reminders(state: GameState, today: date, goal_window: int = GOAL_REMINDER_DAYS) -> tuple[Reminder, ...]:
    return _scan(state.goals, state.events, today, goal_window)


def pending_notifications(state: GameState, today: date, goal_window: int = GOAL_REMINDER_DAYS) -> tuple[Reminder, ...]:
    return tuple(r for r in scan_reminders(state, today, goal_window) if not r.already_notified)
