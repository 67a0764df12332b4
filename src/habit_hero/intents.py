from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar


class UnknownIntent(LookupError):
    pass


@dataclass(frozen=True)
class Intent:
    type: ClassVar[str] = ""


# Tasks


@dataclass(frozen=True)
class CreateTask(Intent):
    type: ClassVar[str] = "create_task"
    name: str = ""
    penalty: str = ""
    kind: str = "one_shot"
    difficulty: str = "normal"
    target: Any = None
    unit: str = ""


@dataclass(frozen=True)
class EditTask(Intent):
    type: ClassVar[str] = "edit_task"
    task_id: str = ""
    name: str | None = None
    penalty: str | None = None
    kind: str | None = None
    difficulty: str | None = None
    target: Any = None
    unit: str | None = None


@dataclass(frozen=True)
class DeleteTask(Intent):
    type: ClassVar[str] = "delete_task"
    task_id: str = ""


@dataclass(frozen=True)
class CompleteTask(Intent):
    type: ClassVar[str] = "complete_task"
    task_id: str = ""


@dataclass(frozen=True)
class FailTask(Intent):
    type: ClassVar[str] = "fail_task"
    task_id: str = ""


@dataclass(frozen=True)
class ResetTask(Intent):
    type: ClassVar[str] = "reset_task"
    task_id: str = ""


@dataclass(frozen=True)
class AdjustTaskProgress(Intent):
    type: ClassVar[str] = "adjust_task_progress"
    task_id: str = ""
    delta: Any = None


# Habits


@dataclass(frozen=True)
class CreateHabit(Intent):
    type: ClassVar[str] = "create_habit"
    name: str = ""
    penalty: str = ""
    strategy: str = ""
    description: str = ""
    reward_xp: Any = None
    reward_coins: Any = None


@dataclass(frozen=True)
class EditHabit(Intent):
    type: ClassVar[str] = "edit_habit"
    habit_id: str = ""
    name: str | None = None
    penalty: str | None = None
    strategy: str | None = None
    description: str | None = None
    reward_xp: Any = None
    reward_coins: Any = None


@dataclass(frozen=True)
class DeleteHabit(Intent):
    type: ClassVar[str] = "delete_habit"
    habit_id: str = ""


@dataclass(frozen=True)
class ResistHabit(Intent):
    type: ClassVar[str] = "resist_habit"
    habit_id: str = ""


@dataclass(frozen=True)
class CedeHabit(Intent):
    type: ClassVar[str] = "cede_habit"
    habit_id: str = ""


@dataclass(frozen=True)
class ResetHabit(Intent):
    type: ClassVar[str] = "reset_habit"
    habit_id: str = ""


@dataclass(frozen=True)
class ResetDay(Intent):
    type: ClassVar[str] = "reset_day"


# Quests


@dataclass(frozen=True)
class CreateQuest(Intent):
    type: ClassVar[str] = "create_quest"
    name: str = ""
    difficulty: str = "normal"


@dataclass(frozen=True)
class EditQuest(Intent):
    type: ClassVar[str] = "edit_quest"
    quest_id: str = ""
    name: str | None = None
    difficulty: str | None = None


@dataclass(frozen=True)
class DeleteQuest(Intent):
    type: ClassVar[str] = "delete_quest"
    quest_id: str = ""


@dataclass(frozen=True)
class ToggleQuest(Intent):
    type: ClassVar[str] = "toggle_quest"
    quest_id: str = ""


# Goals


@dataclass(frozen=True)
class CreateGoal(Intent):
    type: ClassVar[str] = "create_goal"
    name: str = ""
    total: Any = None
    unit: str = ""
    start_date: str | None = None
    end_date: str | None = None


@dataclass(frozen=True)
class EditGoal(Intent):
    """None leaves a field untouched; an empty date string clears the date."""

    type: ClassVar[str] = "edit_goal"
    goal_id: str = ""
    name: str | None = None
    total: Any = None
    unit: str | None = None
    start_date: str | None = None
    end_date: str | None = None


@dataclass(frozen=True)
class DeleteGoal(Intent):
    type: ClassVar[str] = "delete_goal"
    goal_id: str = ""


@dataclass(frozen=True)
class AdjustGoalProgress(Intent):
    type: ClassVar[str] = "adjust_goal_progress"
    goal_id: str = ""
    delta: Any = None


@dataclass(frozen=True)
class ToggleGoal(Intent):
    type: ClassVar[str] = "toggle_goal"
    goal_id: str = ""


# Events


@dataclass(frozen=True)
class CreateEvent(Intent):
    type: ClassVar[str] = "create_event"
    name: str = ""
    date: str | None = None
    description: str = ""
    lead_days: Any = 1


@dataclass(frozen=True)
class EditEvent(Intent):
    type: ClassVar[str] = "edit_event"
    event_id: str = ""
    name: str | None = None
    date: str | None = None
    description: str | None = None
    lead_days: Any = None


@dataclass(frozen=True)
class DeleteEvent(Intent):
    type: ClassVar[str] = "delete_event"
    event_id: str = ""


@dataclass(frozen=True)
class ToggleEvent(Intent):
    type: ClassVar[str] = "toggle_event"
    event_id: str = ""


# Shop, inventory, penalties


@dataclass(frozen=True)
class CreateShopItem(Intent):
    type: ClassVar[str] = "create_shop_item"
    name: str = ""
    description: str = ""
    cost: Any = 0
    category: str = "reward"
    effect: str | None = None


@dataclass(frozen=True)
class EditShopItem(Intent):
    type: ClassVar[str] = "edit_shop_item"
    item_id: str = ""
    name: str | None = None
    description: str | None = None
    cost: Any = None
    category: str | None = None
    effect: str | None = None


@dataclass(frozen=True)
class DeleteShopItem(Intent):
    type: ClassVar[str] = "delete_shop_item"
    item_id: str = ""


@dataclass(frozen=True)
class PurchaseItem(Intent):
    type: ClassVar[str] = "purchase_item"
    item_id: str = ""


@dataclass(frozen=True)
class UseItem(Intent):
    type: ClassVar[str] = "use_item"
    entry_id: str = ""
    target_id: str | None = None
    source: str | None = None


@dataclass(frozen=True)
class ResolvePenalty(Intent):
    type: ClassVar[str] = "resolve_penalty"
    target_id: str = ""
    source: str = "task"


@dataclass(frozen=True)
class ReopenPenalty(Intent):
    type: ClassVar[str] = "reopen_penalty"
    target_id: str = ""
    source: str = "task"


# Hero and presentation


@dataclass(frozen=True)
class SetClass(Intent):
    type: ClassVar[str] = "set_class"
    class_id: str | None = None


@dataclass(frozen=True)
class MarkNotified(Intent):
    type: ClassVar[str] = "mark_notified"
    kind: str = "goal"
    entity_id: str = ""
    today: bool = False


@dataclass(frozen=True)
class SetScreen(Intent):
    type: ClassVar[str] = "set_screen"
    screen: str = "journey"


@dataclass(frozen=True)
class SetMissionTab(Intent):
    type: ClassVar[str] = "set_mission_tab"
    tab: str = "daily"


INTENT_TYPES: dict[str, type[Intent]] = {
    cls.type: cls
    for cls in (
        CreateTask,
        EditTask,
        DeleteTask,
        CompleteTask,
        FailTask,
        ResetTask,
        AdjustTaskProgress,
        CreateHabit,
        EditHabit,
        DeleteHabit,
        ResistHabit,
        CedeHabit,
        ResetHabit,
        ResetDay,
        CreateQuest,
        EditQuest,
        DeleteQuest,
        ToggleQuest,
        CreateGoal,
        EditGoal,
        DeleteGoal,
        AdjustGoalProgress,
        ToggleGoal,
        CreateEvent,
        EditEvent,
        DeleteEvent,
        ToggleEvent,
        CreateShopItem,
        EditShopItem,
        DeleteShopItem,
        PurchaseItem,
        UseItem,
        ResolvePenalty,
        ReopenPenalty,
        SetClass,
        MarkNotified,
        SetScreen,
        SetMissionTab,
    )
}


def intent_from_payload(intent_type: str, payload: dict[str, Any] | None = None) -> Intent:
    cls = INTENT_TYPES.get((intent_type or "").strip())
    if cls is None:
        raise UnknownIntent(f"Unknown intent type: {intent_type!r}")
    data = payload or {}
    allowed = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in allowed})
