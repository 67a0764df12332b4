from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any, Callable, TypeVar

from habit_hero.constants import HERO_CLASSES
from habit_hero.difficulty import EPIC_TIER, is_known_tier
from habit_hero.economy import effective_tuning
from habit_hero.i18n import t
from habit_hero.intents import (
    AdjustGoalProgress,
    AdjustTaskProgress,
    CedeHabit,
    CompleteTask,
    CreateEvent,
    CreateGoal,
    CreateHabit,
    CreateQuest,
    CreateShopItem,
    CreateTask,
    DeleteEvent,
    DeleteGoal,
    DeleteHabit,
    DeleteQuest,
    DeleteShopItem,
    DeleteTask,
    EditEvent,
    EditGoal,
    EditHabit,
    EditQuest,
    EditShopItem,
    EditTask,
    FailTask,
    Intent,
    MarkNotified,
    PurchaseItem,
    ReopenPenalty,
    ResetDay,
    ResetHabit,
    ResetTask,
    ResistHabit,
    ResolvePenalty,
    SetClass,
    SetMissionTab,
    SetScreen,
    ToggleEvent,
    ToggleGoal,
    ToggleQuest,
    UseItem,
)
from habit_hero.lifecycle import InvalidTransition, completion_state, toggle_action, transition
from habit_hero.models import (
    ITEM_EFFECTS,
    MISSION_TABS,
    SCREENS,
    SHOP_CATEGORIES,
    TASK_KINDS,
    BadHabit,
    DailyTask,
    GameState,
    Goal,
    InventoryEntry,
    Purchase,
    Quest,
    ScheduledEvent,
    ShopItem,
    new_id,
)
from habit_hero.penalties import find_active_penalty, penalty_status
from habit_hero.progression import spendable_coins
from habit_hero.time_utils import parse_date

logger = logging.getLogger(__name__)

APPLIED = "applied"
REJECTED = "rejected"
NOOP = "noop"


class ValidationError(ValueError):
    def __init__(self, key: str, **params: object) -> None:
        super().__init__(key)
        self.key = key
        self.params = params


class _Noop(Exception):
    def __init__(self, what: str) -> None:
        super().__init__(what)
        self.what = what


@dataclass(frozen=True)
class ReducerContext:
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    tuning: dict[str, int] | None = None
    lang: str = "en"
    id_factory: Callable[[], str] = new_id


@dataclass(frozen=True)
class MutationResult:
    status: str
    state: GameState
    message: str = ""

    @property
    def applied(self) -> bool:
        return self.status == APPLIED


_Outcome = tuple[GameState, str, dict[str, Any]]
_Handler = Callable[[GameState, Any, ReducerContext], _Outcome]
_HANDLERS: dict[type[Intent], _Handler] = {}

E = TypeVar("E")


def _handles(intent_cls: type[Intent]) -> Callable[[_Handler], _Handler]:
    def register(fn: _Handler) -> _Handler:
        _HANDLERS[intent_cls] = fn
        return fn

    return register


def apply_intent(state: GameState, intent: Intent, ctx: ReducerContext | None = None) -> MutationResult:
    ctx = ctx or ReducerContext()
    handler = _HANDLERS.get(type(intent))
    if handler is None:
        raise TypeError(f"No handler for intent {type(intent).__name__}")
    try:
        next_state, key, params = handler(state, intent, ctx)
    except ValidationError as exc:
        logger.debug("Rejected %s: %s", intent.type, exc.key)
        return MutationResult(REJECTED, state, t(exc.key, ctx.lang, **exc.params))
    except InvalidTransition as exc:
        logger.debug("Rejected %s: %s", intent.type, exc)
        return MutationResult(
            REJECTED,
            state,
            t("err_invalid_transition", ctx.lang, action=exc.action, state=exc.state),
        )
    except _Noop as exc:
        logger.debug("No-op %s: %s", intent.type, exc.what)
        return MutationResult(NOOP, state, t("noop_missing", ctx.lang, what=exc.what))
    return MutationResult(APPLIED, next_state, t(key, ctx.lang, **params))


# Field helpers


def _text(raw: object) -> str:
    return str(raw or "").strip()


def _require_name(raw: object) -> str:
    name = _text(raw)
    if not name:
        raise ValidationError("err_name_required")
    return name


def _require_penalty(raw: object) -> str:
    penalty = _text(raw)
    if not penalty:
        raise ValidationError("err_penalty_required")
    return penalty


def _tier(raw: object) -> str:
    key = _text(raw) or "normal"
    if not is_known_tier(key):
        raise ValidationError("err_unknown_tier", value=key)
    return key


def _number(raw: object) -> int | float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw) if isinstance(raw, (int, float)) else float(str(raw).strip())
    except (ValueError, OverflowError):
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return int(value) if value.is_integer() else value


def _non_negative_int(raw: object, error_key: str) -> int:
    value = _number(raw)
    if value is None:
        raise ValidationError("err_amount_required")
    if value < 0:
        raise ValidationError(error_key)
    return int(value)


def _date_or_none(raw: object) -> date | None:
    if raw is None or raw == "":
        return None
    parsed = parse_date(raw)
    if parsed is None:
        raise ValidationError("err_invalid_date", value=raw)
    return parsed


def _replace_item(items: tuple[E, ...], item_id: str, new: E) -> tuple[E, ...]:
    return tuple(new if getattr(x, "id") == item_id else x for x in items)


def _without(items: tuple[E, ...], item_id: str) -> tuple[E, ...]:
    return tuple(x for x in items if getattr(x, "id") != item_id)


def _found(item: E | None, what: str) -> E:
    if item is None:
        raise _Noop(what)
    return item


def _guard_single_epic(state: GameState, difficulty: str, exclude_id: str | None = None) -> None:
    if difficulty != EPIC_TIER:
        return
    for task in state.tasks:
        if task.id != exclude_id and task.difficulty == EPIC_TIER and task.state == "pending":
            raise ValidationError("err_epic_pending")


def _progress_target(kind: str, raw: object) -> int | float:
    if kind != "progress":
        return _number(raw) or 0
    target = _number(raw)
    if target is None or target <= 0:
        raise ValidationError("err_target_required")
    return target


def _consume_protection(state: GameState) -> tuple[GameState, bool]:
    if not state.protection_active:
        return state, False
    return replace(state, protection_active=False), True


# Tasks


@_handles(CreateTask)
def _create_task(state: GameState, intent: CreateTask, ctx: ReducerContext) -> _Outcome:
    name = _require_name(intent.name)
    penalty = _require_penalty(intent.penalty)
    kind = _text(intent.kind) or "one_shot"
    if kind not in TASK_KINDS:
        raise ValidationError("err_unknown_kind", value=kind)
    difficulty = _tier(intent.difficulty)
    target = _progress_target(kind, intent.target)
    _guard_single_epic(state, difficulty)
    task = DailyTask(
        id=ctx.id_factory(),
        name=name,
        penalty=penalty,
        kind=kind,
        difficulty=difficulty,
        target=target,
        unit=_text(intent.unit),
    )
    return replace(state, tasks=state.tasks + (task,)), "task_created", {"name": name}


@_handles(EditTask)
def _edit_task(state: GameState, intent: EditTask, ctx: ReducerContext) -> _Outcome:
    task = _found(state.find_task(intent.task_id), "task")
    name = _require_name(intent.name) if intent.name is not None else task.name
    penalty = _require_penalty(intent.penalty) if intent.penalty is not None else task.penalty
    kind = _text(intent.kind) if intent.kind is not None else task.kind
    if kind not in TASK_KINDS:
        raise ValidationError("err_unknown_kind", value=kind)
    difficulty = _tier(intent.difficulty) if intent.difficulty is not None else task.difficulty
    target = _progress_target(kind, intent.target if intent.target is not None else task.target)
    if task.state == "pending":
        _guard_single_epic(state, difficulty, exclude_id=task.id)
    updated = replace(
        task,
        name=name,
        penalty=penalty,
        kind=kind,
        difficulty=difficulty,
        target=target,
        unit=_text(intent.unit) if intent.unit is not None else task.unit,
    )
    return replace(state, tasks=_replace_item(state.tasks, task.id, updated)), "task_updated", {"name": name}


@_handles(DeleteTask)
def _delete_task(state: GameState, intent: DeleteTask, ctx: ReducerContext) -> _Outcome:
    task = _found(state.find_task(intent.task_id), "task")
    return replace(state, tasks=_without(state.tasks, task.id)), "task_deleted", {"name": task.name}


@_handles(CompleteTask)
def _complete_task(state: GameState, intent: CompleteTask, ctx: ReducerContext) -> _Outcome:
    task = _found(state.find_task(intent.task_id), "task")
    updated = replace(task, state=transition("task", task.state, "complete"))
    return replace(state, tasks=_replace_item(state.tasks, task.id, updated)), "task_completed", {}


@_handles(FailTask)
def _fail_task(state: GameState, intent: FailTask, ctx: ReducerContext) -> _Outcome:
    task = _found(state.find_task(intent.task_id), "task")
    failed = transition("task", task.state, "fail")
    state, shielded = _consume_protection(state)
    updated = replace(task, state=failed, protected=shielded, penalty_resolved=False)
    key = "task_protected" if shielded else "task_failed"
    return replace(state, tasks=_replace_item(state.tasks, task.id, updated)), key, {"name": task.name}


@_handles(ResetTask)
def _reset_task(state: GameState, intent: ResetTask, ctx: ReducerContext) -> _Outcome:
    task = _found(state.find_task(intent.task_id), "task")
    pending = transition("task", task.state, "reset")
    _guard_single_epic(state, task.difficulty, exclude_id=task.id)
    updated = replace(task, state=pending, progress=0, penalty_resolved=False, protected=False)
    return replace(state, tasks=_replace_item(state.tasks, task.id, updated)), "task_reset", {"name": task.name}


@_handles(AdjustTaskProgress)
def _adjust_task_progress(state: GameState, intent: AdjustTaskProgress, ctx: ReducerContext) -> _Outcome:
    task = _found(state.find_task(intent.task_id), "task")
    delta = _number(intent.delta)
    if not delta:
        raise ValidationError("err_amount_required")
    if task.kind != "progress":
        raise ValidationError("err_target_required")
    if task.state == "failed":
        raise ValidationError("err_failed_task_progress")

    progress = task.progress + delta
    next_state = task.state
    if delta > 0:
        if progress >= task.target and task.state == "pending":
            next_state = transition("task", task.state, "complete")
    else:
        progress = max(0, progress)
        if task.state == "completed" and progress < task.target:
            _guard_single_epic(state, task.difficulty, exclude_id=task.id)
            next_state = transition("task", task.state, "reset")

    updated = replace(task, progress=progress, state=next_state)
    new_state = replace(state, tasks=_replace_item(state.tasks, task.id, updated))
    if next_state == "completed" and task.state != "completed":
        return new_state, "task_completed", {}
    return new_state, "task_progress", {
        "name": task.name,
        "progress": progress,
        "target": task.target,
        "unit": task.unit,
    }


# Habits


@_handles(CreateHabit)
def _create_habit(state: GameState, intent: CreateHabit, ctx: ReducerContext) -> _Outcome:
    cfg = effective_tuning(ctx.tuning)
    name = _require_name(intent.name)
    penalty = _require_penalty(intent.penalty)
    xp_raw = intent.reward_xp if intent.reward_xp not in (None, "") else cfg["habit_default_xp"]
    coins_raw = intent.reward_coins if intent.reward_coins not in (None, "") else cfg["habit_default_coins"]
    habit = BadHabit(
        id=ctx.id_factory(),
        name=name,
        penalty=penalty,
        strategy=_text(intent.strategy),
        description=_text(intent.description),
        reward_xp=_non_negative_int(xp_raw, "err_negative_cost"),
        reward_coins=_non_negative_int(coins_raw, "err_negative_cost"),
    )
    return replace(state, habits=state.habits + (habit,)), "habit_created", {"name": name}


@_handles(EditHabit)
def _edit_habit(state: GameState, intent: EditHabit, ctx: ReducerContext) -> _Outcome:
    habit = _found(state.find_habit(intent.habit_id), "habit")
    updated = replace(
        habit,
        name=_require_name(intent.name) if intent.name is not None else habit.name,
        penalty=_require_penalty(intent.penalty) if intent.penalty is not None else habit.penalty,
        strategy=_text(intent.strategy) if intent.strategy is not None else habit.strategy,
        description=_text(intent.description) if intent.description is not None else habit.description,
        reward_xp=(
            _non_negative_int(intent.reward_xp, "err_negative_cost")
            if intent.reward_xp is not None
            else habit.reward_xp
        ),
        reward_coins=(
            _non_negative_int(intent.reward_coins, "err_negative_cost")
            if intent.reward_coins is not None
            else habit.reward_coins
        ),
    )
    return (
        replace(state, habits=_replace_item(state.habits, habit.id, updated)),
        "habit_updated",
        {"name": updated.name},
    )


@_handles(DeleteHabit)
def _delete_habit(state: GameState, intent: DeleteHabit, ctx: ReducerContext) -> _Outcome:
    habit = _found(state.find_habit(intent.habit_id), "habit")
    return replace(state, habits=_without(state.habits, habit.id)), "habit_deleted", {"name": habit.name}


@_handles(ResistHabit)
def _resist_habit(state: GameState, intent: ResistHabit, ctx: ReducerContext) -> _Outcome:
    habit = _found(state.find_habit(intent.habit_id), "habit")
    updated = replace(habit, status=transition("habit", habit.status, "resist"))
    return replace(state, habits=_replace_item(state.habits, habit.id, updated)), "habit_resisted", {}


@_handles(CedeHabit)
def _cede_habit(state: GameState, intent: CedeHabit, ctx: ReducerContext) -> _Outcome:
    habit = _found(state.find_habit(intent.habit_id), "habit")
    failed = transition("habit", habit.status, "cede")
    state, shielded = _consume_protection(state)
    updated = replace(habit, status=failed, protected=shielded, penalty_resolved=False)
    key = "task_protected" if shielded else "habit_failed"
    return replace(state, habits=_replace_item(state.habits, habit.id, updated)), key, {"name": habit.name}


@_handles(ResetHabit)
def _reset_habit(state: GameState, intent: ResetHabit, ctx: ReducerContext) -> _Outcome:
    habit = _found(state.find_habit(intent.habit_id), "habit")
    updated = replace(
        habit,
        status=transition("habit", habit.status, "reset"),
        penalty_resolved=False,
        protected=False,
    )
    return replace(state, habits=_replace_item(state.habits, habit.id, updated)), "habit_reset", {"name": habit.name}


@_handles(ResetDay)
def _reset_day(state: GameState, intent: ResetDay, ctx: ReducerContext) -> _Outcome:
    habits = tuple(replace(h, status="pending", penalty_resolved=False, protected=False) for h in state.habits)
    return replace(state, habits=habits), "day_reset", {"count": len(habits)}


# Quests


@_handles(CreateQuest)
def _create_quest(state: GameState, intent: CreateQuest, ctx: ReducerContext) -> _Outcome:
    name = _require_name(intent.name)
    quest = Quest(id=ctx.id_factory(), name=name, difficulty=_tier(intent.difficulty))
    return replace(state, quests=state.quests + (quest,)), "quest_created", {"name": name}


@_handles(EditQuest)
def _edit_quest(state: GameState, intent: EditQuest, ctx: ReducerContext) -> _Outcome:
    quest = _found(state.find_quest(intent.quest_id), "quest")
    updated = replace(
        quest,
        name=_require_name(intent.name) if intent.name is not None else quest.name,
        difficulty=_tier(intent.difficulty) if intent.difficulty is not None else quest.difficulty,
    )
    return replace(state, quests=_replace_item(state.quests, quest.id, updated)), "quest_updated", {"name": updated.name}


@_handles(DeleteQuest)
def _delete_quest(state: GameState, intent: DeleteQuest, ctx: ReducerContext) -> _Outcome:
    quest = _found(state.find_quest(intent.quest_id), "quest")
    return replace(state, quests=_without(state.quests, quest.id)), "quest_deleted", {"name": quest.name}


@_handles(ToggleQuest)
def _toggle_quest(state: GameState, intent: ToggleQuest, ctx: ReducerContext) -> _Outcome:
    quest = _found(state.find_quest(intent.quest_id), "quest")
    current = completion_state(quest.completed)
    done = transition("quest", current, toggle_action("quest", current)) == "completed"
    updated = replace(quest, completed=done)
    key = "quest_completed" if done else "quest_reopened"
    return replace(state, quests=_replace_item(state.quests, quest.id, updated)), key, {"name": quest.name}


# Goals


def _goal_total(raw: object) -> int | float:
    total = _number(raw)
    if total is None or total <= 0:
        raise ValidationError("err_goal_total")
    return total


@_handles(CreateGoal)
def _create_goal(state: GameState, intent: CreateGoal, ctx: ReducerContext) -> _Outcome:
    name = _require_name(intent.name)
    goal = Goal(
        id=ctx.id_factory(),
        name=name,
        total=_goal_total(intent.total),
        unit=_text(intent.unit),
        start_date=_date_or_none(intent.start_date),
        end_date=_date_or_none(intent.end_date),
    )
    return replace(state, goals=state.goals + (goal,)), "goal_created", {"name": name}


@_handles(EditGoal)
def _edit_goal(state: GameState, intent: EditGoal, ctx: ReducerContext) -> _Outcome:
    goal = _found(state.find_goal(intent.goal_id), "goal")
    total = _goal_total(intent.total) if intent.total is not None else goal.total
    end_date = _date_or_none(intent.end_date) if intent.end_date is not None else goal.end_date
    updated = replace(
        goal,
        name=_require_name(intent.name) if intent.name is not None else goal.name,
        total=total,
        unit=_text(intent.unit) if intent.unit is not None else goal.unit,
        start_date=_date_or_none(intent.start_date) if intent.start_date is not None else goal.start_date,
        end_date=end_date,
        completed=goal.progress >= total,
    )
    if end_date != goal.end_date:
        updated = replace(updated, notified_upcoming=False, notified_today=False)
    return replace(state, goals=_replace_item(state.goals, goal.id, updated)), "goal_updated", {"name": updated.name}


@_handles(DeleteGoal)
def _delete_goal(state: GameState, intent: DeleteGoal, ctx: ReducerContext) -> _Outcome:
    goal = _found(state.find_goal(intent.goal_id), "goal")
    return replace(state, goals=_without(state.goals, goal.id)), "goal_deleted", {"name": goal.name}


@_handles(AdjustGoalProgress)
def _adjust_goal_progress(state: GameState, intent: AdjustGoalProgress, ctx: ReducerContext) -> _Outcome:
    goal = _found(state.find_goal(intent.goal_id), "goal")
    delta = _number(intent.delta)
    if not delta:
        raise ValidationError("err_amount_required")
    progress = min(goal.total, max(0, goal.progress + delta))
    completed = progress >= goal.total if delta > 0 else False
    updated = replace(goal, progress=progress, completed=completed)
    new_state = replace(state, goals=_replace_item(state.goals, goal.id, updated))
    if completed and not goal.completed:
        return new_state, "goal_reached", {}
    return new_state, "goal_progress", {
        "name": goal.name,
        "progress": progress,
        "total": goal.total,
        "unit": goal.unit,
    }


@_handles(ToggleGoal)
def _toggle_goal(state: GameState, intent: ToggleGoal, ctx: ReducerContext) -> _Outcome:
    goal = _found(state.find_goal(intent.goal_id), "goal")
    current = completion_state(goal.completed)
    done = transition("goal", current, toggle_action("goal", current)) == "completed"
    updated = replace(goal, completed=done)
    key = "goal_reached" if done else "goal_reopened"
    return replace(state, goals=_replace_item(state.goals, goal.id, updated)), key, {"name": goal.name}


# Events


def _lead_days(raw: object) -> int:
    value = _number(raw)
    if value is None:
        raise ValidationError("err_amount_required")
    if value < 0:
        raise ValidationError("err_lead_days")
    return int(value)


@_handles(CreateEvent)
def _create_event(state: GameState, intent: CreateEvent, ctx: ReducerContext) -> _Outcome:
    name = _require_name(intent.name)
    when = _date_or_none(intent.date)
    if when is None:
        raise ValidationError("err_invalid_date", value=intent.date or "")
    event = ScheduledEvent(
        id=ctx.id_factory(),
        name=name,
        date=when,
        description=_text(intent.description),
        lead_days=_lead_days(intent.lead_days),
    )
    return replace(state, events=state.events + (event,)), "event_created", {"name": name}


@_handles(EditEvent)
def _edit_event(state: GameState, intent: EditEvent, ctx: ReducerContext) -> _Outcome:
    event = _found(state.find_event(intent.event_id), "event")
    when = event.date
    if intent.date is not None:
        when = _date_or_none(intent.date)
        if when is None:
            raise ValidationError("err_invalid_date", value=intent.date)
    updated = replace(
        event,
        name=_require_name(intent.name) if intent.name is not None else event.name,
        date=when,
        description=_text(intent.description) if intent.description is not None else event.description,
        lead_days=_lead_days(intent.lead_days) if intent.lead_days is not None else event.lead_days,
    )
    if when != event.date:
        updated = replace(updated, notified_upcoming=False, notified_today=False)
    return replace(state, events=_replace_item(state.events, event.id, updated)), "event_updated", {"name": updated.name}


@_handles(DeleteEvent)
def _delete_event(state: GameState, intent: DeleteEvent, ctx: ReducerContext) -> _Outcome:
    event = _found(state.find_event(intent.event_id), "event")
    return replace(state, events=_without(state.events, event.id)), "event_deleted", {"name": event.name}


@_handles(ToggleEvent)
def _toggle_event(state: GameState, intent: ToggleEvent, ctx: ReducerContext) -> _Outcome:
    event = _found(state.find_event(intent.event_id), "event")
    status = transition("event", event.status, toggle_action("event", event.status))
    updated = replace(event, status=status)
    key = "event_done" if status == "done" else "event_reopened"
    return replace(state, events=_replace_item(state.events, event.id, updated)), key, {"name": event.name}


# Shop and inventory


def _category(raw: object) -> str:
    category = _text(raw) or "reward"
    if category not in SHOP_CATEGORIES:
        raise ValidationError("err_invalid_category", value=category)
    return category


def _effect(raw: object) -> str | None:
    effect = _text(raw)
    if not effect:
        return None
    if effect not in ITEM_EFFECTS:
        raise ValidationError("err_invalid_effect", value=effect)
    return effect


@_handles(CreateShopItem)
def _create_shop_item(state: GameState, intent: CreateShopItem, ctx: ReducerContext) -> _Outcome:
    item = ShopItem(
        id=ctx.id_factory(),
        name=_require_name(intent.name),
        description=_text(intent.description),
        cost=_non_negative_int(intent.cost, "err_negative_cost"),
        category=_category(intent.category),
        effect=_effect(intent.effect),
    )
    return replace(state, shop_items=state.shop_items + (item,)), "item_saved", {}


@_handles(EditShopItem)
def _edit_shop_item(state: GameState, intent: EditShopItem, ctx: ReducerContext) -> _Outcome:
    item = _found(state.find_shop_item(intent.item_id), "item")
    updated = replace(
        item,
        name=_require_name(intent.name) if intent.name is not None else item.name,
        description=_text(intent.description) if intent.description is not None else item.description,
        cost=_non_negative_int(intent.cost, "err_negative_cost") if intent.cost is not None else item.cost,
        category=_category(intent.category) if intent.category is not None else item.category,
        effect=_effect(intent.effect) if intent.effect is not None else item.effect,
    )
    return replace(state, shop_items=_replace_item(state.shop_items, item.id, updated)), "item_saved", {}


@_handles(DeleteShopItem)
def _delete_shop_item(state: GameState, intent: DeleteShopItem, ctx: ReducerContext) -> _Outcome:
    item = _found(state.find_shop_item(intent.item_id), "item")
    return replace(state, shop_items=_without(state.shop_items, item.id)), "item_deleted", {}


@_handles(PurchaseItem)
def _purchase_item(state: GameState, intent: PurchaseItem, ctx: ReducerContext) -> _Outcome:
    item = _found(state.find_shop_item(intent.item_id), "item")
    coins = spendable_coins(state, tuning=ctx.tuning)
    if coins < item.cost:
        raise ValidationError("err_insufficient_coins", cost=item.cost, coins=coins)
    purchase = Purchase(id=ctx.id_factory(), item_id=item.id, price=item.cost, purchased_at=ctx.now)
    entry = InventoryEntry(id=ctx.id_factory(), item_id=item.id)
    next_state = replace(
        state,
        purchases=state.purchases + (purchase,),
        inventory=state.inventory + (entry,),
    )
    return next_state, "item_purchased", {"name": item.name}


def _set_penalty_resolved(state: GameState, source: str, target_id: str, resolved: bool) -> GameState:
    if source == "habit":
        habit = state.find_habit(target_id)
        if habit is None:
            raise _Noop("habit")
        return replace(
            state,
            habits=_replace_item(state.habits, habit.id, replace(habit, penalty_resolved=resolved)),
        )
    task = state.find_task(target_id)
    if task is None:
        raise _Noop("task")
    return replace(
        state,
        tasks=_replace_item(state.tasks, task.id, replace(task, penalty_resolved=resolved)),
    )


@_handles(UseItem)
def _use_item(state: GameState, intent: UseItem, ctx: ReducerContext) -> _Outcome:
    entry = _found(state.find_inventory_entry(intent.entry_id), "inventory entry")
    item = _found(state.find_shop_item(entry.item_id), "item")

    if item.effect == "temporary_protection":
        state = replace(state, protection_active=True)
    elif item.effect in ("remove_penalty", "convert_penalty_to_xp"):
        target = _found(find_active_penalty(state, intent.target_id, intent.source), "active penalty")
        state = _set_penalty_resolved(state, target.source, target.id, True)
        if item.effect == "convert_penalty_to_xp":
            bonus = max(0, int(effective_tuning(ctx.tuning)["convert_penalty_xp"]))
            state = replace(state, bonus_xp=state.bonus_xp + bonus)

    state = replace(state, inventory=_without(state.inventory, entry.id))
    return state, "item_used", {"name": item.name}


# Penalties


def _penalty_subject(state: GameState, source: str, target_id: str) -> str | None:
    if source == "habit":
        habit = _found(state.find_habit(target_id), "habit")
        return penalty_status(habit.status == "failed", habit.penalty_resolved, habit.protected)
    task = _found(state.find_task(target_id), "task")
    return penalty_status(task.state == "failed", task.penalty_resolved, task.protected)


def _penalty_name(state: GameState, source: str, target_id: str) -> str:
    entity = state.find_habit(target_id) if source == "habit" else state.find_task(target_id)
    return entity.name if entity is not None else ""


@_handles(ResolvePenalty)
def _resolve_penalty(state: GameState, intent: ResolvePenalty, ctx: ReducerContext) -> _Outcome:
    status = _penalty_subject(state, intent.source, intent.target_id)
    if status is None or status == "protected":
        raise _Noop("penalty")
    transition("penalty", status, "resolve")
    return _set_penalty_resolved(state, intent.source, intent.target_id, True), "penalty_resolved", {}


@_handles(ReopenPenalty)
def _reopen_penalty(state: GameState, intent: ReopenPenalty, ctx: ReducerContext) -> _Outcome:
    status = _penalty_subject(state, intent.source, intent.target_id)
    if status is None or status == "protected":
        raise _Noop("penalty")
    transition("penalty", status, "reopen")
    name = _penalty_name(state, intent.source, intent.target_id)
    return _set_penalty_resolved(state, intent.source, intent.target_id, False), "penalty_reopened", {"name": name}


# Hero and presentation


@_handles(SetClass)
def _set_class(state: GameState, intent: SetClass, ctx: ReducerContext) -> _Outcome:
    class_id = _text(intent.class_id)
    if not class_id:
        return replace(state, class_id=None), "class_cleared", {}
    hero_class = HERO_CLASSES.get(class_id)
    if hero_class is None:
        raise ValidationError("err_unknown_class", value=class_id)
    return replace(state, class_id=class_id), "class_set", {"name": hero_class.name, "icon": hero_class.icon}


@_handles(MarkNotified)
def _mark_notified(state: GameState, intent: MarkNotified, ctx: ReducerContext) -> _Outcome:
    flag = "notified_today" if intent.today else "notified_upcoming"
    if intent.kind == "event":
        event = _found(state.find_event(intent.entity_id), "event")
        updated_event = replace(event, **{flag: True})
        return replace(state, events=_replace_item(state.events, event.id, updated_event)), "reminder_marked", {}
    goal = _found(state.find_goal(intent.entity_id), "goal")
    updated_goal = replace(goal, **{flag: True})
    return replace(state, goals=_replace_item(state.goals, goal.id, updated_goal)), "reminder_marked", {}


@_handles(SetScreen)
def _set_screen(state: GameState, intent: SetScreen, ctx: ReducerContext) -> _Outcome:
    if intent.screen not in SCREENS:
        raise ValidationError("err_unknown_screen", value=intent.screen)
    return replace(state, screen=intent.screen), "screen_set", {}


@_handles(SetMissionTab)
def _set_mission_tab(state: GameState, intent: SetMissionTab, ctx: ReducerContext) -> _Outcome:
    if intent.tab not in MISSION_TABS:
        raise ValidationError("err_unknown_screen", value=intent.tab)
    return replace(state, mission_tab=intent.tab), "screen_set", {}
