from __future__ import annotations

from datetime import datetime, timezone

from habit_hero.models import AttributeSet, BadHabit, DailyTask, GameState, Purchase
from habit_hero.progression import compute_progress, level_progress, spendable_coins

ZERO = AttributeSet(force=0, discipline=0, consistency=0, agility=0)
WHEN = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


def _task(task_id: str, state: str = "completed", difficulty: str = "normal", **kwargs) -> DailyTask:
    return DailyTask(id=task_id, name=task_id, penalty="cold shower", state=state, difficulty=difficulty, **kwargs)


def test_one_normal_task_yields_15_xp() -> None:
    progress = compute_progress(GameState(tasks=(_task("a"),), initial_attributes=ZERO))
    assert progress.total_xp == 15
    assert progress.level.level == 1
    assert progress.level.current_level_xp == 15


def test_one_epic_task_yields_23_xp() -> None:
    progress = compute_progress(GameState(tasks=(_task("a", difficulty="epico"),), initial_attributes=ZERO))
    assert progress.total_xp == 23


def test_discipline_multiplies_xp() -> None:
    seeds = AttributeSet(force=0, discipline=4, consistency=0, agility=0)
    progress = compute_progress(GameState(tasks=(_task("a"),), initial_attributes=seeds, bonus_xp=85))
    assert progress.xp_multiplier_percent == 120
    assert progress.total_xp == 120


def test_level_boundaries() -> None:
    assert level_progress(0).level == 1
    assert level_progress(99).level == 1
    assert level_progress(100).level == 2
    lp = level_progress(250)
    assert lp.level == 3
    assert lp.current_level_xp == 50
    assert lp.progress_ratio == 0.5


def test_bonus_pool_and_habits_count() -> None:
    habit = BadHabit(id="h", name="Sugar", penalty="run", status="resisted")
    progress = compute_progress(GameState(habits=(habit,), bonus_xp=25, initial_attributes=ZERO))
    assert progress.base_xp == 20
    assert progress.total_xp == 45
    assert progress.earned_coins == 5


def test_resolved_penalties_stop_costing_coins() -> None:
    tasks = (_task("ok"), _task("bad", state="failed"))
    state = GameState(tasks=tasks, initial_attributes=ZERO)
    assert spendable_coins(state) == 5

    resolved = GameState(
        tasks=(_task("ok"), _task("bad", state="failed", penalty_resolved=True)),
        initial_attributes=ZERO,
    )
    assert spendable_coins(resolved) == 10

    protected = GameState(
        tasks=(_task("ok"), _task("bad", state="failed", protected=True)),
        initial_attributes=ZERO,
    )
    assert spendable_coins(protected) == 10


def test_coins_are_never_negative() -> None:
    state = GameState(
        tasks=(_task("bad", state="failed", difficulty="epico"),),
        purchases=(Purchase(id="p", item_id="1", price=40, purchased_at=WHEN),),
        initial_attributes=ZERO,
    )
    progress = compute_progress(state)
    assert progress.penalty_coins == 8
    assert progress.spent_coins == 40
    assert progress.coins == 0


def test_aggregation_is_idempotent_and_order_independent() -> None:
    tasks = (_task("a"), _task("b", difficulty="epico"), _task("c", state="failed"))
    forward = GameState(tasks=tasks)
    backward = GameState(tasks=tuple(reversed(tasks)))
    assert compute_progress(forward) == compute_progress(forward)
    first, second = compute_progress(forward), compute_progress(backward)
    assert first.total_xp == second.total_xp
    assert first.coins == second.coins
