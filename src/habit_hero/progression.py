from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from habit_hero.attributes import _derive
from habit_hero.economy import apply_percent_bonus, freeze_tuning, reward
from habit_hero.models import AttributeSet, BadHabit, DailyTask, GameState, Goal, Purchase, Quest
from habit_hero.penalties import _ledger


@dataclass(frozen=True)
class LevelProgress:
    level: int
    current_level_xp: int
    next_level_xp: int
    progress_ratio: float


@dataclass(frozen=True)
class ProgressSnapshot:
    base_xp: int
    bonus_xp: int
    xp_multiplier_percent: int
    total_xp: int
    level: LevelProgress
    earned_coins: int
    coin_multiplier_percent: int
    boosted_coins: int
    penalty_coins: int
    spent_coins: int
    coins: int


def level_progress(total_xp: int, xp_per_level: int = 100) -> LevelProgress:
    xp = max(0, total_xp)
    span = max(1, xp_per_level)
    level, into = divmod(xp, span)
    return LevelProgress(
        level=level + 1,
        current_level_xp=into,
        next_level_xp=span,
        progress_ratio=into / span,
    )


def base_rewards(
    tasks: tuple[DailyTask, ...],
    habits: tuple[BadHabit, ...],
    quests: tuple[Quest, ...],
    goals: tuple[Goal, ...],
    tuning: dict[str, int] | None = None,
) -> tuple[int, int]:
    xp = 0
    coins = 0
    for t in tasks:
        if t.state == "completed":
            r = reward("task", t.difficulty, tuning=tuning)
            xp += r.xp
            coins += r.coins
    for h in habits:
        if h.status == "resisted":
            xp += max(0, h.reward_xp)
            coins += max(0, h.reward_coins)
    for q in quests:
        if q.completed:
            r = reward("quest", q.difficulty, tuning=tuning)
            xp += r.xp
            coins += r.coins
    for g in goals:
        if g.completed:
            r = reward("goal", tuning=tuning)
            xp += r.xp
            coins += r.coins
    return xp, coins


@lru_cache(maxsize=128)
def _progress(
    tasks: tuple[DailyTask, ...],
    habits: tuple[BadHabit, ...],
    quests: tuple[Quest, ...],
    goals: tuple[Goal, ...],
    purchases: tuple[Purchase, ...],
    bonus_xp: int,
    class_id: str | None,
    seeds: AttributeSet,
    tuning_key: tuple[tuple[str, int], ...],
) -> ProgressSnapshot:
    tuning = dict(tuning_key)
    sheet = _derive(tasks, habits, quests, goals, class_id, seeds, tuning_key)
    base_xp, earned_coins = base_rewards(tasks, habits, quests, goals, tuning=tuning)

    xp_pct = int(tuning["discipline_xp_bonus_percent"])
    coin_pct = int(tuning["consistency_coin_bonus_percent"])
    discipline = sheet.value("discipline")
    consistency = sheet.value("consistency")

    pool = base_xp + max(0, bonus_xp)
    total_xp = apply_percent_bonus(pool, discipline, xp_pct)
    boosted = apply_percent_bonus(earned_coins, consistency, coin_pct)
    penalty = sum(p.fine for p in _ledger(tasks, habits, tuning_key)["active"])
    spent = sum(max(0, p.price) for p in purchases)

    return ProgressSnapshot(
        base_xp=base_xp,
        bonus_xp=max(0, bonus_xp),
        xp_multiplier_percent=100 + max(0, xp_pct) * max(0, discipline),
        total_xp=total_xp,
        level=level_progress(total_xp, int(tuning["hero_xp_per_level"])),
        earned_coins=earned_coins,
        coin_multiplier_percent=100 + max(0, coin_pct) * max(0, consistency),
        boosted_coins=boosted,
        penalty_coins=penalty,
        spent_coins=spent,
        coins=max(0, boosted - penalty - spent),
    )


def compute_progress(state: GameState, tuning: dict[str, int] | None = None) -> ProgressSnapshot:
    return _progress(
        state.tasks,
        state.habits,
        state.quests,
        state.goals,
        state.purchases,
        state.bonus_xp,
        state.class_id,
        state.initial_attributes,
        freeze_tuning(tuning),
    )


def spendable_coins(state: GameState, tuning: dict[str, int] | None = None) -> int:
    return compute_progress(state, tuning=tuning).coins
