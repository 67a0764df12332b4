from __future__ import annotations

import math
from dataclasses import dataclass

from habit_hero.difficulty import multiplier

REWARD_KINDS = ("task", "quest", "goal")
PENALTY_KINDS = ("task", "habit")
ATTRIBUTES = ("force", "discipline", "consistency", "agility")

DEFAULT_ECONOMY_TUNING = {
    "task_xp": 15,
    "task_coins": 10,
    "quest_xp": 30,
    "quest_coins": 20,
    "goal_xp": 100,
    "goal_coins": 30,
    "failure_fine": 5,
    "habit_default_xp": 20,
    "habit_default_coins": 5,
    "hero_xp_per_level": 100,
    "attribute_xp_per_point": 100,
    "class_bonus": 2,
    "discipline_xp_bonus_percent": 5,
    "consistency_coin_bonus_percent": 5,
    "convert_penalty_xp": 25,
    "goal_reminder_days": 5,
}

# Attribute experience granted per qualifying entity.
ATTRIBUTE_WEIGHTS: dict[str, dict[str, int]] = {
    "task": {"discipline": 40, "consistency": 40},
    "one_shot_task": {"agility": 20},
    "habit": {"discipline": 50, "agility": 30},
    "quest": {"discipline": 100, "force": 50},
    "goal": {"consistency": 200, "force": 100},
}


@dataclass(frozen=True)
class Reward:
    xp: int
    coins: int


def effective_tuning(tuning: dict[str, int] | None = None) -> dict[str, int]:
    if not tuning:
        return dict(DEFAULT_ECONOMY_TUNING)
    merged = dict(DEFAULT_ECONOMY_TUNING)
    merged.update(tuning)
    return merged


def freeze_tuning(tuning: dict[str, int] | None) -> tuple[tuple[str, int], ...]:
    return tuple(sorted(effective_tuning(tuning).items()))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def reward(kind: str, difficulty: str | None = None, tuning: dict[str, int] | None = None) -> Reward:
    if kind not in REWARD_KINDS:
        raise ValueError(f"No reward table for {kind!r}")
    cfg = effective_tuning(tuning)
    base_xp = max(0, int(cfg[f"{kind}_xp"]))
    base_coins = max(0, int(cfg[f"{kind}_coins"]))
    if kind == "goal":
        return Reward(xp=base_xp, coins=base_coins)
    mult = multiplier(difficulty)
    return Reward(xp=round_half_up(base_xp * mult), coins=round_half_up(base_coins * mult))


def failure_penalty(kind: str, difficulty: str | None = None, tuning: dict[str, int] | None = None) -> int:
    if kind not in PENALTY_KINDS:
        raise ValueError(f"No failure penalty for {kind!r}")
    fine = max(0, int(effective_tuning(tuning)["failure_fine"]))
    if kind == "habit":
        return fine
    return round_half_up(fine * multiplier(difficulty))


def apply_percent_bonus(amount: int, points: int, percent_per_point: int) -> int:
    # floor(amount * (1 + pct/100 * points)) without float drift
    factor = 100 + max(0, percent_per_point) * max(0, points)
    return (max(0, amount) * factor) // 100


def attribute_experience(counts: dict[str, int]) -> dict[str, int]:
    totals = {attr: 0 for attr in ATTRIBUTES}
    for source, qty in counts.items():
        for attr, weight in ATTRIBUTE_WEIGHTS.get(source, {}).items():
            totals[attr] += weight * max(0, qty)
    return totals
