from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from habit_hero.constants import HERO_CLASSES
from habit_hero.economy import ATTRIBUTES, attribute_experience, freeze_tuning
from habit_hero.models import AttributeSet, BadHabit, ClassDefinition, DailyTask, GameState, Goal, Quest


@dataclass(frozen=True)
class AttributeProgress:
    name: str
    experience: int
    levels_gained: int
    progress: int
    seed: int
    class_bonus: int
    base_value: int
    value: int


@dataclass(frozen=True)
class AttributeSheet:
    force: AttributeProgress
    discipline: AttributeProgress
    consistency: AttributeProgress
    agility: AttributeProgress

    def value(self, name: str) -> int:
        return getattr(self, name).value

    def as_set(self) -> AttributeSet:
        return AttributeSet(**{attr: self.value(attr) for attr in ATTRIBUTES})


def get_class(class_id: str | None) -> ClassDefinition | None:
    if class_id is None:
        return None
    return HERO_CLASSES.get(class_id)


def count_qualifying(
    tasks: tuple[DailyTask, ...],
    habits: tuple[BadHabit, ...],
    quests: tuple[Quest, ...],
    goals: tuple[Goal, ...],
) -> dict[str, int]:
    completed_tasks = [t for t in tasks if t.state == "completed"]
    return {
        "task": len(completed_tasks),
        "one_shot_task": sum(1 for t in completed_tasks if t.kind == "one_shot"),
        "habit": sum(1 for h in habits if h.status == "resisted"),
        "quest": sum(1 for q in quests if q.completed),
        "goal": sum(1 for g in goals if g.completed),
    }


@lru_cache(maxsize=128)
def _derive(
    tasks: tuple[DailyTask, ...],
    habits: tuple[BadHabit, ...],
    quests: tuple[Quest, ...],
    goals: tuple[Goal, ...],
    class_id: str | None,
    seeds: AttributeSet,
    tuning_key: tuple[tuple[str, int], ...],
) -> AttributeSheet:
    cfg = dict(tuning_key)
    per_point = max(1, int(cfg["attribute_xp_per_point"]))
    bonus = max(0, int(cfg["class_bonus"]))
    hero_class = get_class(class_id)
    favored = hero_class.favored if hero_class else ()

    experience = attribute_experience(count_qualifying(tasks, habits, quests, goals))
    sheet: dict[str, AttributeProgress] = {}
    for attr in ATTRIBUTES:
        xp = experience[attr]
        levels, remainder = divmod(xp, per_point)
        seed = seeds.get(attr)
        class_bonus = bonus if attr in favored else 0
        sheet[attr] = AttributeProgress(
            name=attr,
            experience=xp,
            levels_gained=levels,
            progress=remainder,
            seed=seed,
            class_bonus=class_bonus,
            base_value=seed + levels,
            value=seed + levels + class_bonus,
        )
    return AttributeSheet(**sheet)


def derive_attributes(state: GameState, tuning: dict[str, int] | None = None) -> AttributeSheet:
    return _derive(
        state.tasks,
        state.habits,
        state.quests,
        state.goals,
        state.class_id,
        state.initial_attributes,
        freeze_tuning(tuning),
    )
