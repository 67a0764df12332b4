from __future__ import annotations

from habit_hero.models import AttributeSet, ClassDefinition, GameState, ShopItem

HERO_CLASSES: dict[str, ClassDefinition] = {
    "warrior": ClassDefinition(
        id="warrior",
        name="Warrior",
        description="Specialist in physical force and unwavering consistency.",
        icon="⚔️",
        favored=("force", "consistency"),
    ),
    "mage": ClassDefinition(
        id="mage",
        name="Mage",
        description="Master of mental discipline and quick thinking.",
        icon="\U0001f52e",
        favored=("discipline", "agility"),
    ),
    "hunter": ClassDefinition(
        id="hunter",
        name="Hunter",
        description="Balance between swift action and the discipline of the hunt.",
        icon="\U0001f3f9",
        favored=("agility", "discipline"),
    ),
}

# (id, name, description, cost, category, effect)
DEFAULT_SHOP_ITEMS: list[tuple[str, str, str, int, str, str | None]] = [
    ("1", "Seal of Absolution", "Cancels one active penance.", 40, "relief", "remove_penalty"),
    ("2", "Alchemy of Regret", "Turns one failure into 25 XP.", 60, "relief", "convert_penalty_to_xp"),
    ("3", "Mantle of Providence", "Grants immunity to your next failure.", 50, "relief", "temporary_protection"),
    ("4", "Small Treat", "A mundane reward for your discipline.", 15, "reward", None),
]

DEFAULT_ATTRIBUTES = AttributeSet(force=1, discipline=1, consistency=1, agility=1)


def default_shop_items() -> tuple[ShopItem, ...]:
    return tuple(
        ShopItem(id=item_id, name=name, description=desc, cost=cost, category=category, effect=effect)
        for item_id, name, desc, cost, category, effect in DEFAULT_SHOP_ITEMS
    )


def default_state() -> GameState:
    return GameState(shop_items=default_shop_items(), initial_attributes=DEFAULT_ATTRIBUTES)
