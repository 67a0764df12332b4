from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DifficultyTier:
    key: str
    name: str
    label: str
    multiplier: float
    icon: str


DEFAULT_TIER = "normal"
EPIC_TIER = "epico"

DIFFICULTIES: dict[str, DifficultyTier] = {
    "muito_facil": DifficultyTier("muito_facil", "Very Easy", "Trivial", 0.5, "\U0001f331"),
    "facil": DifficultyTier("facil", "Easy", "Simple", 0.75, "⚔️"),
    "normal": DifficultyTier("normal", "Normal", "Standard", 1.0, "\U0001f4dc"),
    "dificil": DifficultyTier("dificil", "Hard", "Risky", 1.25, "\U0001f525"),
    "epico": DifficultyTier("epico", "Epic", "Legendary", 1.5, "\U0001f451"),
}

TIER_ORDER = tuple(DIFFICULTIES)


def is_known_tier(key: str | None) -> bool:
    return isinstance(key, str) and key in DIFFICULTIES


def get_tier(key: str | None) -> DifficultyTier:
    if is_known_tier(key):
        return DIFFICULTIES[str(key)]
    return DIFFICULTIES[DEFAULT_TIER]


def multiplier(key: str | None) -> float:
    return get_tier(key).multiplier
