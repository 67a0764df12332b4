from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import date, datetime

TASK_KINDS = ("one_shot", "progress")
TASK_STATES = ("pending", "completed", "failed")
HABIT_STATES = ("pending", "resisted", "failed")
EVENT_STATES = ("pending", "done")
SHOP_CATEGORIES = ("reward", "relief")
ITEM_EFFECTS = ("remove_penalty", "convert_penalty_to_xp", "temporary_protection")
SCREENS = ("journey", "missions", "habits", "penalties", "shop", "events", "inventory")
MISSION_TABS = ("daily", "quests", "goals")

SCHEMA_VERSION = 1


def new_id() -> str:
    return secrets.token_hex(5)


@dataclass(frozen=True)
class AttributeSet:
    force: int = 1
    discipline: int = 1
    consistency: int = 1
    agility: int = 1

    def get(self, name: str) -> int:
        return int(getattr(self, name))


@dataclass(frozen=True)
class ClassDefinition:
    id: str
    name: str
    description: str
    icon: str
    favored: tuple[str, str]


@dataclass(frozen=True)
class DailyTask:
    id: str
    name: str
    penalty: str
    kind: str = "one_shot"
    state: str = "pending"
    difficulty: str = "normal"
    penalty_resolved: bool = False
    protected: bool = False
    target: float = 0
    progress: float = 0
    unit: str = ""


@dataclass(frozen=True)
class BadHabit:
    id: str
    name: str
    penalty: str
    strategy: str = ""
    description: str = ""
    reward_xp: int = 20
    reward_coins: int = 5
    status: str = "pending"
    penalty_resolved: bool = False
    protected: bool = False


@dataclass(frozen=True)
class Quest:
    id: str
    name: str
    difficulty: str = "normal"
    completed: bool = False


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    total: float
    progress: float = 0
    unit: str = ""
    completed: bool = False
    start_date: date | None = None
    end_date: date | None = None
    notified_upcoming: bool = False
    notified_today: bool = False


@dataclass(frozen=True)
class ScheduledEvent:
    id: str
    name: str
    date: date
    description: str = ""
    lead_days: int = 1
    status: str = "pending"
    notified_upcoming: bool = False
    notified_today: bool = False


@dataclass(frozen=True)
class ShopItem:
    id: str
    name: str
    description: str
    cost: int
    category: str = "reward"
    effect: str | None = None


@dataclass(frozen=True)
class Purchase:
    id: str
    item_id: str
    price: int
    purchased_at: datetime


@dataclass(frozen=True)
class InventoryEntry:
    id: str
    item_id: str


@dataclass(frozen=True)
class GameState:
    version: int = SCHEMA_VERSION
    screen: str = "journey"
    mission_tab: str = "daily"
    tasks: tuple[DailyTask, ...] = ()
    habits: tuple[BadHabit, ...] = ()
    quests: tuple[Quest, ...] = ()
    goals: tuple[Goal, ...] = ()
    events: tuple[ScheduledEvent, ...] = ()
    purchases: tuple[Purchase, ...] = ()
    shop_items: tuple[ShopItem, ...] = ()
    inventory: tuple[InventoryEntry, ...] = ()
    class_id: str | None = None
    initial_attributes: AttributeSet = field(default_factory=AttributeSet)
    bonus_xp: int = 0
    protection_active: bool = False

    def find_task(self, task_id: str) -> DailyTask | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def find_habit(self, habit_id: str) -> BadHabit | None:
        return next((h for h in self.habits if h.id == habit_id), None)

    def find_quest(self, quest_id: str) -> Quest | None:
        return next((q for q in self.quests if q.id == quest_id), None)

    def find_goal(self, goal_id: str) -> Goal | None:
        return next((g for g in self.goals if g.id == goal_id), None)

    def find_event(self, event_id: str) -> ScheduledEvent | None:
        return next((e for e in self.events if e.id == event_id), None)

    def find_shop_item(self, item_id: str | None) -> ShopItem | None:
        return next((i for i in self.shop_items if i.id == item_id), None)

    def find_inventory_entry(self, entry_id: str) -> InventoryEntry | None:
        return next((i for i in self.inventory if i.id == entry_id), None)
