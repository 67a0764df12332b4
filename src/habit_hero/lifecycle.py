from __future__ import annotations

# (current state, action) -> next state
TASK_TRANSITIONS: dict[tuple[str, str], str] = {
    ("pending", "complete"): "completed",
    ("pending", "fail"): "failed",
    ("completed", "reset"): "pending",
    ("failed", "reset"): "pending",
}

HABIT_TRANSITIONS: dict[tuple[str, str], str] = {
    ("pending", "resist"): "resisted",
    ("pending", "cede"): "failed",
    ("resisted", "reset"): "pending",
    ("failed", "reset"): "pending",
}

QUEST_TRANSITIONS: dict[tuple[str, str], str] = {
    ("open", "complete"): "completed",
    ("completed", "reopen"): "open",
}

GOAL_TRANSITIONS: dict[tuple[str, str], str] = QUEST_TRANSITIONS

EVENT_TRANSITIONS: dict[tuple[str, str], str] = {
    ("pending", "finish"): "done",
    ("done", "reopen"): "pending",
}

PENALTY_TRANSITIONS: dict[tuple[str, str], str] = {
    ("active", "resolve"): "resolved",
    ("resolved", "reopen"): "active",
}

MACHINES: dict[str, dict[tuple[str, str], str]] = {
    "task": TASK_TRANSITIONS,
    "habit": HABIT_TRANSITIONS,
    "quest": QUEST_TRANSITIONS,
    "goal": GOAL_TRANSITIONS,
    "event": EVENT_TRANSITIONS,
    "penalty": PENALTY_TRANSITIONS,
}


class InvalidTransition(ValueError):
    def __init__(self, machine: str, state: str, action: str) -> None:
        super().__init__(f"{machine}: cannot {action} from {state!r}")
        self.machine = machine
        self.state = state
        self.action = action


def can_transition(machine: str, state: str, action: str) -> bool:
    return (state, action) in MACHINES[machine]


def transition(machine: str, state: str, action: str) -> str:
    table = MACHINES[machine]
    nxt = table.get((state, action))
    if nxt is None:
        raise InvalidTransition(machine, state, action)
    return nxt


def toggle_action(machine: str, state: str) -> str:
    """Pick the single legal action out of `state` for two-state machines."""
    for (src, action) in MACHINES[machine]:
        if src == state:
            return action
    raise InvalidTransition(machine, state, "toggle")


def completion_state(completed: bool) -> str:
    return "completed" if completed else "open"
