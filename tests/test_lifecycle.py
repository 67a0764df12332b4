from __future__ import annotations

import pytest

from habit_hero.lifecycle import (
    InvalidTransition,
    can_transition,
    completion_state,
    toggle_action,
    transition,
)


def test_task_machine() -> None:
    assert transition("task", "pending", "complete") == "completed"
    assert transition("task", "failed", "reset") == "pending"
    assert not can_transition("task", "completed", "fail")


def test_invalid_transition_details() -> None:
    with pytest.raises(InvalidTransition) as exc:
        transition("habit", "resisted", "cede")
    assert exc.value.machine == "habit"
    assert exc.value.state == "resisted"
    assert exc.value.action == "cede"


@pytest.mark.parametrize(
    ("machine", "state", "action"),
    [
        ("quest", "open", "complete"),
        ("quest", "completed", "reopen"),
        ("event", "pending", "finish"),
        ("event", "done", "reopen"),
        ("penalty", "active", "resolve"),
        ("penalty", "resolved", "reopen"),
    ],
)
def test_toggle_picks_the_only_action(machine, state, action) -> None:
    assert toggle_action(machine, state) == action


def test_toggle_from_unknown_state() -> None:
    with pytest.raises(InvalidTransition):
        toggle_action("event", "archived")
    assert completion_state(True) == "completed"
    assert completion_state(False) == "open"
