import pytest

from notefsm.infra import InvalidStateError
from notefsm.state_machine import State


def test_define_transition_keeps_first_target():
    state = State("ready")
    state.define_transition("start", "running")
    state.define_transition("start", "stopped")

    assert state.resolve_target("start") == "running"


def test_removed_transition_can_be_redefined():
    state = State("ready")
    state.define_transition("start", "running")
    state.remove_transition("start")
    assert state.resolve_target("start") is None

    state.define_transition("start", "stopped")
    assert state.resolve_target("start") == "stopped"


def test_remove_unknown_transition_is_noop():
    state = State("ready")
    state.remove_transition("missing")
    assert state.actions == ()


def test_resolve_unknown_action_returns_none():
    assert State("ready").resolve_target("foo") is None


def test_empty_lifecycle_names_are_treated_as_absent():
    state = State("ready", entering="", exiting=None, changed="ready/changed")

    assert state.entering is None
    assert state.exiting is None
    assert state.changed == "ready/changed"


def test_actions_lists_defined_transitions():
    state = State("running")
    state.define_transition("split", "paused")
    state.define_transition("stop", "stopped")

    assert set(state.actions) == {"split", "stop"}


@pytest.mark.parametrize("name", ["", None])
def test_state_requires_a_name(name):
    with pytest.raises(InvalidStateError):
        State(name)


def test_state_name_is_read_only():
    state = State("ready")
    with pytest.raises(AttributeError):
        state.name = "other"
