"""Graph construction through FSMInjector, including the stopwatch scenario."""

from __future__ import annotations

import pytest

from notefsm.infra import GraphDescriptionError
from notefsm.services import ACTION, CHANGED
from notefsm.state_machine import (
    FSMInjector,
    GraphDescription,
    StateSpec,
    TransitionSpec,
    load_graph,
)


def _stopwatch() -> GraphDescription:
    return GraphDescription(
        initial="ready",
        states=(
            StateSpec("ready", entering="ready/entering", transitions=(TransitionSpec("start", "running"),)),
            StateSpec(
                "running",
                exiting="running/exiting",
                transitions=(TransitionSpec("split", "paused"), TransitionSpec("stop", "stopped")),
            ),
            StateSpec(
                "paused",
                changed="paused/changed",
                transitions=(TransitionSpec("unsplit", "running"), TransitionSpec("stop", "stopped")),
            ),
            StateSpec("stopped", transitions=(TransitionSpec("reset", "ready"),)),
        ),
    )


def test_build_registers_states_in_order_without_activating():
    machine = FSMInjector(_stopwatch()).build()

    assert machine.state_names == ("ready", "running", "paused", "stopped")
    assert machine.initial.name == "ready"
    assert machine.current is None
    assert not machine.is_active


def test_build_copies_lifecycle_names_and_transitions():
    machine = FSMInjector(_stopwatch()).build()

    running = machine.get_state("running")
    assert running.exiting == "running/exiting"
    assert running.entering is None
    assert running.resolve_target("split") == "paused"
    assert running.resolve_target("stop") == "stopped"


def test_states_are_created_once():
    injector = FSMInjector(_stopwatch())

    assert injector.states is injector.states
    first = injector.build()
    second = injector.build()
    assert first.get_state("ready") is second.get_state("ready")
    assert first is not second


def test_duplicate_action_in_description_keeps_first():
    description = GraphDescription(
        initial="a",
        states=(
            StateSpec("a", transitions=(TransitionSpec("go", "b"), TransitionSpec("go", "c"))),
            StateSpec("b"),
            StateSpec("c"),
        ),
    )

    machine = FSMInjector(description).build(validate=True)

    assert machine.get_state("a").resolve_target("go") == "b"


def test_initial_matched_by_name_regardless_of_position():
    description = GraphDescription(
        initial="last",
        states=(StateSpec("first"), StateSpec("middle"), StateSpec("last")),
    )

    assert FSMInjector(description).build().initial.name == "last"


def test_stopwatch_scenario(bus, recorder):
    recorder.watch(bus, CHANGED)
    machine = FSMInjector(_stopwatch()).inject(bus)

    for action in ["start", "split", "unsplit", "stop", "reset"]:
        bus.publish(ACTION, type=action)

    assert [note.type for note in recorder.notes] == [
        "ready",
        "running",
        "paused",
        "running",
        "stopped",
        "ready",
    ]
    assert machine.current.name == "ready"


def test_stopwatch_ignores_unknown_action(bus, recorder):
    machine = FSMInjector(_stopwatch()).inject(bus)
    recorder.watch(bus, CHANGED, "ready/entering", "running/exiting", "paused/changed")

    bus.publish(ACTION, type="foo")

    assert machine.current.name == "ready"
    assert recorder.notes == []


def test_stopwatch_from_xml_file(bus, recorder, examples_dir):
    recorder.watch(bus, CHANGED)
    machine = FSMInjector(load_graph(examples_dir / "stopwatch.xml")).inject(bus)

    for action in ["start", "split", "unsplit", "stop", "reset"]:
        bus.publish(ACTION, type=f"StopWatch/actions/{action}")

    assert [note.type.rsplit("/", 1)[-1] for note in recorder.notes] == [
        "ready",
        "running",
        "paused",
        "running",
        "stopped",
        "ready",
    ]
    assert machine.current.name == "StopWatch/states/ready"


@pytest.mark.parametrize(
    "description, message",
    [
        (GraphDescription(initial="", states=(StateSpec("a"),)), "initial"),
        (GraphDescription(initial="zzz", states=(StateSpec("a"),)), "zzz"),
        (GraphDescription(initial="a", states=(StateSpec("a"), StateSpec("a"))), "more than once"),
        (GraphDescription(initial="a", states=(StateSpec(""),)), "without a name"),
        (
            GraphDescription(initial="a", states=(StateSpec("a", transitions=(TransitionSpec("go", "b"),)),)),
            "undefined target 'b'",
        ),
    ],
)
def test_validate_rejects_malformed_graphs(description, message):
    with pytest.raises(GraphDescriptionError, match=message):
        FSMInjector(description).validate()


def test_inject_validates_by_default(bus):
    description = GraphDescription(initial="missing", states=(StateSpec("a"),))

    with pytest.raises(GraphDescriptionError):
        FSMInjector(description).inject(bus)
    assert not bus.has_listener(ACTION)


def test_build_without_validation_allows_dangling_targets():
    description = GraphDescription(
        initial="a",
        states=(StateSpec("a", transitions=(TransitionSpec("go", "nowhere"),)),),
    )

    machine = FSMInjector(description).build()

    assert machine.get_state("a").resolve_target("go") == "nowhere"
