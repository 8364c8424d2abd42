"""Shared fixtures for the notefsm test-suite."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from notefsm.services import CHANGED, EventBus, Notification
from notefsm.state_machine import State, StateMachine

EXAMPLES_DIR = Path(__file__).resolve().parent.parent / "examples"


class Recorder:
    """Collects every notification delivered for the names it watches."""

    def __init__(self) -> None:
        self.notes: List[Notification] = []

    def __call__(self, note: Notification) -> None:
        self.notes.append(note)

    @property
    def names(self) -> List[str]:
        return [note.name for note in self.notes]

    def watch(self, bus: EventBus, *names: str) -> "Recorder":
        for name in names:
            bus.subscribe(name, self)
        return self

    def clear(self) -> None:
        self.notes.clear()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def examples_dir() -> Path:
    return EXAMPLES_DIR


@pytest.fixture
def two_states(bus: EventBus) -> StateMachine:
    """A --go--> B --back--> A, every lifecycle notification configured, not yet active."""
    a = State("A", entering="A/entering", exiting="A/exiting", changed="A/changed")
    b = State("B", entering="B/entering", exiting="B/exiting", changed="B/changed")
    a.define_transition("go", "B")
    b.define_transition("back", "A")
    machine = StateMachine(bus=bus)
    machine.register_state(a, initial=True)
    machine.register_state(b)
    return machine


@pytest.fixture
def lifecycle(bus: EventBus, recorder: Recorder) -> Recorder:
    """Recorder subscribed to every notification of the ``two_states`` machine."""
    return recorder.watch(
        bus,
        "A/entering",
        "A/exiting",
        "A/changed",
        "B/entering",
        "B/exiting",
        "B/changed",
        CHANGED,
    )
