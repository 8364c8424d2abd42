"""Build a populated StateMachine from a declarative graph description."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from notefsm.infra.exceptions import GraphDescriptionError
from notefsm.services import EventBus

from .machine import StateMachine
from .model import State

logger = logging.getLogger("notefsm.injector")


@dataclass(frozen=True)
class TransitionSpec:
    action: str
    target: str


@dataclass(frozen=True)
class StateSpec:
    """Description of one state and its outgoing transitions."""

    name: str
    entering: Optional[str] = None
    exiting: Optional[str] = None
    changed: Optional[str] = None
    transitions: Sequence[TransitionSpec] = ()


@dataclass(frozen=True)
class GraphDescription:
    """Root of a graph description: the initial state name and the ordered states."""

    initial: str
    states: Sequence[StateSpec] = field(default_factory=tuple)


class FSMInjector:
    """Creates a StateMachine from a ``GraphDescription`` and registers it with a bus.

    The states are created on first use and reused afterwards, so repeated
    builds from one injector register the same ``State`` objects.
    """

    def __init__(self, description: GraphDescription, history_size: int = 64) -> None:
        self.description = description
        self.history_size = history_size
        self._state_list: Optional[List[State]] = None

    @property
    def states(self) -> List[State]:
        if self._state_list is None:
            self._state_list = [self._create_state(spec) for spec in self.description.states]
        return self._state_list

    def is_initial(self, state_name: str) -> bool:
        return state_name == self.description.initial

    def validate(self) -> None:
        """Raise GraphDescriptionError if the description cannot form a usable graph."""
        description = self.description
        names: set[str] = set()
        for spec in description.states:
            if not spec.name:
                raise GraphDescriptionError("State description without a name")
            if spec.name in names:
                raise GraphDescriptionError(f"State '{spec.name}' is declared more than once")
            names.add(spec.name)

        if not description.initial:
            raise GraphDescriptionError("Graph description does not name an initial state")
        if description.initial not in names:
            raise GraphDescriptionError(f"Initial state '{description.initial}' is not declared")

        for spec in description.states:
            for transition in spec.transitions:
                if transition.target not in names:
                    raise GraphDescriptionError(
                        f"State '{spec.name}' references undefined target '{transition.target}' "
                        f"for action '{transition.action}'"
                    )

    def build(self, validate: bool = False) -> StateMachine:
        """Return a new, not yet activated StateMachine holding every described state."""
        if validate:
            self.validate()
        machine = StateMachine(history_size=self.history_size)
        for state in self.states:
            machine.register_state(state, self.is_initial(state.name))
        logger.info(
            "Built state machine with %d state(s); initial=%s",
            len(machine.state_names),
            machine.initial.name if machine.initial else None,
        )
        return machine

    def inject(self, bus: EventBus, validate: bool = True) -> StateMachine:
        """Build the machine and register it with ``bus``, which activates it."""
        machine = self.build(validate=validate)
        bus.register_listener(machine)
        return machine

    def _create_state(self, spec: StateSpec) -> State:
        state = State(spec.name, spec.entering, spec.exiting, spec.changed)
        for transition in spec.transitions:
            state.define_transition(transition.action, transition.target)
        return state
