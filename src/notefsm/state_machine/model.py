"""Data structures representing the state machine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from notefsm.infra.exceptions import InvalidStateError


class State:
    """A named node with optional lifecycle notifications and a transition map.

    ``entering``, ``exiting`` and ``changed`` are notification names sent by the
    machine during a transition; ``None`` or an empty string sends nothing.
    """

    __slots__ = ("_name", "_entering", "_exiting", "_changed", "_transitions")

    def __init__(
        self,
        name: str,
        entering: Optional[str] = None,
        exiting: Optional[str] = None,
        changed: Optional[str] = None,
    ) -> None:
        if not isinstance(name, str) or not name:
            raise InvalidStateError(f"State name must be a non-empty string, got {name!r}")
        self._name = name
        self._entering = entering or None
        self._exiting = exiting or None
        self._changed = changed or None
        self._transitions: Dict[str, str] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def entering(self) -> Optional[str]:
        return self._entering

    @property
    def exiting(self) -> Optional[str]:
        return self._exiting

    @property
    def changed(self) -> Optional[str]:
        return self._changed

    @property
    def actions(self) -> tuple[str, ...]:
        """Return the action names this state reacts to."""
        return tuple(self._transitions)

    def define_transition(self, action: str, target: str) -> None:
        """Map ``action`` to ``target``; an action that is already mapped keeps its target."""
        if self.resolve_target(action) is not None:
            return
        self._transitions[action] = target

    def remove_transition(self, action: str) -> None:
        self._transitions.pop(action, None)

    def resolve_target(self, action: str) -> Optional[str]:
        """Return the target state name for ``action``."""
        return self._transitions.get(action)

    def __repr__(self) -> str:
        return f"State({self._name!r})"


class TransitionOutcome(Enum):
    """How an attempted transition ended."""

    COMPLETED = "completed"
    CANCELED_ON_EXIT = "canceled_on_exit"
    CANCELED_ON_ENTER = "canceled_on_enter"


@dataclass(frozen=True)
class TransitionResult:
    """Result of executing a transition."""

    previous_state: Optional[str]
    next_state: str
    action: Optional[str]
    outcome: TransitionOutcome
    payload: Any = None

    @property
    def committed(self) -> bool:
        """Return True if the machine moved to ``next_state``."""
        return self.outcome is TransitionOutcome.COMPLETED

    @property
    def canceled(self) -> bool:
        return not self.committed
