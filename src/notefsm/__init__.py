"""Declaratively configured finite state machine driven by bus notifications."""

from __future__ import annotations

from .infra import FsmError, GraphDescriptionError, InvalidStateError, UnresolvedTargetError
from .services import ACTION, CANCEL, CHANGED, EventBus, Notification
from .state_machine import (
    FSMInjector,
    GraphDescription,
    State,
    StateMachine,
    StateSpec,
    TransitionOutcome,
    TransitionResult,
    TransitionSpec,
    load_graph,
)

__all__ = [
    "ACTION",
    "CANCEL",
    "CHANGED",
    "EventBus",
    "FSMInjector",
    "FsmError",
    "GraphDescription",
    "GraphDescriptionError",
    "InvalidStateError",
    "Notification",
    "State",
    "StateMachine",
    "StateSpec",
    "TransitionOutcome",
    "TransitionResult",
    "TransitionSpec",
    "UnresolvedTargetError",
    "load_graph",
]
