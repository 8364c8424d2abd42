"""State machine package exports."""

from .graph_loader import graph_from_mapping, load_graph, parse_graph_xml
from .injector import FSMInjector, GraphDescription, StateSpec, TransitionSpec
from .machine import EngineLifecycle, StateMachine
from .model import State, TransitionOutcome, TransitionResult

__all__ = [
    "EngineLifecycle",
    "FSMInjector",
    "GraphDescription",
    "State",
    "StateMachine",
    "StateSpec",
    "TransitionOutcome",
    "TransitionResult",
    "TransitionSpec",
    "graph_from_mapping",
    "load_graph",
    "parse_graph_xml",
]
