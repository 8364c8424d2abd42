"""Parse graph descriptions from XML, YAML, JSON or plain mappings.

XML follows the ``<fsm>`` schema::

    <fsm initial="StopWatch/states/ready">
        <state name="StopWatch/states/ready" entering="resetDisplay">
            <transition action="StopWatch/actions/start" target="StopWatch/states/running"/>
        </state>
    </fsm>

YAML and JSON documents use the same shape as a mapping::

    initial: StopWatch/states/ready
    states:
      - name: StopWatch/states/ready
        entering: resetDisplay
        transitions:
          - {action: StopWatch/actions/start, target: StopWatch/states/running}

``transitions`` may also be given as an ``{action: target}`` mapping.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, List, Mapping, Optional

from notefsm.config import load_structured_file
from notefsm.infra.exceptions import GraphDescriptionError

from .injector import GraphDescription, StateSpec, TransitionSpec

_LIFECYCLE_KEYS = ("entering", "exiting", "changed")


def load_graph(path: Path | str) -> GraphDescription:
    """Load a graph description, choosing the parser from the file suffix."""
    path = path if isinstance(path, Path) else Path(path)
    if path.suffix.lower() == ".xml":
        if not path.exists():
            raise FileNotFoundError(f"Graph file not found at {path}")
        return parse_graph_xml(path.read_text(encoding="utf-8"))
    return graph_from_mapping(load_structured_file(path))


def parse_graph_xml(text: str) -> GraphDescription:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise GraphDescriptionError(f"Invalid graph XML: {exc}") from exc
    if root.tag != "fsm":
        raise GraphDescriptionError(f"Expected <fsm> root element, found <{root.tag}>")

    states: List[StateSpec] = []
    for state_el in root.findall("state"):
        transitions = []
        for trans_el in state_el.findall("transition"):
            transitions.append(
                TransitionSpec(
                    action=_required(trans_el.get("action"), "transition action"),
                    target=_required(trans_el.get("target"), "transition target"),
                )
            )
        states.append(
            StateSpec(
                name=_required(state_el.get("name"), "state name"),
                entering=state_el.get("entering") or None,
                exiting=state_el.get("exiting") or None,
                changed=state_el.get("changed") or None,
                transitions=tuple(transitions),
            )
        )
    return GraphDescription(initial=root.get("initial", ""), states=tuple(states))


def graph_from_mapping(raw: Any) -> GraphDescription:
    if not isinstance(raw, Mapping):
        raise GraphDescriptionError("Graph description must be a mapping")
    raw_states = raw.get("states") or []
    if not isinstance(raw_states, list):
        raise GraphDescriptionError("'states' must be a list of state descriptions")
    states = tuple(_state_from_mapping(item) for item in raw_states)
    return GraphDescription(initial=str(raw.get("initial") or ""), states=states)


def _state_from_mapping(raw: Any) -> StateSpec:
    if not isinstance(raw, Mapping):
        raise GraphDescriptionError("Each state description must be a mapping")
    name = _required(raw.get("name"), "state name")
    lifecycle = {key: _optional_str(raw.get(key)) for key in _LIFECYCLE_KEYS}

    raw_transitions = raw.get("transitions") or []
    if isinstance(raw_transitions, Mapping):
        pairs = list(raw_transitions.items())
    elif isinstance(raw_transitions, list):
        pairs = []
        for item in raw_transitions:
            if not isinstance(item, Mapping):
                raise GraphDescriptionError(f"Transition in state '{name}' must be a mapping")
            pairs.append((item.get("action"), item.get("target")))
    else:
        raise GraphDescriptionError(f"'transitions' of state '{name}' must be a list or mapping")

    transitions = tuple(
        TransitionSpec(
            action=_required(action, "transition action"),
            target=_required(target, "transition target"),
        )
        for action, target in pairs
    )
    return StateSpec(name=name, transitions=transitions, **lifecycle)


def _required(value: Any, what: str) -> str:
    if value is None or value == "":
        raise GraphDescriptionError(f"Missing {what}")
    return str(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)
