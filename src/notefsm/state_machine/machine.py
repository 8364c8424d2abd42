"""Core state-machine implementation."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Deque, Iterable, Mapping, Optional, Sequence

import statemachine

from notefsm.infra.exceptions import FsmError, InvalidStateError, UnresolvedTargetError
from notefsm.services import ACTION, CANCEL, CHANGED, EventBus, Notification

from .model import State, TransitionOutcome, TransitionResult

logger = logging.getLogger("notefsm.state_machine")


class EngineLifecycle(statemachine.StateMachine):
    """Inert until the machine first commits to its initial state."""

    inert = statemachine.State("Inert", initial=True)
    active = statemachine.State("Active", final=True)

    activate = inert.to(active)

    def __init__(self, owner_name: str) -> None:
        self.owner_name = owner_name
        super().__init__()

    def on_enter_active(self) -> None:
        logger.info("%s is now active", self.owner_name)


@dataclass
class _Transition:
    """Bookkeeping for the transition in flight; carries its own cancel flag."""

    target: State
    payload: Any
    action: Optional[str]
    canceled: bool = False


class StateMachine:
    """Finite state machine driven by ACTION notifications.

    States are registered up front (directly or through ``FSMInjector``), then
    ``activate`` moves the machine into its initial state. Each transition sends
    the exiting notification of the current state, the entering notification of
    the target, and, once committed, the target's changed notification followed
    by a machine-level ``CHANGED`` notification. A listener may send ``CANCEL``
    while the exiting or entering notification is being delivered to veto the
    transition.

    Actions that arrive while a transition is in flight are queued and run,
    in order, once the current transition has finished. A configuration fault
    in a queued action is logged and the rest of the queue still runs.
    """

    NAME = "StateMachine"

    def __init__(self, bus: Optional[EventBus] = None, history_size: int = 64) -> None:
        self._bus = bus
        self._states: dict[str, State] = {}
        self._initial: Optional[State] = None
        self._current: Optional[State] = None
        self._in_flight: Optional[_Transition] = None
        self._pending: Deque[tuple[Optional[str], Any]] = deque()
        self._history: Deque[TransitionResult] = deque(maxlen=history_size)
        self._lifecycle = EngineLifecycle(self.NAME)

    # Registry --------------------------------------------------------------

    @property
    def states(self) -> Mapping[str, State]:
        return MappingProxyType(self._states)

    @property
    def state_names(self) -> tuple[str, ...]:
        return tuple(self._states)

    @property
    def initial(self) -> Optional[State]:
        return self._initial

    @property
    def current(self) -> Optional[State]:
        return self._current

    @property
    def canceled(self) -> bool:
        """Return True if the transition in flight has been vetoed."""
        return self._in_flight is not None and self._in_flight.canceled

    @property
    def is_active(self) -> bool:
        return self._lifecycle.current_state.id == "active"

    @property
    def bus(self) -> Optional[EventBus]:
        return self._bus

    def __contains__(self, name: object) -> bool:
        return name in self._states

    def get_state(self, name: str) -> Optional[State]:
        return self._states.get(name)

    def register_state(self, state: State, initial: bool = False) -> None:
        """Register ``state``; a name that is already registered keeps its original state."""
        if state is None:
            raise InvalidStateError("Cannot register an absent state")
        if state.name in self._states:
            logger.debug("State %s already registered; ignoring", state.name)
            return
        self._states[state.name] = state
        if initial:
            if self._initial is not None:
                logger.warning(
                    "Initial state %s replaced by %s", self._initial.name, state.name
                )
            self._initial = state
        logger.debug("Registered state %s (initial=%s)", state.name, initial)

    def remove_state(self, name: str) -> None:
        """Unregister ``name``; a current state that is removed stays current."""
        state = self._states.pop(name, None)
        if state is None:
            return
        if state is self._initial:
            self._initial = None
        if state is self._current:
            logger.warning("Removed state %s while it is the current state", name)

    def history(self) -> Iterable[TransitionResult]:
        """Return an iterable snapshot of the transition history."""
        return tuple(self._history)

    # Driving ---------------------------------------------------------------

    def activate(self) -> Optional[TransitionResult]:
        """Transition into the initial state, if one is designated."""
        if self.is_active:
            logger.warning("%s already active; ignoring activation", self.NAME)
            return None
        if self._initial is None:
            logger.info("No initial state designated; %s stays inert", self.NAME)
            return None
        if self._in_flight is not None:
            logger.warning("Activation requested during a transition; ignoring")
            return None
        initial = self._initial

        def _enter_initial() -> Optional[TransitionResult]:
            result = self._transition_to(initial, None, None)
            # A vetoed initial entry leaves the machine inert so it can be activated again.
            if result is not None and result.committed:
                self._lifecycle.activate()
            return result

        return self._run_to_completion(_enter_initial)

    def on_action(self, action: Optional[str], payload: Any = None) -> Optional[TransitionResult]:
        """Run the transition mapped to ``action`` in the current state.

        Returns None when the action is unknown in the current state or when it
        was queued behind the transition in flight.
        """
        if self._in_flight is not None:
            logger.debug("Queueing action %s until the current transition completes", action)
            self._pending.append((action, payload))
            return None
        return self._run_to_completion(lambda: self._dispatch_action(action, payload))

    def on_cancel(self) -> None:
        if self._in_flight is None:
            logger.debug("Cancel received with no transition in flight; ignored")
            return
        self._in_flight.canceled = True

    # Bus listener ----------------------------------------------------------

    def notification_interests(self) -> Sequence[str]:
        return (ACTION, CANCEL)

    def handle_notification(self, notification: Notification) -> None:
        if notification.name == ACTION:
            self.on_action(notification.type, notification.body)
        elif notification.name == CANCEL:
            self.on_cancel()

    def on_register(self, bus: EventBus) -> None:
        self._bus = bus
        self.activate()

    def on_remove(self, bus: EventBus) -> None:
        if self._bus is bus:
            self._bus = None

    # Internals -------------------------------------------------------------

    def _run_to_completion(
        self, first: Callable[[], Optional[TransitionResult]]
    ) -> Optional[TransitionResult]:
        """Run ``first``, then every action queued meanwhile, and return ``first``'s result.

        A configuration fault in a queued action is logged and does not stop the
        remaining queue; the caller's own transition already completed. Any other
        exception drops the queue and propagates.
        """
        try:
            result = first()
            while self._pending:
                action, payload = self._pending.popleft()
                try:
                    self._dispatch_action(action, payload)
                except FsmError:
                    logger.exception("Queued action %s failed", action)
        except Exception:
            self._pending.clear()
            raise
        return result

    def _dispatch_action(self, action: Optional[str], payload: Any) -> Optional[TransitionResult]:
        current = self._current
        if current is None:
            logger.debug("Action %s ignored; %s has not started", action, self.NAME)
            return None
        target_name = current.resolve_target(action)
        if target_name is None:
            logger.debug("Action %s not defined for state %s", action, current.name)
            return None
        target = self._states.get(target_name)
        if target is None:
            raise UnresolvedTargetError(current.name, action, target_name)
        return self._transition_to(target, payload, action)

    def _transition_to(
        self, next_state: Optional[State], payload: Any, action: Optional[str]
    ) -> Optional[TransitionResult]:
        if next_state is None:
            return None

        previous = self._current
        transition = _Transition(target=next_state, payload=payload, action=action)
        self._in_flight = transition
        try:
            if not self._exit_current(transition):
                return self._record(previous, transition, TransitionOutcome.CANCELED_ON_EXIT)
            if not self._enter_next(transition):
                return self._record(previous, transition, TransitionOutcome.CANCELED_ON_ENTER)

            self._current = next_state
            logger.info(
                "State changed: %s -> %s (action=%s)",
                previous.name if previous else None,
                next_state.name,
                action,
            )
            if next_state.changed:
                self._send(next_state.changed, payload)
            self._send(CHANGED, next_state, next_state.name)
            return self._record(previous, transition, TransitionOutcome.COMPLETED)
        finally:
            self._in_flight = None

    def _exit_current(self, transition: _Transition) -> bool:
        current = self._current
        if current is not None and current.exiting:
            logger.debug("Exiting %s towards %s", current.name, transition.target.name)
            self._send(current.exiting, transition.payload, transition.target.name)
        return self._checkpoint(transition, "exiting")

    def _enter_next(self, transition: _Transition) -> bool:
        target = transition.target
        if target.entering:
            logger.debug("Entering %s", target.name)
            self._send(target.entering, transition.payload)
        return self._checkpoint(transition, "entering")

    def _checkpoint(self, transition: _Transition, phase: str) -> bool:
        if not transition.canceled:
            return True
        transition.canceled = False
        logger.info(
            "Transition %s -> %s canceled while %s",
            self._current.name if self._current else None,
            transition.target.name,
            phase,
        )
        return False

    def _send(self, name: str, body: Any = None, type: Optional[str] = None) -> None:
        if self._bus is None:
            logger.debug("No bus attached; dropping notification %s", name)
            return
        self._bus.publish(name, body, type)

    def _record(
        self, previous: Optional[State], transition: _Transition, outcome: TransitionOutcome
    ) -> TransitionResult:
        result = TransitionResult(
            previous_state=previous.name if previous else None,
            next_state=transition.target.name,
            action=transition.action,
            outcome=outcome,
            payload=transition.payload,
        )
        self._history.append(result)
        return result
