"""Synchronous publish/subscribe bus connecting the state machine to its host."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from .events import Notification

logger = logging.getLogger("notefsm.event_bus")

Subscriber = Callable[[Notification], None]


@runtime_checkable
class Listener(Protocol):
    """Object that declares its interests and handles matching notifications."""

    def notification_interests(self) -> Sequence[str]: ...

    def handle_notification(self, notification: Notification) -> None: ...


class EventBus:
    """Delivers notifications in-line to subscribers, in subscription order.

    Every subscriber runs inside :meth:`publish`, so a subscriber may publish
    further notifications before the original call returns. Exceptions raised
    by subscribers propagate to the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Subscriber]] = {}
        self._listeners: List[Listener] = []

    def subscribe(self, name: str, callback: Subscriber) -> None:
        callbacks = self._subscribers.setdefault(name, [])
        if callback in callbacks:
            logger.warning("Duplicate subscription ignored for %s", name)
            return
        callbacks.append(callback)
        logger.debug("Subscribed %r to %s", callback, name)

    def unsubscribe(self, name: str, callback: Subscriber) -> None:
        callbacks = self._subscribers.get(name)
        if not callbacks or callback not in callbacks:
            return
        callbacks.remove(callback)
        if not callbacks:
            del self._subscribers[name]

    def has_listener(self, name: str) -> bool:
        """Return True if anything is subscribed to ``name``."""
        return bool(self._subscribers.get(name))

    def publish(self, name: str, body: Any = None, type: Optional[str] = None) -> None:
        notification = Notification(name=name, body=body, type=type)
        callbacks = tuple(self._subscribers.get(name, ()))
        logger.debug("Publishing %s (type=%s) to %d subscriber(s)", name, type, len(callbacks))
        for callback in callbacks:
            callback(notification)

    send_notification = publish

    def register_listener(self, listener: Listener) -> None:
        """Subscribe a listener to its interests, then hand it the bus via ``on_register``."""
        if listener in self._listeners:
            logger.warning("Listener %r already registered", listener)
            return
        self._listeners.append(listener)
        for name in listener.notification_interests():
            self.subscribe(name, listener.handle_notification)
        on_register = getattr(listener, "on_register", None)
        if callable(on_register):
            on_register(self)

    def remove_listener(self, listener: Listener) -> None:
        if listener not in self._listeners:
            return
        self._listeners.remove(listener)
        for name in listener.notification_interests():
            self.unsubscribe(name, listener.handle_notification)
        on_remove = getattr(listener, "on_remove", None)
        if callable(on_remove):
            on_remove(self)
