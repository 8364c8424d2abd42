"""Notification bus shared by the state machine and its host application."""

from .event_bus import EventBus, Listener, Subscriber
from .events import ACTION, CANCEL, CHANGED, Notification

__all__ = [
    "ACTION",
    "CANCEL",
    "CHANGED",
    "EventBus",
    "Listener",
    "Notification",
    "Subscriber",
]
