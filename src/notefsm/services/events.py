"""Notification definitions exchanged over the event bus."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

ACTION = "StateMachine/notes/action"
"""Triggers a transition; the action name travels in ``type``, the payload in ``body``."""

CANCEL = "StateMachine/notes/cancel"
"""Vetoes the transition in flight when sent while exiting or entering a state."""

CHANGED = "StateMachine/notes/changed"
"""Sent after every committed transition with the new State as ``body``."""


@dataclass(frozen=True)
class Notification:
    """A named message with an optional body and discriminator."""

    name: str
    body: Any = None
    type: Optional[str] = None
