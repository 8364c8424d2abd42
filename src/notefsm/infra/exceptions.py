"""Error types and global exception handling for the application."""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger("notefsm.exceptions")


class FsmError(Exception):
    """Base class for state machine configuration errors."""


class InvalidStateError(FsmError, ValueError):
    """A state is missing or has no usable name."""


class UnresolvedTargetError(FsmError, LookupError):
    """A transition points at a state that is not registered."""

    def __init__(self, state: str, action: str, target: str) -> None:
        self.state = state
        self.action = action
        self.target = target
        super().__init__(
            f"State '{state}' maps action '{action}' to unregistered target '{target}'"
        )


class GraphDescriptionError(FsmError, ValueError):
    """A declarative graph description is malformed."""


def install_exception_hook() -> None:
    """Install global exception handlers for main thread and other threads."""

    hook = _ExceptionHook()
    hook.install()


@dataclass
class _ExceptionHook:
    """Logs uncaught errors at CRITICAL, then defers to the hooks it replaced."""

    _original_excepthook: Optional[Callable[..., None]] = None
    _original_thread_excepthook: Optional[Callable[..., None]] = None

    def install(self) -> None:
        self._original_excepthook = sys.excepthook
        sys.excepthook = self._handle_exception

        if hasattr(threading, "excepthook"):
            self._original_thread_excepthook = threading.excepthook
            threading.excepthook = self._handle_thread_exception  # type: ignore[assignment]

    def _handle_exception(self, exc_type, exc_value, exc_traceback) -> None:
        logger.critical(
            "Unhandled exception: %s",
            exc_value,
            exc_info=(exc_type, exc_value, exc_traceback),
        )
        if self._original_excepthook:
            self._original_excepthook(exc_type, exc_value, exc_traceback)

    def _handle_thread_exception(self, args: "threading.ExceptHookArgs") -> None:  # pragma: no cover
        logger.critical(
            "Unhandled thread exception in %s: %s",
            args.thread.name,
            args.exc_value,
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )
        if self._original_thread_excepthook:
            self._original_thread_excepthook(args)
