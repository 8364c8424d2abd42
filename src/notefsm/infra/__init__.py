"""Infrastructure helpers: logging setup and error handling."""

from .exceptions import (
    FsmError,
    GraphDescriptionError,
    InvalidStateError,
    UnresolvedTargetError,
    install_exception_hook,
)
from .logging import configure_logging

__all__ = [
    "FsmError",
    "GraphDescriptionError",
    "InvalidStateError",
    "UnresolvedTargetError",
    "configure_logging",
    "install_exception_hook",
]
