"""Configuration package for the notefsm application."""

from .loader import load_config, load_structured_file
from .models import Config, LoggingConfig, MachineConfig

__all__ = [
    "Config",
    "LoggingConfig",
    "MachineConfig",
    "load_config",
    "load_structured_file",
]
