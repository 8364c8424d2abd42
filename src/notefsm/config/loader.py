"""Configuration loader utilities."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import yaml

from .models import Config, LoggingConfig, MachineConfig


def _normalize_path(path: Path | str) -> Path:
    return path if isinstance(path, Path) else Path(path)


def load_structured_file(path: Path | str) -> Any:
    """Read a YAML or JSON document and return the decoded data."""

    path = _normalize_path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found at {path}")

    suffix = path.suffix.lower()
    with path.open("r", encoding="utf-8") as stream:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(stream)
        if suffix == ".json":
            return json.load(stream)
        raise ValueError(f"Unsupported config format: {suffix}")


def _load_raw_config(config_path: Path) -> Dict[str, Any]:
    raw = load_structured_file(config_path) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config root must be a mapping, got {type(raw).__name__}")
    return raw


def load_config(config_path: Path | str) -> Config:
    """Load configuration file and construct Config dataclass."""

    config_path = _normalize_path(config_path)
    raw = _load_raw_config(config_path)

    logging_raw = dict(raw.get("logging") or {})
    log_path = logging_raw.get("filepath")
    if log_path:
        logging_raw["filepath"] = (config_path.parent / log_path).resolve()
    logging = LoggingConfig(**logging_raw)

    machine_raw = dict(raw.get("machine") or {})
    # Graph files are resolved relative to the config file for predictable behaviour.
    graph_path = machine_raw.get("graph_path")
    if graph_path:
        machine_raw["graph_path"] = (config_path.parent / graph_path).resolve()
    actions = machine_raw.get("actions")
    if actions is not None:
        if isinstance(actions, str) or not isinstance(actions, (list, tuple)):
            raise ValueError("machine.actions must be a list of action names.")
        machine_raw["actions"] = tuple(str(action) for action in actions)
    machine = MachineConfig(**machine_raw)

    return Config(logging=logging, machine=machine)
