"""Command-line driver: build a state machine from a graph file and feed it actions."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence, TextIO

from notefsm.config import Config, load_config
from notefsm.infra import FsmError, configure_logging, install_exception_hook
from notefsm.services import ACTION, CHANGED, EventBus, Notification
from notefsm.state_machine import FSMInjector, StateMachine, load_graph

logger = logging.getLogger("notefsm.main")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="notefsm",
        description="Drive a declaratively configured state machine from the command line.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a YAML/JSON application config file.",
    )
    parser.add_argument(
        "--graph",
        type=Path,
        default=None,
        help="Graph description (.xml, .yaml, .yml or .json); overrides machine.graph_path.",
    )
    parser.add_argument(
        "--action",
        dest="actions",
        action="append",
        default=None,
        metavar="NAME",
        help="Action to send after activation; repeat to send several in order.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level.",
    )
    return parser.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> Config:
    config = load_config(args.config) if args.config else Config()
    machine = config.machine
    if args.graph is not None:
        machine = replace(machine, graph_path=args.graph)
    if args.actions:
        machine = replace(machine, actions=tuple(args.actions))
    logging_config = config.logging
    if args.log_level:
        logging_config = replace(logging_config, level=args.log_level)
    return replace(config, machine=machine, logging=logging_config)


def run(config: Config, out: Optional[TextIO] = None) -> StateMachine:
    """Build, register and drive the machine described by ``config``."""
    if out is None:
        out = sys.stdout

    if config.machine.graph_path is None:
        raise ValueError("No graph description given; use --graph or machine.graph_path.")

    description = load_graph(config.machine.graph_path)
    injector = FSMInjector(description, history_size=config.machine.history_size)

    bus = EventBus()

    def _print_change(note: Notification) -> None:
        print(f"-> {note.type}", file=out)

    bus.subscribe(CHANGED, _print_change)
    machine = injector.inject(bus)

    for action in config.machine.actions:
        logger.info("Sending action %s", action)
        bus.send_notification(ACTION, type=action)

    current = machine.current.name if machine.current else None
    print(f"current: {current}", file=out)
    return machine


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = _resolve_config(args)
    except (FileNotFoundError, ValueError, TypeError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    configure_logging(config.logging)
    install_exception_hook()

    try:
        run(config)
    except (FsmError, FileNotFoundError, ValueError) as exc:
        logger.error("State machine failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
