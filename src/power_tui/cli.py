"""Command line entry point for power-tui."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from textual.logging import TextualHandler

from .events import ChannelClosed
from .persistence import AppConfig, load_config, parse_interval, save_config
from .powerlib.sysfs import CollectorError
from .units import Units
from .views import NoDevicesFound

LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
MAX_VERBOSITY = 5


def parse_delay(raw: str) -> float:
    try:
        return parse_interval(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def parse_units(raw: str) -> Units:
    try:
        return Units.parse(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="power-tui",
        description="Interactive battery viewer. Left/Right switch tabs; q, Esc or Ctrl+C quit.",
    )
    parser.add_argument(
        "-d",
        "--delay",
        type=parse_delay,
        default=None,
        metavar="SECONDS",
        help="delay between updates, in seconds (default: 1)",
    )
    parser.add_argument(
        "-u",
        "--units",
        type=parse_units,
        default=None,
        metavar="{human,si}",
        help="measurement units displayed (default: human)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="verbosity level, may be repeated up to 5 times (-vvvvv)",
    )
    parser.add_argument("--config", type=Path, default=None, help="path to the YAML config file")
    parser.add_argument("--log-file", type=Path, default=None, help="write the log to this file")
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="write the effective configuration to the config file and exit",
    )
    return parser


def verbosity_level(verbosity: int) -> int:
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(verbosity: int, log_file: Path | None = None) -> None:
    """Route the root logger to *log_file*, or to Textual's log sink."""

    handler: logging.Handler
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = TextualHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=verbosity_level(verbosity), handlers=[handler], force=True)


def resolve_config(args: argparse.Namespace) -> AppConfig:
    """Load the config file and apply command line overrides."""

    config = load_config(args.config)
    if args.delay is not None:
        config.tick_interval = args.delay
    if args.units is not None:
        config.units = args.units
    return config


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose > MAX_VERBOSITY:
        parser.error(f"-v may be given at most {MAX_VERBOSITY} times")
    configure_logging(args.verbose, args.log_file)

    try:
        config = resolve_config(args)
    except (OSError, ValueError) as exc:
        print(f"power-tui: invalid configuration: {exc}", file=sys.stderr)
        return 2

    if args.save_config:
        path = save_config(config, args.config)
        print(f"Configuration written to {path}")
        return 0

    from .app import run

    try:
        run(config)
    except (NoDevicesFound, CollectorError, ChannelClosed) as exc:
        LOGGER.error("Exiting: %s", exc)
        print(f"power-tui: {exc}", file=sys.stderr)
        return 1
    return 0


__all__ = ["build_parser", "configure_logging", "main", "resolve_config"]
