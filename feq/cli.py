#!/usr/bin/env python3
"""
CLI entrypoint for the feq project.

Usage examples:
  python -m feq watch . --exclude "*.tmp" --log events.jsonl
  python -m feq replay recorded_events.jsonl --json
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from .config import ConfigError
from .events import FileEvent
from .logger import read_log
from .logging_config import disable_debug_log, enable_debug_log
from .settings import build_settings
from .watch import replay, watch

logger = logging.getLogger(__name__)


def watch_command(args: Any) -> int:
    """
    Watch a directory and print normalized events as they settle.
    Settings come from defaults <- config <- CLI.
    """
    try:
        settings = build_settings(args, args.config)
    except ConfigError as exc:
        print(f"ERROR: {exc}")
        return 2

    target = Path(settings["target"])
    if not target.is_dir():
        print(f"ERROR: Target directory not found: {target}")
        return 2

    watch(
        target,
        exclude=settings["exclude"],
        log_path=Path(settings["log"]) if settings["log"] else None,
        drain_interval=settings["drain_interval"],
        use_polling=settings["polling"],
    )
    return 0


def replay_command(args: Any) -> int:
    """
    Aggregate a recorded stream of raw events (JSON lines with kind, path
    and optional old_path) and print what a consumer would have received.
    """
    source = Path(args.events)
    if not source.exists():
        print(f"ERROR: Events file not found: {source}")
        return 2

    raw: List[FileEvent] = []
    try:
        for lineno, record in read_log(source):
            try:
                raw.append(FileEvent.from_dict(record))
            except ValueError as exc:
                raise ValueError(f"line {lineno}: {exc}") from exc
    except ValueError as exc:
        print(f"ERROR: {source}: {exc}")
        return 2

    result = replay(raw)
    logger.info("Replayed %d raw event(s) into %d", len(raw), len(result))

    for event in result:
        if args.json:
            print(json.dumps(event.to_dict()))
        else:
            print(str(event))
    if not args.json:
        print(f"\n{len(raw)} raw event(s) -> {len(result)} normalized")
    return 0


def build_cli() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="feq", description="Filesystem event queue")
    parser.add_argument("--debug-log", help="Also write diagnostics to this rotating log file", default=None)
    parser.add_argument("--log-level", help="Level for --debug-log (DEBUG, INFO, ...)", default="DEBUG")
    sub = parser.add_subparsers(dest="command", required=True)

    # watch subcommand
    p_watch = sub.add_parser("watch", help="Watch a directory and print normalized events")
    p_watch.add_argument("target", help="Directory to watch")
    p_watch.add_argument("--config", help="Path to YAML config file", default=None)
    p_watch.add_argument("--log", help="Path to JSONL log file", default=None)
    p_watch.add_argument(
        "--exclude",
        nargs="*",
        action="append",
        help="Exclude patterns (can be passed multiple times)",
        default=None,
    )
    p_watch.add_argument("--interval", type=float, help="Seconds between queue drains", default=None)
    p_watch.add_argument("--polling", action="store_true", help="Use the polling observer")

    # replay subcommand
    p_replay = sub.add_parser("replay", help="Aggregate a recorded JSONL stream of raw events")
    p_replay.add_argument("events", help="JSONL file, one raw event per line")
    p_replay.add_argument("--json", action="store_true", help="Print normalized events as JSON lines")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_cli()
    args = parser.parse_args(argv)

    debug_handler = enable_debug_log(args.debug_log, args.log_level) if args.debug_log else None
    try:
        if args.command == "watch":
            return watch_command(args)
        if args.command == "replay":
            return replay_command(args)
        parser.print_help()
        return 1
    finally:
        if debug_handler is not None:
            disable_debug_log(debug_handler)


if __name__ == "__main__":
    raise SystemExit(main())
