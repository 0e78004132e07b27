#!/usr/bin/env python3
"""
Rotatonator - complete heal rotation tracker for EverQuest.

Watches the character's log for rotation chat traffic and tells the player
when it is their turn to cast. This is the headless console front end; a UI
connects to the same Signals hub.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QCoreApplication, QTimer

from .config import Config, LoggingConfig
from .core.data import CastDetected, RosterReplaced, TimingResult, TurnStarting, check_chain_interval
from .core.eq_utils import send_key
from .core.log_ingestor import character_from_log, discover_logs
from .core.signals import Signals
from .session import RotationSession

logger = logging.getLogger("rotatonator")


def setup_logging(level: int) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rotatonator - CH rotation tracker")
    parser.add_argument("log_file", nargs="?", type=Path, help="EQ log file (default: newest in log_dir)")
    parser.add_argument("--config", type=Path, help="Path to config.json")
    parser.add_argument("--player", help="Your character name (default: from log file name)")
    parser.add_argument("--healers", help="Comma separated healer order, overrides config")
    parser.add_argument("--interval", type=float, help="Chain interval in seconds")
    parser.add_argument("--prefix", help="Chain prefix used in CH macros")
    parser.add_argument("--auto-cast", metavar="KEY", help="Press KEY when it is your turn")
    parser.add_argument("--score", action="store_true", help="Score cast timing")
    parser.add_argument("--log", choices=sorted(LoggingConfig.LEVELS), help="Log level")
    return parser.parse_args(argv)


def resolve_log_file(args: argparse.Namespace, config: Config) -> Optional[Path]:
    if args.log_file:
        return args.log_file
    if config.paths.log_file:
        return config.paths.log_file
    logs = discover_logs(config.paths.log_dir, config.server)
    if not logs:
        return None
    return logs[0][1]


def connect_console(signals: Signals) -> None:
    """Print rotation notifications."""

    def on_cast(detected: CastDetected) -> None:
        target = f" on {detected.target}" if detected.target else ""
        who = " (you)" if detected.is_player_cast else ""
        print(f"CH: {detected.healer}{who}{target}")

    def on_roster(replaced: RosterReplaced) -> None:
        print(f"Chain: {', '.join(replaced.healers)} every {replaced.delay_seconds:g}s")

    def on_turn_starting(turn: TurnStarting) -> None:
        print(f"YOU'RE NEXT! ({turn.time_until_cast:.1f}s)")

    def on_scored(result: TimingResult) -> None:
        print(
            f"{result.healer}: {result.accuracy.value.upper()} ({result.time_difference:+.2f}s) "
            f"{result.points_awarded:+d} -> {result.total_score}"
        )

    signals.cast_detected.connect(on_cast)
    signals.roster_replaced.connect(on_roster)
    signals.turn_starting.connect(on_turn_starting)
    signals.turn_now.connect(lambda: print("CAST NOW!"))
    signals.scoring_result.connect(on_scored)
    signals.status_changed.connect(lambda text: logger.info("%s", text))


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Load config
    try:
        config = Config.load(args.config)
    except FileNotFoundError as e:
        if args.config:
            print(f"ERROR: {e}")
            return 1
        config = Config.from_dict({})
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    setup_logging(LoggingConfig.LEVELS[args.log] if args.log else config.logging.level_value)

    log_path = resolve_log_file(args, config)
    if log_path is None:
        print(f"ERROR: No log files found in {config.paths.log_dir}")
        return 1

    roster = config.roster()
    if args.healers:
        roster.healers = [h.strip() for h in args.healers.split(",") if h.strip()]
    if args.interval is not None:
        try:
            check_chain_interval(args.interval)
        except ValueError as e:
            print(f"ERROR: --interval: {e}")
            return 1
        roster.chain_interval = args.interval
    if args.prefix:
        roster.chain_prefix = args.prefix
    if args.auto_cast:
        roster.auto_cast = True
        roster.cast_hotkey = args.auto_cast
    roster.player_name = args.player or roster.player_name or character_from_log(log_path) or ""

    print(f"Player: {roster.player_name or '(observing)'}")
    print(f"Log: {log_path}")

    app = QCoreApplication(sys.argv[:1])

    signals = Signals()
    connect_console(signals)

    session = RotationSession(
        log_path,
        roster,
        signals,
        key_sender=send_key,
        scoring=args.score or config.scoring.enabled,
        poll_interval_ms=config.watcher.poll_interval_ms,
    )
    signals.ingestion_failed.connect(lambda _reason: app.exit(2))

    try:
        session.start()
    except OSError as e:
        print(f"ERROR: {e}")
        return 1

    # Handle SIGINT gracefully
    def handle_sigint(*_):
        print("\nShutting down...")
        session.stop()
        app.quit()

    signal.signal(signal.SIGINT, handle_sigint)

    # Timer to allow SIGINT to be processed
    sigint_timer = QTimer()
    sigint_timer.timeout.connect(lambda: None)
    sigint_timer.start(100)

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
