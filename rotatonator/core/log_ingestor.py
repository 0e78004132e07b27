"""
Log ingestor - tails the EQ log file and dispatches rotation events.
"""

from __future__ import annotations

import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

from PyQt6.QtCore import QFileSystemWatcher, QObject, QTimer

from .data import CastEvent, RosterConfig, RosterReplaced
from .log_parser import LogParser, roster_from_import
from .signals import Signals

logger = logging.getLogger(__name__)

RotationEvent = Union[CastEvent, RosterReplaced]


class LogIngestor(QObject):
    """
    Incrementally tails an append-only EQ log.

    Growth notifications come from a QFileSystemWatcher plus a poll timer
    (EQ does not always flush in a way the OS reports). Every notification
    drains all complete lines, so a burst of notifications collapses into
    one read. Events are handed to callbacks in file order, one line at a
    time, so a roster import applied by a callback is visible to the very
    next cast line.

    Lives on the thread that owns the rotation engine; nothing else touches
    the read cursor.
    """

    def __init__(
        self,
        log_file: Path,
        roster: RosterConfig,
        signals: Signals,
        poll_interval_ms: int = 100,
        clock: Callable[[], datetime] = datetime.now,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.log_file = Path(log_file)
        self._roster = roster
        self._signals = signals
        self._poll_interval_ms = poll_interval_ms
        self._clock = clock
        self._parser = LogParser(roster)

        self._handle: Optional[BinaryIO] = None
        self._position = 0
        self._watcher: Optional[QFileSystemWatcher] = None
        self._poll_timer: Optional[QTimer] = None

        self._event_callbacks: list[Callable[[RotationEvent], None]] = []

    @property
    def parser(self) -> LogParser:
        """Access the log parser."""
        return self._parser

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def position(self) -> int:
        """Byte offset just past the last consumed line."""
        return self._position

    def add_event_callback(self, callback: Callable[[RotationEvent], None]) -> None:
        """Add a callback to be called for each decoded event."""
        self._event_callbacks.append(callback)

    def remove_event_callback(self, callback: Callable[[RotationEvent], None]) -> None:
        """Remove an event callback."""
        if callback in self._event_callbacks:
            self._event_callbacks.remove(callback)

    # =========================================================================
    # START / STOP
    # =========================================================================

    def start(self) -> None:
        """Open the log at its current end and start listening for growth."""
        if self._handle is not None:
            return
        if not self.log_file.exists():
            raise FileNotFoundError(f"Log not found: {self.log_file}")

        handle = open(self.log_file, "rb")
        # Seek to end, history is never replayed
        handle.seek(0, os.SEEK_END)
        self._position = handle.tell()
        self._handle = handle

        self._watcher = QFileSystemWatcher([str(self.log_file)], self)
        self._watcher.fileChanged.connect(self._on_file_changed)

        if self._poll_interval_ms > 0:
            self._poll_timer = QTimer(self)
            self._poll_timer.timeout.connect(self._on_file_changed)
            self._poll_timer.start(self._poll_interval_ms)

        logger.info("Watching %s from byte %d", self.log_file, self._position)
        self._signals.log_message.emit(f"Watching: {self.log_file.name}")

    def stop(self) -> None:
        """Detach from growth notifications, then release the file handle."""
        if self._watcher is not None:
            self._watcher.fileChanged.disconnect(self._on_file_changed)
            if self._watcher.files():
                self._watcher.removePaths(self._watcher.files())
            self._watcher.deleteLater()
            self._watcher = None

        if self._poll_timer is not None:
            self._poll_timer.stop()
            self._poll_timer.timeout.disconnect(self._on_file_changed)
            self._poll_timer.deleteLater()
            self._poll_timer = None

        if self._handle is not None:
            self._handle.close()
            self._handle = None
            logger.info("Stopped watching %s", self.log_file)

    # =========================================================================
    # READING
    # =========================================================================

    def _on_file_changed(self, _path: str = "") -> None:
        self.read_available()

    def read_available(self) -> list[RotationEvent]:
        """
        Consume every complete line appended since the last read.

        Returns the events dispatched, in file order. A trailing line without
        its newline is left for a later call. Any file access problem is fatal
        for this session: the ingestor reports it and stops itself.
        """
        if self._handle is None:
            return []

        try:
            size = os.stat(self.log_file).st_size
            if size < self._position:
                raise OSError(f"Log shrank from {self._position} to {size} bytes")
            if size == self._position:
                return []
            lines = self._read_complete_lines()
        except OSError as e:
            self._fail(str(e))
            return []

        events = []
        for line in lines:
            if self._handle is None:
                break  # A callback stopped us
            event = self._process_line(line)
            if event is None:
                continue
            events.append(event)
            self._dispatch(event)
        return events

    def _read_complete_lines(self) -> list[str]:
        self._handle.seek(self._position)
        lines = []
        while True:
            raw = self._handle.readline()
            if not raw:
                break
            if not raw.endswith(b"\n"):
                break  # Still being written
            self._position += len(raw)
            lines.append(raw.decode("latin-1").rstrip("\r\n"))
        return lines

    def _process_line(self, line: str) -> Optional[RotationEvent]:
        """Decode a single log line. Imports are checked first."""
        if import_match := self._parser.match_roster_import(line):
            if imported := roster_from_import(import_match):
                return imported
            logger.info("Ignoring roster import without usable healers or delay: %s", line)
            return None

        entry = self._parser.parse_line(line)
        if not entry:
            return None

        marker = self._parser.parse_cast_marker(entry)
        if not marker:
            return None

        slot, target = marker
        healer = self._roster.healer_at(slot)
        if healer is None:
            logger.debug("Dropping cast for slot %d, roster has %d healers", slot, self._roster.size)
            return None

        is_player = self._roster.has_player and healer.lower() == self._roster.player_name.lower()
        return CastEvent(
            healer=healer,
            cast_time=self._clock(),
            target=target,
            is_player=is_player,
        )

    def _dispatch(self, event: RotationEvent) -> None:
        for callback in list(self._event_callbacks):
            try:
                callback(event)
            except Exception:
                logger.exception("Event callback error")

    def _fail(self, reason: str) -> None:
        logger.error("Log ingestion failed for %s: %s", self.log_file, reason)
        self._signals.log_message.emit(f"Watcher error: {reason}")
        self._signals.status_changed.emit(f"Error: {reason}")
        self._signals.ingestion_failed.emit(reason)
        self.stop()


# =============================================================================
# LOG DISCOVERY
# =============================================================================


LOG_NAME_PATTERN = re.compile(r"^eqlog_([^_]+)_", re.IGNORECASE)


def character_from_log(path: Path) -> Optional[str]:
    """Character name from an ``eqlog_<Name>_<server>.txt`` file name."""
    match = LOG_NAME_PATTERN.match(Path(path).name)
    return match.group(1) if match else None


def discover_logs(log_dir: Path, server: Optional[str] = None) -> list[tuple[str, Path, datetime]]:
    """
    Discover available character log files.

    Returns list of (character_name, log_path, last_modified) sorted by most recent.
    """
    if not log_dir.exists():
        return []

    pattern = f"eqlog_*_{server}.txt" if server else "eqlog_*.txt"
    logs = []
    for path in log_dir.glob(pattern):
        name = character_from_log(path)
        if name:
            try:
                mtime = datetime.fromtimestamp(path.stat().st_mtime)
                logs.append((name, path, mtime))
            except OSError:
                continue

    return sorted(logs, key=lambda x: x[2], reverse=True)
