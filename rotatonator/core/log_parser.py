"""
Log parser for EQ chat lines carrying rotation traffic.

Recognises two line grammars inside ordinary chat:

- Cast markers, e.g. ``Healer1 tells the raid, 'D&D 333 CH - Tank - Healer1'``
- Roster imports, e.g. ``... 'Rotatonator set_chain: 111 Alice, 222 Bob, set_delay: 5'``
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from .data import MAX_CHAIN_INTERVAL, LogEntry, RosterConfig, RosterReplaced
from .positions import decode_position


class LogParser:
    """
    Parses EQ log lines into rotation events.

    Patterns depend on the chain prefix and keywords, which can change while
    running, so they are read from the roster on every call and compiled
    once per distinct value.
    """

    # Timestamp pattern for all log lines
    TIMESTAMP_PATTERN = re.compile(r"^\[(\w+ \w+ \d+ \d+:\d+:\d+ \d+)\] (.*)$")
    TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %Y"

    # One "<code> <name>" pair of a set_chain list
    CHAIN_SEGMENT = re.compile(r"^[0-9A-Za-z]+\s+(.+)$")

    def __init__(self, roster: RosterConfig):
        self._roster = roster
        self._cast_patterns: dict[tuple[str, str], re.Pattern[str]] = {}
        self._import_patterns: dict[str, re.Pattern[str]] = {}

    def parse_line(self, line: str) -> Optional[LogEntry]:
        """Parse a raw log line into a LogEntry."""
        match = self.TIMESTAMP_PATTERN.match(line.strip())
        if not match:
            return None
        try:
            timestamp = datetime.strptime(match.group(1), self.TIMESTAMP_FORMAT)
            return LogEntry(timestamp=timestamp, message=match.group(2).strip())
        except ValueError:
            return None

    # =========================================================================
    # CAST MARKERS
    # =========================================================================

    def cast_pattern(self) -> re.Pattern[str]:
        key = (self._roster.chain_prefix, self._roster.marker_keyword)
        pattern = self._cast_patterns.get(key)
        if pattern is None:
            prefix, marker = (re.escape(part) for part in key)
            # <speaker action>, '<prefix> <code> <marker>[ - <target> - ...]
            pattern = re.compile(
                rf"^.+?,\s+'{prefix}\s+(?P<code>([0-9A-Za-z])\2*)\s+{marker}\b"
                r"(?:\s*-\s*(?P<target>[^'\-]+?)\s*(?=-|'|$))?",
                re.IGNORECASE,
            )
            self._cast_patterns[key] = pattern
        return pattern

    def parse_cast_marker(self, entry: LogEntry) -> Optional[tuple[int, Optional[str]]]:
        """Parse a cast marker. Returns (slot, target) or None."""
        m = self.cast_pattern().match(entry.message)
        if not m:
            return None
        slot = decode_position(m.group("code"))
        if slot is None:
            return None
        target = m.group("target")
        return (slot, target.strip() if target else None)

    # =========================================================================
    # ROSTER IMPORTS
    # =========================================================================

    def import_pattern(self) -> re.Pattern[str]:
        keyword = self._roster.import_keyword
        pattern = self._import_patterns.get(keyword)
        if pattern is None:
            pattern = re.compile(
                rf"{re.escape(keyword)}\s+set_chain:\s*(?P<chain>.+?)\s*,\s*set_delay:\s*(?P<delay>\d+)",
                re.IGNORECASE,
            )
            self._import_patterns[keyword] = pattern
        return pattern

    def match_roster_import(self, line: str) -> Optional[re.Match[str]]:
        """Find the import keyword grammar anywhere in a raw line."""
        return self.import_pattern().search(line)

    def is_roster_import(self, line: str) -> bool:
        return self.match_roster_import(line) is not None

    def parse_roster_import(self, line: str) -> Optional[RosterReplaced]:
        """Parse a roster import anywhere in a raw line."""
        m = self.match_roster_import(line)
        return roster_from_import(m) if m else None


def roster_from_import(m: re.Match[str]) -> Optional[RosterReplaced]:
    """
    Build a roster import from a matched import line.

    Segments that are not ``<code> <name>`` are skipped individually.
    Returns None if no healer survives or the delay is outside the
    range a chain interval may take.
    """
    healers = parse_chain_segments(m.group("chain"))
    delay = int(m.group("delay"))
    if not healers or not 0 < delay <= MAX_CHAIN_INTERVAL:
        return None
    return RosterReplaced(healers=tuple(healers), delay_seconds=float(delay))


def parse_chain_segments(chain: str) -> list[str]:
    """Split ``"111 Alice, garbage, 222 Bob"`` into ``["Alice", "Bob"]``."""
    healers = []
    for part in chain.split(","):
        if m := LogParser.CHAIN_SEGMENT.match(part.strip()):
            name = m.group(1).strip()
            if name:
                healers.append(name)
    return healers
