"""
Shared data structures for Rotatonator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


# =============================================================================
# ENUMS
# =============================================================================


class Accuracy(Enum):
    """Timing accuracy of a cast relative to its expected time."""
    PERFECT = "perfect"
    EARLY = "early"
    LATE = "late"


class ComboLevel(Enum):
    """Cosmetic tier label derived from a healer's good streak."""
    NONE = "none"
    GREAT = "great"
    WOW = "wow"
    HEATING_UP = "heating_up"
    PERFECT = "perfect"
    ON_FIRE = "on_fire"
    HIGH_SCORE = "high_score"

    @classmethod
    def for_streak(cls, streak: int) -> ComboLevel:
        if streak <= 0:
            return cls.NONE
        if streak == 1:
            return cls.GREAT
        if streak == 2:
            return cls.WOW
        if streak == 3:
            return cls.HEATING_UP
        if streak == 6:
            return cls.ON_FIRE
        if streak == 7:
            return cls.HIGH_SCORE
        return cls.PERFECT


# =============================================================================
# ROSTER
# =============================================================================

MAX_CHAIN_INTERVAL = 3600.0  # seconds


def check_chain_interval(seconds: float) -> None:
    if not 0 < seconds <= MAX_CHAIN_INTERVAL:
        raise ValueError(f"Chain interval must be in (0, {MAX_CHAIN_INTERVAL:g}] seconds, got {seconds}")


@dataclass
class RosterConfig:
    """
    Live rotation roster.

    Mutable: a roster import replaces ``healers`` and ``chain_interval``
    wholesale. An empty ``player_name`` means observe only.
    """
    healers: list[str] = field(default_factory=list)
    player_name: str = ""
    chain_interval: float = 6.0  # seconds
    chain_prefix: str = "D&D"
    marker_keyword: str = "CH"
    import_keyword: str = "Rotatonator"
    display_horizon: float = 10.0  # seconds of lead time
    auto_cast: bool = False
    cast_hotkey: str = "1"

    def __post_init__(self) -> None:
        check_chain_interval(self.chain_interval)
        self.healers = list(self.healers)

    def replace(self, healers: list[str], chain_interval: float) -> None:
        """Swap roster and interval together."""
        check_chain_interval(chain_interval)
        self.healers = list(healers)
        self.chain_interval = float(chain_interval)

    def index_of(self, name: str) -> int:
        """Case-insensitive roster lookup. Returns -1 if absent."""
        if not name:
            return -1
        wanted = name.lower()
        for i, healer in enumerate(self.healers):
            if healer.lower() == wanted:
                return i
        return -1

    def healer_at(self, slot: int) -> Optional[str]:
        """Healer in a 1-based slot, or None when out of range."""
        if 1 <= slot <= len(self.healers):
            return self.healers[slot - 1]
        return None

    @property
    def has_player(self) -> bool:
        return bool(self.player_name)

    @property
    def size(self) -> int:
        return len(self.healers)


# =============================================================================
# LOG EVENTS
# =============================================================================


@dataclass
class LogEntry:
    """A parsed log entry."""
    timestamp: datetime
    message: str


@dataclass(frozen=True)
class CastEvent:
    """A healer announced a cast in chat."""
    healer: str
    cast_time: datetime
    target: Optional[str] = None
    is_player: bool = False


@dataclass(frozen=True)
class RosterReplaced:
    """A chat roster import, or the engine's confirmation of one."""
    healers: tuple[str, ...]
    delay_seconds: float


# =============================================================================
# ENGINE NOTIFICATIONS
# =============================================================================


@dataclass(frozen=True)
class CastDetected:
    """Emitted by the engine for every cast it sees."""
    healer: str
    cast_time: datetime
    is_player_cast: bool
    target: Optional[str] = None
    expected_time: Optional[datetime] = None
    chain_interval: float = 0.0

    @property
    def time_difference(self) -> Optional[float]:
        """Signed seconds, actual minus expected."""
        if self.expected_time is None:
            return None
        return (self.cast_time - self.expected_time).total_seconds()


@dataclass(frozen=True)
class TurnStarting:
    """The player is next in the rotation."""
    time_until_cast: float  # seconds
    due: datetime


@dataclass(frozen=True)
class TurnDeadline:
    """Cancel token for the single armed turn deadline."""
    token: int
    due: datetime
    armed_by: str

    def remaining_at(self, ref: datetime) -> float:
        return max(0.0, (self.due - ref).total_seconds())


# =============================================================================
# SCORING
# =============================================================================


@dataclass(frozen=True)
class TimingResult:
    """Outcome of one timing evaluation."""
    healer: str
    time_difference: float  # seconds, negative = early
    accuracy: Accuracy
    is_player: bool
    streak: int
    bad_streak: int
    combo_level: ComboLevel
    points_awarded: int
    total_score: int


@dataclass(frozen=True)
class HealerScore:
    """A leaderboard row."""
    healer: str
    score: int
    current_streak: int
