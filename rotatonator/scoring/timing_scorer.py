"""
Timing scorer - judges how close each cast was to its expected time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.data import (
    Accuracy,
    CastDetected,
    ComboLevel,
    HealerScore,
    TimingResult,
)
from ..core.signals import Signals

logger = logging.getLogger(__name__)

PERFECT_BASE_POINTS = 100
EARLY_PENALTY = -25
LATE_PENALTY = -50

# Bonus added to the base for streaks 1-4; longer streaks keep the last one
COMBO_BONUS = (0, 50, 100, 150)

# Thresholds are interpolated across this range of chain intervals
MIN_SCALED_INTERVAL = 2.0
MAX_SCALED_INTERVAL = 7.0


@dataclass(frozen=True)
class TimingWindows:
    perfect_seconds: float
    late_seconds: float

    @classmethod
    def for_interval(cls, chain_interval: float) -> TimingWindows:
        """
        Scale windows with the chain interval.

        2s or less: +/-0.25s perfect, late past 0.5s.
        7s or more: +/-0.5s perfect, late past 1.0s.
        """
        clamped = max(MIN_SCALED_INTERVAL, min(MAX_SCALED_INTERVAL, chain_interval))
        t = (clamped - MIN_SCALED_INTERVAL) / (MAX_SCALED_INTERVAL - MIN_SCALED_INTERVAL)
        return cls(perfect_seconds=0.25 + 0.25 * t, late_seconds=0.5 + 0.5 * t)

    def classify_delta(self, delta_seconds: float) -> Accuracy:
        if delta_seconds < -self.perfect_seconds:
            return Accuracy.EARLY
        if delta_seconds > self.late_seconds:
            return Accuracy.LATE
        return Accuracy.PERFECT


def combo_bonus(streak: int) -> int:
    if streak <= 0:
        return 0
    return COMBO_BONUS[min(streak, len(COMBO_BONUS)) - 1]


@dataclass
class ScoreEntry:
    score: int = 0
    good_streak: int = 0
    bad_streak: int = 0


class ScoreBoard:
    """Per-healer score and streaks. Entries are created on first use."""

    def __init__(self):
        self._entries: dict[str, ScoreEntry] = {}

    def entry(self, healer: str) -> ScoreEntry:
        if healer not in self._entries:
            self._entries[healer] = ScoreEntry()
        return self._entries[healer]

    def get(self, healer: str) -> Optional[ScoreEntry]:
        return self._entries.get(healer)

    def items(self) -> list[tuple[str, ScoreEntry]]:
        return list(self._entries.items())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class TimingScorer:
    """
    Classifies cast timing and keeps streak-based scores per healer.

    Owned by the session thread like the rotation engine; the scoreboard has
    a single writer.
    """

    def __init__(self, signals: Optional[Signals] = None):
        self._signals = signals
        self._board = ScoreBoard()

    @property
    def board(self) -> ScoreBoard:
        return self._board

    def evaluate(
        self,
        expected: datetime,
        actual: datetime,
        healer: str,
        is_player: bool,
        chain_interval: float,
    ) -> TimingResult:
        """Judge one cast and update that healer's score and streaks."""
        diff = (actual - expected).total_seconds()
        accuracy = TimingWindows.for_interval(chain_interval).classify_delta(diff)
        entry = self._board.entry(healer)

        if accuracy == Accuracy.PERFECT:
            entry.good_streak += 1
            entry.bad_streak = 0
            points = PERFECT_BASE_POINTS + combo_bonus(entry.good_streak)
            entry.score += points
            combo = ComboLevel.for_streak(entry.good_streak)
        else:
            entry.good_streak = 0
            entry.bad_streak += 1
            points = EARLY_PENALTY if accuracy == Accuracy.EARLY else LATE_PENALTY
            entry.score = max(0, entry.score + points)
            combo = ComboLevel.NONE

        return TimingResult(
            healer=healer,
            time_difference=diff,
            accuracy=accuracy,
            is_player=is_player,
            streak=entry.good_streak,
            bad_streak=entry.bad_streak,
            combo_level=combo,
            points_awarded=points,
            total_score=entry.score,
        )

    def on_cast_detected(self, detected: CastDetected) -> Optional[TimingResult]:
        """Score a cast notification that carries an expected time."""
        if detected.expected_time is None:
            return None

        result = self.evaluate(
            detected.expected_time,
            detected.cast_time,
            detected.healer,
            detected.is_player_cast,
            detected.chain_interval,
        )
        logger.debug(
            "%s %s by %+.2fs: %+d points, streak %d, total %d",
            result.healer, result.accuracy.value, result.time_difference,
            result.points_awarded, result.streak, result.total_score,
        )
        if self._signals is not None:
            self._signals.scoring_result.emit(result)
        return result

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_leaderboard(self) -> list[HealerScore]:
        """All healers, highest score first."""
        board = [
            HealerScore(healer=name, score=entry.score, current_streak=entry.good_streak)
            for name, entry in self._board.items()
        ]
        board.sort(key=lambda s: s.score, reverse=True)
        return board

    def current_streak(self, healer: str) -> int:
        entry = self._board.get(healer)
        return entry.good_streak if entry else 0

    def current_bad_streak(self, healer: str) -> int:
        entry = self._board.get(healer)
        return entry.bad_streak if entry else 0

    def score(self, healer: str) -> int:
        entry = self._board.get(healer)
        return entry.score if entry else 0

    # =========================================================================
    # RESET
    # =========================================================================

    def reset(self, healer: str) -> None:
        """Break a healer's good streak. Score and bad streak are kept."""
        entry = self._board.get(healer)
        if entry:
            entry.good_streak = 0

    def reset_all(self) -> None:
        self._board.clear()
