"""
Rotation engine - tracks the healer chain and arms the player's turn deadline.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from PyQt6.QtCore import QObject, Qt, QTimer

from ..core.data import (
    CastDetected,
    CastEvent,
    RosterConfig,
    RosterReplaced,
    TurnDeadline,
    TurnStarting,
)
from ..core.eq_utils import KeySender, send_key_async
from ..core.signals import Signals

logger = logging.getLogger(__name__)


class RotationEngine(QObject):
    """
    Reactive state machine over an ordered healer roster.

    Whoever casts is trusted as the current position. From that cast the
    engine works out whether the player is next (and arms the single turn
    deadline) and when every other healer within the display horizon is
    expected to cast.

    All methods must be called from the thread that owns the engine; the
    deadline timer fires on that thread's event loop.
    """

    def __init__(
        self,
        roster: RosterConfig,
        signals: Signals,
        key_sender: Optional[KeySender] = None,
        clock: Callable[[], datetime] = datetime.now,
        dispatch_key: Callable[[KeySender, str], object] = send_key_async,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._roster = roster
        self._signals = signals
        self._key_sender = key_sender
        self._clock = clock
        self._dispatch_key = dispatch_key

        # Roster index -> when that healer is expected to cast next
        self._expected: dict[int, datetime] = {}

        self._deadline: Optional[TurnDeadline] = None
        self._last_token = 0
        self._deadline_timer = QTimer(self)
        self._deadline_timer.setSingleShot(True)
        self._deadline_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._deadline_timer.timeout.connect(self._on_deadline)

    @property
    def roster(self) -> RosterConfig:
        return self._roster

    @property
    def armed_deadline(self) -> Optional[TurnDeadline]:
        return self._deadline

    def get_player_position(self) -> int:
        """Player's 0-based roster index, or -1 if untracked."""
        if not self._roster.has_player:
            return -1
        return self._roster.index_of(self._roster.player_name)

    def expected_time(self, slot: int) -> Optional[datetime]:
        """Expected next cast for a 1-based slot, if it is being tracked."""
        return self._expected.get(slot - 1)

    def expected_times(self) -> dict[int, datetime]:
        """Snapshot of the expected-time table keyed by 1-based slot."""
        return {index + 1: when for index, when in sorted(self._expected.items())}

    # =========================================================================
    # EVENTS
    # =========================================================================

    def handle_event(self, event: CastEvent | RosterReplaced) -> None:
        """Entry point for events decoded by the log ingestor."""
        if isinstance(event, RosterReplaced):
            self.on_roster_replaced(list(event.healers), event.delay_seconds)
        elif isinstance(event, CastEvent):
            self.on_cast(event.healer, event.cast_time, event.target)

    def on_roster_replaced(self, healers: list[str], delay_seconds: float) -> None:
        """Swap roster and interval. Expectations and the armed deadline go with it."""
        self._roster.replace(healers, delay_seconds)
        self.cancel_deadline()
        self._expected.clear()

        logger.info(
            "Roster replaced: %s (%.1fs interval), player position %d",
            ", ".join(self._roster.healers), self._roster.chain_interval,
            self.get_player_position() + 1,
        )
        self._signals.roster_replaced.emit(
            RosterReplaced(healers=tuple(self._roster.healers), delay_seconds=self._roster.chain_interval)
        )
        self._signals.status_changed.emit(
            f"Chain imported! {self._roster.size} healers, {self._roster.chain_interval:g}s interval."
        )

    def on_cast(self, healer: str, observed_time: datetime, target: Optional[str] = None) -> CastDetected:
        """Process a cast by ``healer``. Returns the notification that was emitted."""
        index = self._roster.index_of(healer)
        if index >= 0:
            healer = self._roster.healers[index]
        is_player = self._roster.has_player and healer.lower() == self._roster.player_name.lower()

        detected = CastDetected(
            healer=healer,
            cast_time=observed_time,
            is_player_cast=is_player,
            target=target,
            expected_time=self._expected.get(index) if index >= 0 else None,
            chain_interval=self._roster.chain_interval,
        )
        self._signals.cast_detected.emit(detected)

        if index < 0:
            logger.debug("Cast by %s who is not in the roster", healer)
            return detected

        player_index = self.get_player_position()
        if player_index >= 0 and (index + 1) % self._roster.size == player_index:
            due = observed_time + timedelta(seconds=self._roster.chain_interval)
            self._arm(due, healer)

        self._rebuild_expected(index, observed_time)
        return detected

    def apply_settings(
        self,
        player_name: Optional[str] = None,
        auto_cast: Optional[bool] = None,
        cast_hotkey: Optional[str] = None,
        chain_prefix: Optional[str] = None,
    ) -> None:
        """Refresh live settings. The armed deadline and expectations are kept."""
        if player_name is not None:
            self._roster.player_name = player_name
        if auto_cast is not None:
            self._roster.auto_cast = auto_cast
        if cast_hotkey is not None:
            self._roster.cast_hotkey = cast_hotkey
        if chain_prefix is not None:
            self._roster.chain_prefix = chain_prefix
        self._signals.status_changed.emit(
            f"Settings refreshed. Position in chain: {self.get_player_position() + 1} of {self._roster.size}"
        )

    def shutdown(self) -> None:
        """Cancel the deadline and forget expectations."""
        self.cancel_deadline()
        self._expected.clear()

    # =========================================================================
    # EXPECTED TIMES
    # =========================================================================

    def _rebuild_expected(self, caster_index: int, observed_time: datetime) -> None:
        """Recompute expectations relative to the most recent cast."""
        self._expected.clear()
        size = self._roster.size
        interval = self._roster.chain_interval
        for distance in range(1, size):
            lead = interval * distance
            if lead > self._roster.display_horizon:
                break
            self._expected[(caster_index + distance) % size] = observed_time + timedelta(seconds=lead)

    # =========================================================================
    # TURN DEADLINE
    # =========================================================================

    def _arm(self, due: datetime, armed_by: str) -> TurnDeadline:
        """Cancel any armed deadline, then arm a new one."""
        if self._deadline is not None:
            logger.debug("Deadline armed by %s superseded by %s", self._deadline.armed_by, armed_by)
        self.cancel_deadline()

        self._last_token += 1
        deadline = TurnDeadline(token=self._last_token, due=due, armed_by=armed_by)
        remaining = deadline.remaining_at(self._clock())

        # Only a running timer counts as armed
        self._deadline_timer.start(int(round(remaining * 1000)))
        self._deadline = deadline

        logger.info("Player is next after %s, casting in %.2fs", armed_by, remaining)
        self._signals.turn_starting.emit(TurnStarting(time_until_cast=remaining, due=due))
        return deadline

    def cancel_deadline(self, deadline: Optional[TurnDeadline] = None) -> bool:
        """
        Cancel the armed deadline. With ``deadline`` given, only cancel if it
        is still the armed one. Returns True if something was cancelled.
        """
        if self._deadline is None:
            return False
        if deadline is not None and deadline.token != self._deadline.token:
            return False
        self._deadline_timer.stop()
        self._deadline = None
        return True

    def _on_deadline(self) -> None:
        deadline = self._deadline
        if deadline is None:
            return  # Cancelled
        self._deadline = None

        logger.info("Player turn now (armed by %s)", deadline.armed_by)
        self._signals.turn_now.emit()

        if self._roster.auto_cast and self._key_sender is not None:
            self._dispatch_key(self._key_sender, self._roster.cast_hotkey)
