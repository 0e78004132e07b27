"""
Rotation session - one log, one roster, one engine.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from PyQt6.QtCore import QObject

from .core.data import RosterConfig
from .core.eq_utils import KeySender
from .core.log_ingestor import LogIngestor
from .core.signals import Signals
from .rotation.rotation_engine import RotationEngine
from .scoring.timing_scorer import TimingScorer

logger = logging.getLogger(__name__)


class RotationSession(QObject):
    """
    Wires ingestor -> engine -> scorer on a single thread.

    Everything here runs on the Qt event loop of the owning thread, which is
    what serializes log notifications and deadline firings.
    """

    def __init__(
        self,
        log_file: Path,
        roster: RosterConfig,
        signals: Signals,
        key_sender: Optional[KeySender] = None,
        scoring: bool = False,
        poll_interval_ms: int = 100,
        clock: Callable[[], datetime] = datetime.now,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._signals = signals
        self.roster = roster

        self.engine = RotationEngine(roster, signals, key_sender=key_sender, clock=clock, parent=self)
        self.scorer = TimingScorer(signals)
        self.ingestor = LogIngestor(
            log_file, roster, signals,
            poll_interval_ms=poll_interval_ms, clock=clock, parent=self,
        )
        self.ingestor.add_event_callback(self.engine.handle_event)
        signals.ingestion_failed.connect(self._on_ingestion_failed)

        self._scoring = False
        self.set_scoring(scoring)

    @property
    def running(self) -> bool:
        return self.ingestor.running

    @property
    def scoring(self) -> bool:
        return self._scoring

    def set_scoring(self, enabled: bool) -> None:
        """Turn timing scores on or off (the "DDR mode" switch)."""
        if enabled == self._scoring:
            return
        if enabled:
            self._signals.cast_detected.connect(self.scorer.on_cast_detected)
        else:
            self._signals.cast_detected.disconnect(self.scorer.on_cast_detected)
        self._scoring = enabled

    def start(self) -> None:
        if self.running:
            return
        self.ingestor.start()
        position = self.engine.get_player_position()
        if position < 0:
            logger.info("Player not in roster, observing only")
        self._signals.status_changed.emit(
            f"Monitoring active. Position in chain: {position + 1} of {self.roster.size}"
        )

    def stop(self) -> None:
        """Cancel the deadline, then detach and close the log."""
        self.engine.shutdown()
        self.ingestor.stop()
        self._signals.status_changed.emit("Monitoring stopped.")

    def _on_ingestion_failed(self, reason: str) -> None:
        # The ingestor already stopped itself; a restart is up to the caller
        self.engine.shutdown()
