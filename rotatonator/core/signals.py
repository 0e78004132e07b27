"""
Shared Qt signals for the application.
"""

from __future__ import annotations

from PyQt6.QtCore import QObject, pyqtSignal


class Signals(QObject):
    """Central signal hub. UI, audio and TTS collaborators connect here."""

    # Rotation signals
    cast_detected = pyqtSignal(object)  # CastDetected
    roster_replaced = pyqtSignal(object)  # RosterReplaced
    turn_starting = pyqtSignal(object)  # TurnStarting
    turn_now = pyqtSignal()

    # Scoring signals
    scoring_result = pyqtSignal(object)  # TimingResult

    # Log/status signals
    log_message = pyqtSignal(str)
    status_changed = pyqtSignal(str)
    ingestion_failed = pyqtSignal(str)  # reason
