from datetime import datetime, timedelta

from rotatonator.core.signals import Signals

T0 = datetime(2026, 1, 19, 14, 30, 45)


class FakeClock:
    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


class Recorder:
    """Collects everything emitted on a Signals hub."""

    def __init__(self, signals: Signals) -> None:
        self.casts = []
        self.rosters = []
        self.turns_starting = []
        self.turns_now = 0
        self.results = []
        self.failures = []
        signals.cast_detected.connect(self.casts.append)
        signals.roster_replaced.connect(self.rosters.append)
        signals.turn_starting.connect(self.turns_starting.append)
        signals.turn_now.connect(self._on_turn_now)
        signals.scoring_result.connect(self.results.append)
        signals.ingestion_failed.connect(self.failures.append)

    def _on_turn_now(self) -> None:
        self.turns_now += 1


def log_line(message: str, when: datetime = T0) -> str:
    return f"[{when.strftime('%a %b %d %H:%M:%S %Y')}] {message}\n"
