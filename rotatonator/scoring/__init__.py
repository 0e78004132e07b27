"""
Scoring module - cast timing accuracy, streaks and leaderboard.
"""

from .timing_scorer import ScoreBoard, TimingScorer, TimingWindows

__all__ = [
    "ScoreBoard",
    "TimingScorer",
    "TimingWindows",
]
