"""
Core functionality - data structures, signals, parsing and log tailing.
"""

from .data import (
    Accuracy,
    ComboLevel,
    RosterConfig,
    LogEntry,
    CastEvent,
    RosterReplaced,
    CastDetected,
    TurnStarting,
    TurnDeadline,
    TimingResult,
    HealerScore,
)
from .signals import Signals
from .positions import encode_position, decode_position
from .eq_utils import find_eq_window, send_key, send_key_async
from .log_parser import LogParser, parse_chain_segments, roster_from_import
from .log_ingestor import LogIngestor, character_from_log, discover_logs

__all__ = [
    "Accuracy",
    "ComboLevel",
    "RosterConfig",
    "LogEntry",
    "CastEvent",
    "RosterReplaced",
    "CastDetected",
    "TurnStarting",
    "TurnDeadline",
    "TimingResult",
    "HealerScore",
    "Signals",
    "encode_position",
    "decode_position",
    "find_eq_window",
    "send_key",
    "send_key_async",
    "LogParser",
    "parse_chain_segments",
    "roster_from_import",
    "LogIngestor",
    "character_from_log",
    "discover_logs",
]
