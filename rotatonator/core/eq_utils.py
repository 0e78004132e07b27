"""
Core utilities for EQ interaction - window finding and key sending.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

KeySender = Callable[[str], None]

# Hotkey names accepted by the auto-cast setting, mapped to xdotool keysyms
SPECIAL_KEYS = {f"f{i}": f"F{i}" for i in range(1, 13)}


def find_eq_window() -> Optional[str]:
    """Find the EQ window ID."""
    search_terms = ["EverQuest", "eqgame", "Project 1999"]
    for term in search_terms:
        try:
            result = subprocess.run(
                ["xdotool", "search", "--name", term],
                capture_output=True,
                text=True,
                timeout=2,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("xdotool search for %r failed: %s", term, e)
            continue
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip().split("\n")[0]
    return None


def keysym_for(key: str) -> Optional[str]:
    """Translate a hotkey setting ("1", "q", "F5") to an xdotool keysym."""
    key = key.strip()
    if len(key) == 1 and key.isalnum() and key.isascii():
        return key.lower()
    return SPECIAL_KEYS.get(key.lower())


def send_key(key: str) -> None:
    """
    Press a single key in the EQ window.

    Raises ValueError for an unsupported key, RuntimeError when there is no
    EQ window and subprocess errors when xdotool fails.
    """
    keysym = keysym_for(key)
    if keysym is None:
        raise ValueError(f"Unsupported hotkey: {key!r}")

    window_id = find_eq_window()
    if not window_id:
        raise RuntimeError("No EQ window found")

    subprocess.run(
        ["xdotool", "key", "--window", window_id, keysym],
        timeout=1,
        check=True,
    )


def send_key_async(sender: KeySender, key: str) -> threading.Thread:
    """Fire and forget: run a key sender off the event thread, logging failures."""

    def run() -> None:
        try:
            sender(key)
        except Exception as e:
            logger.warning("Auto-cast key %r failed: %s", key, e)

    thread = threading.Thread(target=run, name="auto-cast", daemon=True)
    thread.start()
    return thread
