"""
Chain position codes.

Slots 1-9 are written as a repeated digit ("111", "222", ...) and slots
10-35 as a repeated letter ("AAA" is 10, "ZZZ" is 35). Macros in the wild
also use other run lengths ("1", "22", "4444"), so decoding only requires
that every character is the same.
"""

from __future__ import annotations

from typing import Optional

MIN_POSITION = 1
MAX_POSITION = 35
CODE_WIDTH = 3


def encode_position(slot: int) -> str:
    """Convert a slot (1-35) to its three character code."""
    if not MIN_POSITION <= slot <= MAX_POSITION:
        raise ValueError(f"Position must be between {MIN_POSITION} and {MAX_POSITION}, got {slot}")
    if slot <= 9:
        char = chr(ord("0") + slot)
    else:
        char = chr(ord("A") + slot - 10)
    return char * CODE_WIDTH


def decode_position(code: str) -> Optional[int]:
    """Convert a code back to its slot. Returns None for anything malformed."""
    if not code:
        return None

    # Every character must be the same one, case included ("aAa" is not a code)
    if any(c != code[0] for c in code) or not code[0].isascii():
        return None

    first = code[0].upper()

    if "1" <= first <= "9":
        return ord(first) - ord("0")
    if "A" <= first <= "Z":
        return 10 + ord(first) - ord("A")
    return None

