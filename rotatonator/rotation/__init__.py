"""
Rotation module - chain tracking and the player's turn deadline.
"""

from .rotation_engine import RotationEngine

__all__ = [
    "RotationEngine",
]
