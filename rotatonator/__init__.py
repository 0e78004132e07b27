"""
Rotatonator - complete heal rotation tracker for EverQuest logs.
"""

__version__ = "0.1.0"
