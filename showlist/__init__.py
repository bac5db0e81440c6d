"""
showlist: turns the plain-text live-music listings into a normalized,
content-addressed dataset split into monthly chunks.
"""

__version__ = "0.1.0"
