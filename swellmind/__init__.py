"""SwellMind: surf-window scoring that learns from a surfer's logged sessions."""

__version__ = "0.1.0"
