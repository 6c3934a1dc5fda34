"""Static 2D grid spatial channels, area-of-interest queries and a message-type state machine."""

__version__ = "0.1.0"