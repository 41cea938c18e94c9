"""Phoenix data-access layer for the ToS;DR website."""

__version__ = "3.0.0"
