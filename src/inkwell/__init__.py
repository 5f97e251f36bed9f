"""Inkwell community API: threaded forum, interactions and moderation."""

__version__ = "0.1.0"
