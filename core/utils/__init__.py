"""Utility functions for the agent CSV column mapper."""

from core.utils.sanitize import sanitize_for_logging

__all__ = [
    "sanitize_for_logging",
]
