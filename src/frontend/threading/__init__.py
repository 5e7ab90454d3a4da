"""Timing helpers used by the frontend."""

from .throttle import HoverThrottle, SelectionClearer

__all__ = [
    "HoverThrottle",
    "SelectionClearer",
]
