"""Logging utilities available to both backend and frontend."""

from .log_service import LogEvent, LogService, get_log_service
from .logging_setup import configure_logging

__all__ = [
    "LogEvent",
    "LogService",
    "configure_logging",
    "get_log_service",
]
