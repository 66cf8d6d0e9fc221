"""
Progress events for automation sessions.
"""

from .event_log import JsonlEventLog
from .progress import EventKind, ProgressEvent, ProgressReporter

__all__ = ["EventKind", "ProgressEvent", "ProgressReporter", "JsonlEventLog"]
