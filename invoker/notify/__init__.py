"""Operator notifications: protocol, adapters and the classified error handler."""

from .interface import Notifier
from .adapters import LoggingNotifier, RecordingNotifier
from .handler import handle_api_error

__all__ = ["Notifier", "LoggingNotifier", "RecordingNotifier", "handle_api_error"]
