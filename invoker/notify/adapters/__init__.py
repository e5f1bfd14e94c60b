from .logging_notifier import LoggingNotifier
from .recording_notifier import RecordingNotifier

__all__ = ["LoggingNotifier", "RecordingNotifier"]
