"""Top-level platform monitoring helpers.

Usage: from platform_monitoring import log_event, log_error
"""
from .exporters import log_event, log_error, sanitize

__all__ = ["log_event", "log_error", "sanitize"]
