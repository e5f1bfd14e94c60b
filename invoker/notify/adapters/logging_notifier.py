from platform_monitoring import log_event


class LoggingNotifier:
    """Notifier that routes operator messages to the monitoring logger.

    Used by the CLI and any headless caller with no UI to toast into.
    """

    def success(self, message: str) -> None:
        log_event("notify.success", {"message": message})

    def error(self, message: str) -> None:
        log_event("notify.error", {"message": message})


__all__ = ["LoggingNotifier"]
