from typing import List, Tuple


class RecordingNotifier:
    """Keeps every notification in order; for tests and dry runs."""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    @property
    def errors(self) -> List[str]:
        return [m for level, m in self.messages if level == "error"]

    @property
    def successes(self) -> List[str]:
        return [m for level, m in self.messages if level == "success"]


__all__ = ["RecordingNotifier"]
