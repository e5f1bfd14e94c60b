from __future__ import annotations

from typing import Protocol


class Notifier(Protocol):
    """Protocol for surfacing invocation outcomes to a human operator.

    Implementations receive short, already user-facing strings; they must not
    raise back into the pipeline.
    """

    def success(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


__all__ = ["Notifier"]
