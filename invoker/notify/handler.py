"""Turn a raised invocation failure into an operator notification."""

from __future__ import annotations

from typing import NoReturn

from invoker.invocation.classifier import classify
from invoker.invocation.exceptions import ClassifiedError

from .interface import Notifier


def handle_api_error(error: BaseException, notifier: Notifier) -> NoReturn:
    """Notify the classified user message, then raise a short ClassifiedError.

    The original failure stays reachable as ``__cause__``.
    """
    classification = classify(error)
    notifier.error(classification.user_message)
    raise ClassifiedError(
        classification.error_kind.summary,
        classification.error_kind,
        status=getattr(error, "status", None),
    ) from error


__all__ = ["handle_api_error"]
