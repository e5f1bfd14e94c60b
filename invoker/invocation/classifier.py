"""Map invocation failures onto operator-facing categories.

Classification prefers the structured HTTP status captured when the remote
worker rejected a call. Errors raised without a status (transport failures,
foreign exceptions) fall back to scanning the message for status codes, in
the fixed order 401, 403, 404, 429, 500.

Categories:
- authentication  -> 401
- permission      -> 403
- not-found       -> 404
- rate-limit      -> 429
- server-error    -> 5xx (500 when matched by text)
- unknown         -> anything else
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class ErrorKind(str, enum.Enum):
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    NOT_FOUND = "not-found"
    RATE_LIMIT = "rate-limit"
    SERVER_ERROR = "server-error"
    UNKNOWN = "unknown"

    @property
    def user_message(self) -> str:
        return _USER_MESSAGES[self]

    @property
    def summary(self) -> str:
        return _SUMMARIES[self]


_USER_MESSAGES = {
    ErrorKind.AUTHENTICATION: "Authentication failed. Please check your API credentials.",
    ErrorKind.PERMISSION: "You do not have permission to perform this action.",
    ErrorKind.NOT_FOUND: "The requested resource was not found.",
    ErrorKind.RATE_LIMIT: "Too many requests. Please try again later.",
    ErrorKind.SERVER_ERROR: "Server error. Please try again later.",
    ErrorKind.UNKNOWN: "An unexpected error occurred",
}

_SUMMARIES = {
    ErrorKind.AUTHENTICATION: "Authentication failed",
    ErrorKind.PERMISSION: "Permission denied",
    ErrorKind.NOT_FOUND: "Resource not found",
    ErrorKind.RATE_LIMIT: "Rate limit exceeded",
    ErrorKind.SERVER_ERROR: "Server error",
    ErrorKind.UNKNOWN: "Unknown error occurred",
}

# First match wins.
_TEXT_MARKERS = [
    ("401", ErrorKind.AUTHENTICATION),
    ("403", ErrorKind.PERMISSION),
    ("404", ErrorKind.NOT_FOUND),
    ("429", ErrorKind.RATE_LIMIT),
    ("500", ErrorKind.SERVER_ERROR),
]


@dataclass(frozen=True)
class Classification:
    user_message: str
    error_kind: ErrorKind


def kind_for_status(status: Optional[int]) -> Optional[ErrorKind]:
    """Return the category for an HTTP status, or None when it has none."""
    if status is None:
        return None
    if status == 401:
        return ErrorKind.AUTHENTICATION
    if status == 403:
        return ErrorKind.PERMISSION
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 429:
        return ErrorKind.RATE_LIMIT
    if 500 <= status <= 599:
        return ErrorKind.SERVER_ERROR
    return None


def kind_for_text(message: str) -> ErrorKind:
    for marker, kind in _TEXT_MARKERS:
        if marker in message:
            return kind
    return ErrorKind.UNKNOWN


def classify(error: BaseException) -> Classification:
    """Classify ``error`` into a user message and an error kind.

    Never raises; anything unrecognised is ``ErrorKind.UNKNOWN``.
    """
    kind = kind_for_status(getattr(error, "status", None))
    if kind is None:
        kind = kind_for_text(str(error))
    return Classification(user_message=kind.user_message, error_kind=kind)


__all__ = ["ErrorKind", "Classification", "classify", "kind_for_status", "kind_for_text"]
