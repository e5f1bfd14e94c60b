"""Exception hierarchy for worker invocations.

Every failure surfaced by ``InvocationPipeline.invoke`` is an
``InvocationError``; the subclass tells the caller at which stage it failed
and ``status`` carries the HTTP status whenever a response was received.
"""

from __future__ import annotations

from typing import Any, Optional

from .classifier import ErrorKind, classify


class InvocationError(Exception):
    """Base class for all invocation failures."""

    def __init__(self, message: str, status: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details

    @property
    def kind(self) -> ErrorKind:
        return classify(self).error_kind

    def to_dict(self) -> dict:
        return {"message": self.message, "status": self.status, "details": self.details}


class PreconditionFailure(InvocationError):
    """Worker id or auth token missing, blank or still a placeholder."""


class NetworkFailure(InvocationError):
    """The request never produced an HTTP response."""


class DecodeFailure(InvocationError):
    """The response body was not valid JSON."""


class RemoteRejection(InvocationError):
    """The worker endpoint answered with a non-2xx status."""


class UnknownFailure(InvocationError):
    """Anything else raised while invoking; the original is the ``__cause__``."""


class LockUnavailable(InvocationError):
    """The workflow's lock could not be taken before the attempt started."""


class ClassifiedError(InvocationError):
    """Raised after a failure has been classified and shown to the operator."""

    def __init__(self, message: str, error_kind: ErrorKind, status: Optional[int] = None):
        super().__init__(message, status=status)
        self.error_kind = error_kind

    @property
    def kind(self) -> ErrorKind:
        return self.error_kind


__all__ = [
    "InvocationError",
    "PreconditionFailure",
    "NetworkFailure",
    "DecodeFailure",
    "RemoteRejection",
    "UnknownFailure",
    "LockUnavailable",
    "ClassifiedError",
]
