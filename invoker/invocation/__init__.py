"""Outbound worker invocation: request/result types, error taxonomy,
classification, audit policy and the pipeline that ties them together.
"""

from .classifier import ErrorKind, Classification, classify
from .exceptions import (
    InvocationError,
    PreconditionFailure,
    NetworkFailure,
    DecodeFailure,
    RemoteRejection,
    UnknownFailure,
    LockUnavailable,
    ClassifiedError,
)
from .models import CallDescriptor, DEFAULT_CALL, InvocationRequest, InvocationResult
from .audit_policy import AuditAction, Outcome, decide
from .pipeline import InvocationPipeline

__all__ = [
    "ErrorKind",
    "Classification",
    "classify",
    "InvocationError",
    "PreconditionFailure",
    "NetworkFailure",
    "DecodeFailure",
    "RemoteRejection",
    "UnknownFailure",
    "LockUnavailable",
    "ClassifiedError",
    "CallDescriptor",
    "DEFAULT_CALL",
    "InvocationRequest",
    "InvocationResult",
    "AuditAction",
    "Outcome",
    "decide",
    "InvocationPipeline",
]
