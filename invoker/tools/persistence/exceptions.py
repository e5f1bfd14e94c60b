"""Exception hierarchy for the record store.

The invocation pipeline treats store failures differently depending on where
they happen (the pre-clear is best-effort, audit inserts are not), so callers
need to tell permission problems, bad inputs and backend failures apart.
"""

from __future__ import annotations

class PersistenceError(Exception):
    """Base class for all record store errors."""


class PersistencePermissionError(PersistenceError):
    """Raised when an operation is not permitted by the table policy."""


class TableNotAllowedError(PersistencePermissionError):
    """Specific permission error for a disallowed table access."""


class ValidationError(PersistenceError):
    """Raised when inputs (filters, records, etc.) are invalid."""


class AdapterError(PersistenceError):
    """Raised when the underlying adapter/backend fails irrecoverably."""


__all__ = [
    "PersistenceError",
    "PersistencePermissionError",
    "TableNotAllowedError",
    "ValidationError",
    "AdapterError",
]
