"""
Record store used for audit rows and workflow records.

Provides one façade (PersistenceService) over interchangeable backends.
"""

from invoker.tools.persistence.service import (
    PersistenceService,
    PersistenceAdapter,
    build_supabase_service,
)

__all__ = [
    "PersistenceService",
    "PersistenceAdapter",
    "build_supabase_service",
]
