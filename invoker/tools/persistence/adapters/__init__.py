"""
Record store adapters: in-memory (tests, dry runs) and Supabase.
"""

from invoker.tools.persistence.adapters.in_memory_adapter import InMemoryAdapter
from invoker.tools.persistence.adapters.supabase_adapter import SupabaseAdapter

__all__ = ["InMemoryAdapter", "SupabaseAdapter"]
