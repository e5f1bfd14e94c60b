from typing import Any, Dict, List, Optional, Protocol, Callable
import os, time
import logging
from .exceptions import (
    PersistencePermissionError,
    TableNotAllowedError,
    ValidationError,
    AdapterError,
)
from . import metrics
from .adapters.in_memory_adapter import InMemoryAdapter  # re-export for convenience

logger = logging.getLogger(__name__)


class PersistenceAdapter(Protocol):
    """Protocol for adapters (Supabase / in-memory)."""

    def write(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]: ...
    def update(
        self, table: str, id_value: Any, changes: Dict[str, Any], id_column: str = "id"
    ) -> Optional[Dict[str, Any]]: ...
    def delete(self, table: str, filters: Dict[str, Any]) -> int: ...
    def read(self, table: str, id_value: Any, id_column: str = "id") -> Optional[Dict[str, Any]]: ...
    def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]: ...


class PersistenceService:
    """Record store façade adding policy and cross-cutting hooks.

    Responsibilities
    ----------------
    - Enforce read/write allow-lists per table.
    - Strip None fields before inserts for cleaner records.
    - Refuse unfiltered deletes; the only delete this system issues is the
      targeted audit pre-clear.
    - Wrap adapter calls with timing, metrics and AdapterError translation.
    """

    def __init__(
        self,
        adapter: PersistenceAdapter,
        read_allowlist: Optional[List[str]] = None,
        write_allowlist: Optional[List[str]] = None,
    ):
        self.adapter = adapter
        self.read_allowlist = set(t.lower() for t in (read_allowlist or [])) or None
        self.write_allowlist = set(t.lower() for t in (write_allowlist or [])) or None

    # -------- internal helpers --------
    def _check_table(self, table: str, *, write: bool):
        tbl = table.lower()
        if write:
            if self.write_allowlist and tbl not in self.write_allowlist:
                raise TableNotAllowedError(f"Write access to table '{table}' is not permitted by policy")
        else:
            if self.read_allowlist and tbl not in self.read_allowlist:
                raise TableNotAllowedError(f"Read access to table '{table}' is not permitted by policy")

    def _clean(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in record.items() if v is not None}

    # -------- write APIs --------
    def write(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        self._check_table(table, write=True)
        return self._invoke("write", table, lambda: self.adapter.write(table, self._clean(record)))

    def update(
        self, table: str, id_value: Any, changes: Dict[str, Any], id_column: str = "id"
    ) -> Optional[Dict[str, Any]]:
        self._check_table(table, write=True)
        return self._invoke(
            "update",
            table,
            lambda: self.adapter.update(table, id_value, changes, id_column=id_column),
        )

    def delete(self, table: str, filters: Dict[str, Any]) -> int:
        self._check_table(table, write=True)
        if not filters:
            raise ValidationError(f"Refusing unfiltered delete on table '{table}'")
        return self._invoke("delete", table, lambda: self.adapter.delete(table, dict(filters)))

    # -------- read/query APIs --------
    def read(self, table: str, id_value: Any, id_column: str = "id") -> Optional[Dict[str, Any]]:
        self._check_table(table, write=False)
        return self._invoke("read", table, lambda: self.adapter.read(table, id_value, id_column=id_column))

    def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        self._check_table(table, write=False)
        return self._invoke(
            "query",
            table,
            lambda: self.adapter.query(
                table,
                filters=filters,
                limit=limit,
                order_by=order_by,
                descending=descending,
            ),
        )

    # -------- instrumentation wrapper --------
    def _invoke(self, op: str, table: str, func: Callable[[], Any]):
        start = time.time()
        try:
            return func()
        except PersistencePermissionError:
            raise
        except Exception as e:  # wrap generic adapter/backend exceptions
            metrics.inc_error(op, table)
            raise AdapterError(f"Adapter error during {op} on {table}: {e}") from e
        finally:
            duration = (time.time() - start) * 1000.0
            metrics.inc(op, table)
            metrics.observe(op, table, duration)
            if os.environ.get("PERSIST_LOGGING"):
                logger.info("persistence op=%s table=%s ms=%.1f", op, table, duration)


# Factory helpers ---------------------------------------------------------
def build_supabase_service(
    read_allowlist: Optional[List[str]] = None,
    write_allowlist: Optional[List[str]] = None,
) -> PersistenceService:
    """Build a Supabase-backed service using environment configuration.

    Environment:
    - SUPABASE_URL
    - SUPABASE_SERVICE_KEY (preferred) or SUPABASE_KEY
    """
    from config import settings

    settings.validate_keys(raise_on_missing=True)
    from .adapters.supabase_adapter import SupabaseAdapter

    adapter = SupabaseAdapter(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    return PersistenceService(adapter, read_allowlist=read_allowlist, write_allowlist=write_allowlist)


__all__ = ["PersistenceService", "build_supabase_service", "PersistenceAdapter", "InMemoryAdapter"]
