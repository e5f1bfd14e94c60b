"""Supabase adapter implementation.

Implements the PersistenceAdapter contract on top of the official Supabase
SDK. Intentionally thin: allowlists, None-stripping and instrumentation live
in PersistenceService. Filters map to chained ``eq`` calls, the same shape the
audit pre-clear needs (``workflow_id`` + ``message``).
"""

from __future__ import annotations

from typing import Dict, Any, List, Optional

from supabase import Client, create_client


def _data(resp: Any) -> Any:
	return getattr(resp, "data", None) if not isinstance(resp, dict) else resp.get("data")


class SupabaseAdapter:
	def __init__(self, url: str, key: str, client: Optional[Client] = None):
		self.url = url.rstrip("/")
		self.key = key
		self.client = client or create_client(url, key)

	@staticmethod
	def _apply_eq(builder: Any, filters: Optional[Dict[str, Any]]) -> Any:
		for k, v in (filters or {}).items():
			builder = builder.eq(k, v)
		return builder

	# -------------------------------------------------- Write Ops ---------
	def write(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
		resp = self.client.table(table).insert(record).execute()
		data = _data(resp)
		if isinstance(data, list) and data:
			return data[0]
		return {"status": "ok", "raw": data}

	def update(self, table: str, id_value: Any, changes: Dict[str, Any], id_column: str = "id") -> Optional[Dict[str, Any]]:
		resp = self.client.table(table).update(changes).eq(id_column, id_value).execute()
		data = _data(resp)
		if isinstance(data, list) and data:
			return data[0]
		return None

	def delete(self, table: str, filters: Dict[str, Any]) -> int:
		resp = self._apply_eq(self.client.table(table).delete(), filters).execute()
		data = _data(resp)
		return len(data) if isinstance(data, list) else 0

	# -------------------------------------------------- Read Ops ----------
	def read(self, table: str, id_value: Any, id_column: str = "id") -> Optional[Dict[str, Any]]:
		resp = self.client.table(table).select("*").eq(id_column, id_value).limit(1).execute()
		data = _data(resp)
		if isinstance(data, list) and data:
			return data[0]
		return None

	def query(
		self,
		table: str,
		filters: Optional[Dict[str, Any]] = None,
		limit: Optional[int] = None,
		order_by: Optional[str] = None,
		descending: bool = False,
	) -> List[Dict[str, Any]]:
		q = self._apply_eq(self.client.table(table).select("*"), filters)
		if order_by:
			q = q.order(order_by, desc=descending)
		if limit is not None:
			q = q.limit(limit)
		data = _data(q.execute())
		return data if isinstance(data, list) else []


__all__ = ["SupabaseAdapter"]
