"""In-memory persistence adapter.

Test/dry-run backend implementing the PersistenceAdapter contract used by the
audit store and workflow repository. Filters are exact equality, matching the
Supabase adapter's ``eq`` chain. Not thread-safe.
"""

from __future__ import annotations

import copy
from typing import Dict, Any, List, Optional


class InMemoryAdapter:
	def __init__(self) -> None:
		self._tables: Dict[str, List[Dict[str, Any]]] = {}
		self._counters: Dict[str, int] = {}

	# Internal helpers --------------------------------------------------
	def _ensure(self, table: str) -> None:
		if table not in self._tables:
			self._tables[table] = []
			self._counters[table] = 1

	@staticmethod
	def _matches(row: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
		if not filters:
			return True
		return all(row.get(k) == v for k, v in filters.items())

	# Write ops ---------------------------------------------------------
	def write(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
		self._ensure(table)
		# Preserve provided id if present; otherwise assign sequential id
		provided_id = record.get("id")
		if provided_id is None:
			rid = str(self._counters[table])
			self._counters[table] += 1
		else:
			rid = provided_id
		stored = {**copy.deepcopy(record), "id": rid}
		self._tables[table].append(stored)
		return dict(stored)

	def update(self, table: str, id_value: Any, changes: Dict[str, Any], id_column: str = "id") -> Optional[Dict[str, Any]]:
		self._ensure(table)
		for idx, existing in enumerate(self._tables[table]):
			if existing.get(id_column) == id_value:
				updated = {**existing, **copy.deepcopy(changes)}
				self._tables[table][idx] = updated
				return dict(updated)
		return None

	def delete(self, table: str, filters: Dict[str, Any]) -> int:
		self._ensure(table)
		kept = [r for r in self._tables[table] if not self._matches(r, filters)]
		removed = len(self._tables[table]) - len(kept)
		self._tables[table] = kept
		return removed

	# Read ops ----------------------------------------------------------
	def read(self, table: str, id_value: Any, id_column: str = "id") -> Optional[Dict[str, Any]]:
		self._ensure(table)
		for row in self._tables[table]:
			if row.get(id_column) == id_value:
				return dict(row)
		return None

	def query(
		self,
		table: str,
		filters: Optional[Dict[str, Any]] = None,
		limit: Optional[int] = None,
		order_by: Optional[str] = None,
		descending: bool = False,
	) -> List[Dict[str, Any]]:
		self._ensure(table)
		results = [dict(r) for r in self._tables[table] if self._matches(r, filters)]
		if order_by:
			results.sort(key=lambda r: r.get(order_by), reverse=descending)
		if limit is not None:
			results = results[:limit]
		return results


__all__ = ["InMemoryAdapter"]
