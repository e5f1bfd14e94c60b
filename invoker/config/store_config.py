"""Central configuration for record store table names and allowlists.

Policy
------
* The invocation pipeline only ever touches the audit table (``workflow_logs``).
* Workflow records (``workflows``) are read by the CLI/tester and written by
  the workflow repository.

Environment Override Precedence:
* WORKFLOW_LOGS_TABLE   -> audit table name
* WORKFLOWS_TABLE       -> workflow record table name
* PERSIST_WRITE_TABLES  -> full explicit write allowlist (comma separated)
* PERSIST_READ_TABLES   -> full explicit read allowlist (comma separated)

Services must not hard-code table names; read them from here.
"""

from __future__ import annotations

import os
from typing import List

WORKFLOW_LOGS_TABLE: str = os.getenv("WORKFLOW_LOGS_TABLE", "workflow_logs")
WORKFLOWS_TABLE: str = os.getenv("WORKFLOWS_TABLE", "workflows")

ALL_TABLES: List[str] = [WORKFLOW_LOGS_TABLE, WORKFLOWS_TABLE]


def _env_list(var: str) -> List[str] | None:
    raw = os.getenv(var)
    if not raw:
        return None
    return [p.strip() for p in raw.split(",") if p.strip()]


def get_write_allowlist() -> List[str]:
    """Return tables allowed for WRITE operations (defaults to ALL_TABLES)."""
    return _env_list("PERSIST_WRITE_TABLES") or list(ALL_TABLES)


def get_read_allowlist() -> List[str]:
    """Return tables allowed for READ operations (defaults to ALL_TABLES)."""
    return _env_list("PERSIST_READ_TABLES") or list(ALL_TABLES)


__all__ = [
    "WORKFLOW_LOGS_TABLE",
    "WORKFLOWS_TABLE",
    "ALL_TABLES",
    "get_write_allowlist",
    "get_read_allowlist",
]
