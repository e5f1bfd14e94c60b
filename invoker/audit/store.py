from __future__ import annotations

import logging
import traceback
from typing import Protocol, Dict, Any, List, Optional

from invoker.config.store_config import WORKFLOW_LOGS_TABLE
from invoker.tools.persistence.service import PersistenceService

logger = logging.getLogger(__name__)

LEVELS = ("info", "error")


class AuditStore(Protocol):
    """Protocol for persisting invocation audit rows."""

    def delete_entries(self, workflow_id: str, message: str) -> int:
        ...

    def insert_entry(self, workflow_id: str, level: str, message: str, details: Dict[str, Any]) -> Dict[str, Any]:
        ...


class WorkflowLogStore:
    """Audit rows in the ``workflow_logs`` table, one per recorded attempt.

    Rows are only ever inserted or deleted by exact (workflow_id, message)
    match; nothing updates them in place.
    """

    def __init__(self, service: PersistenceService, table: str = WORKFLOW_LOGS_TABLE):
        self.service = service
        self.table = table

    def delete_entries(self, workflow_id: str, message: str) -> int:
        return self.service.delete(self.table, {"workflow_id": workflow_id, "message": message})

    def insert_entry(self, workflow_id: str, level: str, message: str, details: Dict[str, Any]) -> Dict[str, Any]:
        if level not in LEVELS:
            raise ValueError(f"unknown audit level: {level}")
        return self.service.write(
            self.table,
            {"workflow_id": workflow_id, "level": level, "message": message, "details": details},
        )

    def entries(self, workflow_id: str, level: Optional[str] = None) -> List[Dict[str, Any]]:
        filters: Dict[str, Any] = {"workflow_id": workflow_id}
        if level:
            filters["level"] = level
        return self.service.query(self.table, filters=filters)


def log_workflow_error(
    store: AuditStore,
    workflow_id: str,
    error: BaseException,
    context: Optional[Dict[str, Any]] = None,
) -> Optional[Dict[str, Any]]:
    """Record ``error`` against a workflow; never raises.

    For callers outside the pipeline (e.g. a failed save) that still want the
    failure visible in the workflow's log.
    """
    message = str(error) or "An unknown error occurred"
    try:
        return store.insert_entry(
            workflow_id,
            "error",
            message,
            {
                "error": message,
                "stack": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
                "context": context,
            },
        )
    except Exception:
        logger.exception("Failed to log workflow error for %s", workflow_id)
        return None


__all__ = ["AuditStore", "WorkflowLogStore", "log_workflow_error"]
