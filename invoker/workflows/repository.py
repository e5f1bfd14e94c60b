from __future__ import annotations

from typing import Any, Dict, Optional

from invoker.audit.store import AuditStore, log_workflow_error
from invoker.config.store_config import WORKFLOWS_TABLE
from invoker.invocation.models import bearer
from invoker.tools.persistence.exceptions import PersistenceError
from invoker.tools.persistence.service import PersistenceService

from .models import Variable, WorkflowModel


class WorkflowValidationError(ValueError):
    """Required workflow fields are blank."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing required fields: {', '.join(self.missing)}")


class WorkflowNotFoundError(LookupError):
    pass


class WorkflowRepository:
    """Load and save workflow records through the record store.

    With an ``audit_store``, a store failure while updating an existing
    workflow is also recorded in that workflow's log before it propagates.
    """

    def __init__(
        self,
        service: PersistenceService,
        table: str = WORKFLOWS_TABLE,
        audit_store: Optional[AuditStore] = None,
    ):
        self.service = service
        self.table = table
        self.audit_store = audit_store

    def get(self, workflow_id: str) -> WorkflowModel:
        row = self.service.read(self.table, workflow_id)
        if row is None:
            raise WorkflowNotFoundError(f"workflow {workflow_id} not found")
        return WorkflowModel.from_row(row)

    @staticmethod
    def normalize(model: WorkflowModel) -> WorkflowModel:
        """Trim inputs and store the token in ``Bearer <token>`` form."""
        token = model.api_auth_token.strip()
        return model.model_copy(update={
            "name": model.name.strip(),
            "worker_id": model.worker_id.strip(),
            "api_auth_token": bearer(token) if token else "",
            "variables": [Variable(name=v.name.strip(), value=v.value.strip()) for v in model.variables],
        })

    def save(self, model: WorkflowModel, created_by: str, workflow_id: Optional[str] = None) -> Dict[str, Any]:
        missing = model.missing_fields()
        if missing:
            raise WorkflowValidationError(missing)
        if not created_by:
            raise PermissionError("User not authenticated")
        record = self.normalize(model).model_dump()
        record["created_by"] = created_by
        if not workflow_id:
            return self.service.write(self.table, record)
        try:
            updated = self.service.update(self.table, workflow_id, record)
        except PersistenceError as exc:
            if self.audit_store is not None:
                log_workflow_error(self.audit_store, workflow_id, exc, {"action": "save", "created_by": created_by})
            raise
        if updated is None:
            raise WorkflowNotFoundError(f"workflow {workflow_id} not found")
        return updated


__all__ = ["WorkflowRepository", "WorkflowValidationError", "WorkflowNotFoundError"]
