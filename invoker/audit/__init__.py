from .store import AuditStore, WorkflowLogStore, log_workflow_error

__all__ = ["AuditStore", "WorkflowLogStore", "log_workflow_error"]
