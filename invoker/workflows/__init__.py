"""Workflow records and the "test this workflow" entry point."""

from .models import Variable, ApiConfigModel, WorkflowModel
from .repository import WorkflowRepository, WorkflowValidationError, WorkflowNotFoundError
from .tester import build_request, run_api_test, run_stored_workflow

__all__ = [
    "Variable",
    "ApiConfigModel",
    "WorkflowModel",
    "WorkflowRepository",
    "WorkflowValidationError",
    "WorkflowNotFoundError",
    "build_request",
    "run_api_test",
    "run_stored_workflow",
]
