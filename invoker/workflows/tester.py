"""Fire a workflow's configured call from its stored (or draft) settings."""
from __future__ import annotations

from typing import Optional

from invoker.invocation.exceptions import PreconditionFailure
from invoker.invocation.models import WORKFLOW_VARIABLE, InvocationRequest, InvocationResult
from invoker.invocation.pipeline import InvocationPipeline
from invoker.notify.handler import handle_api_error
from invoker.notify.interface import Notifier

from .models import WorkflowModel
from .repository import WorkflowRepository

TEST_SUCCESS_MESSAGE = "API test successful"


def build_request(workflow: WorkflowModel, workflow_id: Optional[str] = None) -> InvocationRequest:
    variables = workflow.variables_map()
    # the workflow's name rides along so the worker knows which workflow ran
    variables[WORKFLOW_VARIABLE] = workflow.name or ""
    return InvocationRequest(
        worker_id=workflow.worker_id,
        auth_token=workflow.api_auth_token,
        call=workflow.api_config.descriptor(),
        variables=variables,
        workflow_id=workflow_id,
    )


def run_api_test(
    pipeline: InvocationPipeline,
    workflow: WorkflowModel,
    notifier: Notifier,
    workflow_id: Optional[str] = None,
) -> InvocationResult:
    """Invoke ``workflow`` once and tell the operator how it went.

    Missing credentials are reported verbatim; every other failure goes
    through ``handle_api_error`` and surfaces as a ClassifiedError.
    """
    request = build_request(workflow, workflow_id)
    try:
        result = pipeline.invoke(request, notify=False)
    except PreconditionFailure as exc:
        notifier.error(exc.message)
        raise
    except Exception as exc:
        handle_api_error(exc, notifier)
    notifier.success(TEST_SUCCESS_MESSAGE)
    return result


def run_stored_workflow(
    pipeline: InvocationPipeline,
    repository: WorkflowRepository,
    workflow_id: str,
    notifier: Notifier,
) -> InvocationResult:
    workflow = repository.get(workflow_id)
    return run_api_test(pipeline, workflow, notifier, workflow_id=workflow_id)


__all__ = ["TEST_SUCCESS_MESSAGE", "build_request", "run_api_test", "run_stored_workflow"]
