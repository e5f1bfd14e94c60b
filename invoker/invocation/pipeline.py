import json
import traceback
from http import HTTPStatus
from typing import Any, Dict, Optional

import requests

import platform_monitoring
from config import settings
from invoker.audit.store import AuditStore
from invoker.notify.interface import Notifier

from .audit_policy import AuditAction, Outcome, decide
from .exceptions import (
    InvocationError,
    PreconditionFailure,
    NetworkFailure,
    DecodeFailure,
    RemoteRejection,
    UnknownFailure,
    LockUnavailable,
)
from .locks import NullWorkflowLock, WorkflowLock
from .models import (
    PLACEHOLDER_AUTH_TOKEN,
    PLACEHOLDER_WORKER_ID,
    InvocationRequest,
    InvocationResult,
    bearer,
    derive_response_text,
)

SUCCESS_MESSAGE = "API request successful"
FAILURE_PREFIX = "API request failed: "
CONNECT_FAILURE_MESSAGE = "Failed to connect to the remote worker API"


def status_text(response: requests.Response) -> str:
    if response.reason:
        return response.reason
    try:
        return HTTPStatus(response.status_code).phrase
    except ValueError:
        return str(response.status_code)


def is_success(status: int) -> bool:
    return 200 <= status <= 299


class InvocationPipeline:
    """Send one worker call for a workflow and keep its audit trail.

    Responsibilities:
    - reject requests whose worker id / token are blank or placeholders
    - clear the workflow's previous success rows (best-effort)
    - POST ``{workerId, variables}`` with a Bearer token
    - reduce the JSON body to a display string
    - write audit rows as ``audit_policy.decide`` dictates
    - log every failure with context, then re-raise it
    """

    def __init__(
        self,
        audit_store: AuditStore,
        notifier: Optional[Notifier] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = settings.WORKER_API_TIMEOUT,
        lock: Optional[WorkflowLock] = None,
    ):
        self.audit_store = audit_store
        self.notifier = notifier
        self.session = session or requests.Session()
        self.timeout = timeout
        self.lock = lock or NullWorkflowLock()

    # -------------------------------------------------- public -------------
    def invoke(self, request: InvocationRequest, notify: bool = True) -> InvocationResult:
        """Run one attempt; ``notify=False`` when the caller reports the outcome itself."""
        self.check_preconditions(request)
        if not request.workflow_id:
            return self._attempt(request, notify)
        try:
            with self.lock.hold(request.workflow_id):
                return self._attempt(request, notify)
        except LockUnavailable as exc:
            self._on_failure(request, exc)
            raise

    @staticmethod
    def check_preconditions(request: InvocationRequest) -> None:
        worker_id = (request.worker_id or "").strip()
        if not worker_id or worker_id == PLACEHOLDER_WORKER_ID:
            raise PreconditionFailure("Worker ID is not configured")
        token = (request.auth_token or "").strip()
        if not token or token == PLACEHOLDER_AUTH_TOKEN:
            raise PreconditionFailure("API authentication token is not configured")

    # -------------------------------------------------- attempt ------------
    def _attempt(self, request: InvocationRequest, notify: bool = True) -> InvocationResult:
        call = request.call
        platform_monitoring.log_event("invocation.start", {
            "workflow_id": request.workflow_id,
            "worker_id": request.worker_id,
            "url": call.url,
            "workflow_execution": request.is_workflow_execution,
        })
        try:
            self._preclear(request)
            response = self._send(request)
            data = self._decode(response)
            text = derive_response_text(data)
            ok = is_success(response.status_code)
            reason = status_text(response)

            action = decide(
                bool(request.workflow_id),
                request.is_workflow_execution,
                Outcome.SUCCESS if ok else Outcome.REJECTED,
            )
            if action is not AuditAction.NO_OP:
                self.audit_store.insert_entry(
                    request.workflow_id,
                    action.level,
                    SUCCESS_MESSAGE if ok else FAILURE_PREFIX + reason,
                    {"status": response.status_code, "response": data},
                )

            if not ok:
                message = data.get("message") if isinstance(data, dict) else None
                raise RemoteRejection(
                    str(message) if message else FAILURE_PREFIX + reason,
                    status=response.status_code,
                    details=data,
                )
        except InvocationError as exc:
            self._on_failure(request, exc)
            raise
        except Exception as exc:
            self._on_failure(request, exc)
            raise UnknownFailure(str(exc) or CONNECT_FAILURE_MESSAGE) from exc

        platform_monitoring.log_event("invocation.success", {
            "workflow_id": request.workflow_id,
            "status": response.status_code,
        })
        if notify and self.notifier is not None:
            self.notifier.success(SUCCESS_MESSAGE)
        return InvocationResult(response=text)

    def _preclear(self, request: InvocationRequest) -> None:
        if not request.workflow_id:
            return
        # best-effort: logged, never raised
        try:
            self.audit_store.delete_entries(request.workflow_id, SUCCESS_MESSAGE)
        except Exception as exc:
            platform_monitoring.log_event("invocation.preclear.error", {
                "workflow_id": request.workflow_id,
                "error": str(exc),
            })

    def _headers(self, request: InvocationRequest) -> Dict[str, str]:
        return {
            "Content-Type": request.call.content_type,
            "Authorization": bearer(request.auth_token),
        }

    def _send(self, request: InvocationRequest) -> requests.Response:
        call = request.call
        try:
            return self.session.request(
                call.method.upper(),
                call.url,
                headers=self._headers(request),
                data=json.dumps(request.body()),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise NetworkFailure(str(exc) or CONNECT_FAILURE_MESSAGE) from exc

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeFailure(
                f"Invalid JSON in worker response ({response.status_code}): {exc}",
                status=response.status_code,
                details={"body": response.text[:2000] if isinstance(response.text, str) else None},
            ) from exc

    # -------------------------------------------------- failure path -------
    def _on_failure(self, request: InvocationRequest, exc: BaseException) -> None:
        platform_monitoring.log_error(exc, {
            "workerId": request.worker_id,
            "url": request.call.url,
            "method": request.call.method,
        })
        if decide(bool(request.workflow_id), request.is_workflow_execution, Outcome.FAILED) is AuditAction.NO_OP:
            return
        message = str(exc) or CONNECT_FAILURE_MESSAGE
        try:
            self.audit_store.insert_entry(
                request.workflow_id,
                "error",
                message,
                {
                    "error": message,
                    "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
                },
            )
        except Exception as audit_exc:
            platform_monitoring.log_event("invocation.audit.error", {
                "workflow_id": request.workflow_id,
                "error": str(audit_exc),
            })


__all__ = [
    "InvocationPipeline",
    "SUCCESS_MESSAGE",
    "FAILURE_PREFIX",
    "CONNECT_FAILURE_MESSAGE",
    "status_text",
    "is_success",
]
