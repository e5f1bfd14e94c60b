"""Value types passed into and out of the invocation pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from config import settings

PLACEHOLDER_WORKER_ID = "your-worker-id"
PLACEHOLDER_AUTH_TOKEN = "your-auth-token"

# Marks a call made while running a real workflow rather than an ad hoc test.
WORKFLOW_VARIABLE = "workflow"

NO_RESPONSE_TEXT = "No response received"
RESPONSE_FIELDS = ("result", "responseText", "response", "message")


@dataclass(frozen=True)
class CallDescriptor:
    """The one outbound HTTP call a workflow knows how to make."""

    method: str
    url: str
    content_type: str = "application/json"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CallDescriptor":
        return cls(
            method=d["method"],
            url=d["url"],
            content_type=d.get("content_type") or "application/json",
        )

    def to_dict(self) -> Dict[str, str]:
        return {"method": self.method, "url": self.url, "content_type": self.content_type}


DEFAULT_CALL = CallDescriptor(
    method=settings.WORKER_API_METHOD,
    url=settings.WORKER_API_URL,
    content_type=settings.WORKER_API_CONTENT_TYPE,
)


@dataclass
class InvocationRequest:
    worker_id: str
    auth_token: str
    call: CallDescriptor = DEFAULT_CALL
    variables: Dict[str, str] = field(default_factory=dict)
    workflow_id: Optional[str] = None

    @property
    def is_workflow_execution(self) -> bool:
        return WORKFLOW_VARIABLE in self.variables

    def body(self) -> Dict[str, Any]:
        return {"workerId": self.worker_id, "variables": self.variables}


@dataclass
class InvocationResult:
    response: str
    success: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "data": {"response": self.response}}


def bearer(token: str) -> str:
    """Return ``token`` as an Authorization header value; idempotent."""
    return token if token.startswith("Bearer ") else f"Bearer {token}"


def derive_response_text(data: Any) -> str:
    """Pick the display text out of a decoded worker response.

    Checks ``result``, ``responseText``, ``response`` then ``message``; the
    first truthy value wins, so ``0``, ``False``, ``""``, ``[]`` and ``{}``
    fall through to the next field.
    """
    if isinstance(data, dict):
        for name in RESPONSE_FIELDS:
            value = data.get(name)
            if not value:
                continue
            return value if isinstance(value, str) else json.dumps(value, default=str)
    return NO_RESPONSE_TEXT


__all__ = [
    "PLACEHOLDER_WORKER_ID",
    "PLACEHOLDER_AUTH_TOKEN",
    "WORKFLOW_VARIABLE",
    "NO_RESPONSE_TEXT",
    "CallDescriptor",
    "DEFAULT_CALL",
    "InvocationRequest",
    "InvocationResult",
    "bearer",
    "derive_response_text",
]
