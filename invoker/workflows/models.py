"""Pydantic models for stored workflow records."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from invoker.invocation.models import DEFAULT_CALL, CallDescriptor


class Variable(BaseModel):
    name: str
    value: str = ""


class ApiConfigModel(BaseModel):
    method: str = DEFAULT_CALL.method
    url: str = DEFAULT_CALL.url
    content_type: str = DEFAULT_CALL.content_type

    def descriptor(self) -> CallDescriptor:
        return CallDescriptor(method=self.method, url=self.url, content_type=self.content_type)


def _default_variables() -> List[Variable]:
    # every workflow starts with the "request" input the worker expects
    return [Variable(name="request", value="request")]


class WorkflowModel(BaseModel):
    name: str = ""
    description: Optional[str] = None
    status: str = "active"
    worker_id: str = ""
    api_auth_token: str = ""
    api_config: ApiConfigModel = Field(default_factory=ApiConfigModel)
    variables: List[Variable] = Field(default_factory=_default_variables)
    supports_documents: bool = False
    supports_images: bool = False

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.name.strip():
            missing.append("Workflow Name")
        if not self.worker_id.strip():
            missing.append("Worker ID")
        if not self.api_auth_token.strip():
            missing.append("Authorization")
        if not self.variables:
            missing.append("At least one variable")
        return missing

    def variables_map(self) -> Dict[str, str]:
        return {v.name: v.value for v in self.variables}

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "WorkflowModel":
        data = {k: v for k, v in row.items() if k in cls.model_fields and v is not None}
        return cls.model_validate(data)


__all__ = ["Variable", "ApiConfigModel", "WorkflowModel"]
