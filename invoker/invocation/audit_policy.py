"""When an invocation attempt writes an audit row, and at which level.

Keyed by (has workflow id, is workflow execution, outcome):

    has id | workflow exec | outcome  | action
    -------+---------------+----------+-------------
    no     | any           | any      | NO_OP
    yes    | no            | SUCCESS  | INSERT_INFO
    yes    | yes           | SUCCESS  | NO_OP
    yes    | any           | REJECTED | INSERT_ERROR
    yes    | yes           | FAILED   | INSERT_ERROR
    yes    | no            | FAILED   | NO_OP

REJECTED is a non-2xx response seen while the response is still in hand;
FAILED is the exception path afterwards. A rejected workflow execution hits
both rows, so it is audited twice.

Ad hoc tests (no ``workflow`` variable) keep only their latest success row:
the pipeline clears earlier ones before each attempt.
"""

from __future__ import annotations

import enum
from typing import Dict, Tuple


class Outcome(str, enum.Enum):
    SUCCESS = "success"
    REJECTED = "rejected"
    FAILED = "failed"


class AuditAction(str, enum.Enum):
    NO_OP = "no-op"
    INSERT_INFO = "insert-info"
    INSERT_ERROR = "insert-error"

    @property
    def level(self) -> str | None:
        return {"insert-info": "info", "insert-error": "error"}.get(self.value)


_TABLE: Dict[Tuple[bool, Outcome], AuditAction] = {
    # (is_workflow_execution, outcome) -> action, for requests tied to a workflow
    (False, Outcome.SUCCESS): AuditAction.INSERT_INFO,
    (True, Outcome.SUCCESS): AuditAction.NO_OP,
    (False, Outcome.REJECTED): AuditAction.INSERT_ERROR,
    (True, Outcome.REJECTED): AuditAction.INSERT_ERROR,
    (False, Outcome.FAILED): AuditAction.NO_OP,
    (True, Outcome.FAILED): AuditAction.INSERT_ERROR,
}


def decide(has_workflow_id: bool, is_workflow_execution: bool, outcome: Outcome) -> AuditAction:
    if not has_workflow_id:
        return AuditAction.NO_OP
    return _TABLE[(bool(is_workflow_execution), Outcome(outcome))]


__all__ = ["Outcome", "AuditAction", "decide"]
