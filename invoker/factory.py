"""Composition helpers: adapters → services → stores → pipeline.

One place decides the backend (``kind='supabase'`` or ``'memory'``), the table
allowlists and which lock/notifier the pipeline gets, so callers (CLI, tests)
never repeat the wiring.
"""

from __future__ import annotations

from typing import Optional

import requests

from config import settings
from invoker.audit.store import WorkflowLogStore
from invoker.config.store_config import get_read_allowlist, get_write_allowlist
from invoker.invocation.locks import InProcessWorkflowLock, NullWorkflowLock, RedisWorkflowLock, WorkflowLock
from invoker.invocation.pipeline import InvocationPipeline
from invoker.notify.adapters import LoggingNotifier
from invoker.notify.interface import Notifier
from invoker.tools.persistence.adapters.in_memory_adapter import InMemoryAdapter
from invoker.tools.persistence.service import PersistenceService, build_supabase_service
from invoker.workflows.repository import WorkflowRepository


def build_service(kind: str = "supabase") -> PersistenceService:
    read_tables = get_read_allowlist()
    write_tables = get_write_allowlist()
    if kind == "supabase":
        return build_supabase_service(read_allowlist=read_tables, write_allowlist=write_tables)
    elif kind == "memory":
        return PersistenceService(InMemoryAdapter(), read_allowlist=read_tables, write_allowlist=write_tables)
    else:
        raise ValueError(f"Unknown persistence backend kind '{kind}'")


def build_lock(kind: str = "none") -> WorkflowLock:
    if kind == "none":
        return NullWorkflowLock()
    if kind == "local":
        return InProcessWorkflowLock()
    if kind == "redis":
        return RedisWorkflowLock()
    raise ValueError(f"Unknown workflow lock kind '{kind}'")


def create_pipeline(
    service: PersistenceService,
    notifier: Optional[Notifier] = None,
    lock: Optional[WorkflowLock] = None,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = settings.WORKER_API_TIMEOUT,
) -> InvocationPipeline:
    return InvocationPipeline(
        audit_store=WorkflowLogStore(service),
        notifier=notifier if notifier is not None else LoggingNotifier(),
        session=session,
        timeout=timeout,
        lock=lock,
    )


def create_repository(service: PersistenceService) -> WorkflowRepository:
    return WorkflowRepository(service, audit_store=WorkflowLogStore(service))


__all__ = ["build_service", "build_lock", "create_pipeline", "create_repository"]
