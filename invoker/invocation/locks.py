"""Optional per-workflow serialization for invocations.

Two attempts for the same workflow can interleave their pre-clear and insert
steps, so a success row written by one may be deleted by the other. Passing a
lock to the pipeline holds it around the whole attempt for that workflow id.

Backends:
- NullWorkflowLock: no serialization (pipeline default)
- InProcessWorkflowLock: one threading.Lock per workflow id
- RedisWorkflowLock: redis-py Lock, for several processes sharing a store
"""
from __future__ import annotations

import contextlib
import threading
from typing import Dict, Iterator, List, Optional, Protocol

import redis
from redis.exceptions import RedisError

import platform_monitoring
from config import settings

from .exceptions import LockUnavailable


class WorkflowLock(Protocol):
    def hold(self, workflow_id: str) -> contextlib.AbstractContextManager: ...


class NullWorkflowLock:
    @contextlib.contextmanager
    def hold(self, workflow_id: str) -> Iterator[None]:
        yield


class InProcessWorkflowLock:
    """One threading.Lock per workflow id, dropped once nobody holds or awaits it."""

    def __init__(self):
        self._guard = threading.Lock()
        # workflow id -> [lock, holders + waiters]
        self._locks: Dict[str, List] = {}

    def _checkout(self, workflow_id: str) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(workflow_id)
            if entry is None:
                entry = self._locks[workflow_id] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _checkin(self, workflow_id: str) -> None:
        with self._guard:
            entry = self._locks[workflow_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[workflow_id]

    @contextlib.contextmanager
    def hold(self, workflow_id: str) -> Iterator[None]:
        lock = self._checkout(workflow_id)
        try:
            with lock:
                yield
        finally:
            self._checkin(workflow_id)


class RedisWorkflowLock:
    """Lock keyed ``<namespace>:lock:workflow:<id>`` with a TTL.

    The TTL bounds how long a crashed holder blocks others; keep it above the
    slowest expected worker call. A lock that expired mid-attempt is logged on
    release, not raised, so the attempt's own outcome stands.
    """

    def __init__(
        self,
        client: Optional[redis.Redis] = None,
        url: Optional[str] = None,
        namespace: Optional[str] = None,
        ttl: Optional[int] = None,
        blocking_timeout: Optional[float] = None,
    ):
        if client is None:
            url = url or settings.REDIS_URL
            if not url:
                raise RuntimeError("REDIS_URL not configured for RedisWorkflowLock")
            client = redis.from_url(url, decode_responses=True)
        self.client = client
        self.ns = namespace if namespace is not None else settings.REDIS_NAMESPACE
        self.ttl = ttl or settings.WORKFLOW_LOCK_TTL
        self.blocking_timeout = blocking_timeout

    def key(self, workflow_id: str) -> str:
        name = f"lock:workflow:{workflow_id}"
        return f"{self.ns}:{name}" if self.ns else name

    @contextlib.contextmanager
    def hold(self, workflow_id: str) -> Iterator[None]:
        lock = self.client.lock(self.key(workflow_id), timeout=self.ttl, blocking_timeout=self.blocking_timeout)
        try:
            acquired = lock.acquire()
        except RedisError as exc:
            raise LockUnavailable(f"lock backend unavailable for workflow {workflow_id}: {exc}") from exc
        if not acquired:
            raise LockUnavailable(f"could not acquire lock for workflow {workflow_id}")
        try:
            yield
        finally:
            try:
                lock.release()
            except RedisError as exc:
                platform_monitoring.log_event("invocation.lock.error", {
                    "workflow_id": workflow_id,
                    "error": str(exc),
                })


__all__ = ["WorkflowLock", "NullWorkflowLock", "InProcessWorkflowLock", "RedisWorkflowLock"]
