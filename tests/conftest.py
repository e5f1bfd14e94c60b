import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from invoker.audit.store import WorkflowLogStore
from invoker.notify.adapters import RecordingNotifier
from invoker.tools.persistence import metrics
from invoker.tools.persistence.adapters.in_memory_adapter import InMemoryAdapter
from invoker.tools.persistence.service import PersistenceService

# --- .env loader -----------------------------------------------------------

def _load_env_file(filename: str = '.env'):
    """Lightweight .env loader so local overrides apply to test runs too."""
    root = Path(__file__).resolve().parent.parent
    env_path = root / filename
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        if k and k not in os.environ:
            os.environ[k] = v

_load_env_file()


# --- HTTP fakes ------------------------------------------------------------

def make_response(status: int = 200, body=None, reason: str = "OK", json_error: Exception | None = None):
    """Build a stand-in for requests.Response with the attributes the pipeline reads."""
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    resp.reason = reason
    resp.text = "" if body is None else str(body)
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = {} if body is None else body
    return resp


def make_session(*responses):
    """A MagicMock session whose ``request`` returns ``responses`` in order."""
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = list(responses)
    return session


# --- fixtures --------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield


@pytest.fixture
def adapter():
    return InMemoryAdapter()


@pytest.fixture
def service(adapter):
    return PersistenceService(adapter)


@pytest.fixture
def audit_store(service):
    return WorkflowLogStore(service)


@pytest.fixture
def notifier():
    return RecordingNotifier()
