import contextlib
import json
import logging
from unittest.mock import MagicMock, patch

import pytest
import requests
from redis.exceptions import ConnectionError as RedisConnectionError, LockNotOwnedError

from conftest import make_response, make_session
from invoker.invocation.exceptions import (
    DecodeFailure,
    InvocationError,
    LockUnavailable,
    NetworkFailure,
    PreconditionFailure,
    RemoteRejection,
    UnknownFailure,
)
from invoker.invocation.locks import RedisWorkflowLock
from invoker.invocation.models import CallDescriptor, InvocationRequest
from invoker.invocation.pipeline import SUCCESS_MESSAGE, InvocationPipeline

CALL = CallDescriptor(method="post", url="https://worker.example.test/run", content_type="application/json")


def req(workflow_id="w1", variables=None, worker_id="worker-1", token="abc"):
    return InvocationRequest(
        worker_id=worker_id,
        auth_token=token,
        call=CALL,
        variables={} if variables is None else variables,
        workflow_id=workflow_id,
    )


def pipeline_for(audit_store, *responses, notifier=None, lock=None):
    return InvocationPipeline(audit_store, notifier=notifier, session=make_session(*responses), lock=lock)


# --- preconditions -----------------------------------------------------------

@pytest.mark.parametrize(
    "worker_id, token",
    [
        ("", "abc"),
        ("   ", "abc"),
        ("your-worker-id", "abc"),
        ("worker-1", ""),
        ("worker-1", "your-auth-token"),
    ],
)
def test_preconditions_block_network_and_store(worker_id, token):
    store = MagicMock()
    session = MagicMock(spec=requests.Session)
    pipeline = InvocationPipeline(store, session=session)
    with pytest.raises(PreconditionFailure):
        pipeline.invoke(req(worker_id=worker_id, token=token))
    session.request.assert_not_called()
    assert store.mock_calls == []


def test_precondition_messages():
    pipeline = InvocationPipeline(MagicMock(), session=MagicMock(spec=requests.Session))
    with pytest.raises(PreconditionFailure, match="Worker ID is not configured"):
        pipeline.invoke(req(worker_id=""))
    with pytest.raises(PreconditionFailure, match="API authentication token is not configured"):
        pipeline.invoke(req(token="your-auth-token"))


# --- response text -----------------------------------------------------------

@pytest.mark.parametrize(
    "body, expected",
    [
        ({"result": "ok"}, "ok"),
        ({"responseText": "ok2"}, "ok2"),
        ({"response": "r", "message": "m"}, "r"),
        ({"message": "only message"}, "only message"),
        ({"result": "", "responseText": "fallthrough"}, "fallthrough"),
        ({"result": 0, "responseText": "x"}, "x"),
        ({"result": False, "response": [], "message": "m"}, "m"),
        ({"result": {"rows": 2}}, "{\"rows\": 2}"),
        ({}, "No response received"),
    ],
)
def test_response_text_probing(audit_store, body, expected):
    result = pipeline_for(audit_store, make_response(200, body)).invoke(req(workflow_id=None))
    assert result.response == expected
    assert result.to_dict() == {"success": True, "data": {"response": expected}}


# --- wire format ---------------------------------------------------------------

@pytest.mark.parametrize("token, header", [("abc", "Bearer abc"), ("Bearer abc", "Bearer abc")])
def test_authorization_header_prefixing(audit_store, token, header):
    session = make_session(make_response(200, {"result": "ok"}))
    InvocationPipeline(audit_store, session=session).invoke(req(token=token))
    _, kwargs = session.request.call_args
    assert kwargs["headers"]["Authorization"] == header


def test_request_shape(audit_store):
    session = make_session(make_response(200, {"result": "ok"}))
    pipeline = InvocationPipeline(audit_store, session=session, timeout=5)
    pipeline.invoke(req(variables={"request": "hello"}))
    args, kwargs = session.request.call_args
    assert args == ("POST", "https://worker.example.test/run")
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert json.loads(kwargs["data"]) == {"workerId": "worker-1", "variables": {"request": "hello"}}
    assert kwargs["timeout"] == 5


# --- audit policy ----------------------------------------------------------------

def test_workflow_execution_success_writes_no_row(audit_store):
    pipeline_for(audit_store, make_response(200, {"result": "ok"})).invoke(req(variables={"workflow": "x"}))
    assert audit_store.entries("w1") == []


def test_ad_hoc_success_writes_one_info_row(audit_store):
    pipeline_for(audit_store, make_response(200, {"result": "ok"})).invoke(req(variables={}))
    rows = audit_store.entries("w1")
    assert len(rows) == 1
    assert rows[0]["level"] == "info"
    assert rows[0]["message"] == "API request successful"
    assert rows[0]["details"] == {"status": 200, "response": {"result": "ok"}}


def test_non_2xx_writes_error_row_and_raises_rejection(audit_store):
    pipeline = pipeline_for(audit_store, make_response(401, {"error": "bad token"}, reason="Unauthorized"))
    with pytest.raises(RemoteRejection) as ei:
        pipeline.invoke(req(variables={}))
    assert ei.value.status == 401
    assert ei.value.message == "API request failed: Unauthorized"
    assert ei.value.details == {"error": "bad token"}
    rows = audit_store.entries("w1")
    assert len(rows) == 1
    assert rows[0]["level"] == "error"
    assert rows[0]["message"] == "API request failed: Unauthorized"
    assert rows[0]["details"]["status"] == 401


def test_rejection_message_prefers_body_message(audit_store):
    pipeline = pipeline_for(audit_store, make_response(429, {"message": "slow down"}, reason="Too Many Requests"))
    with pytest.raises(RemoteRejection, match="slow down") as ei:
        pipeline.invoke(req(workflow_id=None))
    assert ei.value.status == 429


def test_rejected_workflow_execution_is_audited_twice(audit_store):
    pipeline = pipeline_for(audit_store, make_response(500, {"message": "boom"}, reason="Internal Server Error"))
    with pytest.raises(RemoteRejection):
        pipeline.invoke(req(variables={"workflow": "Onboarding"}))
    rows = audit_store.entries("w1", level="error")
    assert [r["message"] for r in rows] == ["API request failed: Internal Server Error", "boom"]
    assert rows[1]["details"]["error"] == "boom"
    assert "RemoteRejection" in rows[1]["details"]["stack"]


def test_repeat_ad_hoc_success_keeps_single_success_row(audit_store):
    pipeline = pipeline_for(
        audit_store,
        make_response(200, {"result": "first"}),
        make_response(200, {"result": "second"}),
    )
    pipeline.invoke(req(variables={}))
    pipeline.invoke(req(variables={}))
    rows = [r for r in audit_store.entries("w1") if r["message"] == SUCCESS_MESSAGE]
    assert len(rows) == 1
    assert rows[0]["details"]["response"] == {"result": "second"}


def test_preclear_leaves_error_rows_alone(audit_store):
    audit_store.insert_entry("w1", "error", "API request failed: Bad Gateway", {})
    pipeline_for(audit_store, make_response(200, {"result": "ok"})).invoke(req(variables={}))
    messages = sorted(r["message"] for r in audit_store.entries("w1"))
    assert messages == ["API request failed: Bad Gateway", "API request successful"]


def test_no_workflow_id_touches_no_store():
    store = MagicMock()
    pipeline = InvocationPipeline(store, session=make_session(make_response(503, {}, reason="Service Unavailable")))
    with pytest.raises(RemoteRejection):
        pipeline.invoke(req(workflow_id=None, variables={"workflow": "x"}))
    assert store.mock_calls == []


# --- failure path ----------------------------------------------------------------

def test_network_failure_during_execution_is_audited(audit_store):
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = requests.ConnectionError("connection refused")
    pipeline = InvocationPipeline(audit_store, session=session)
    with pytest.raises(NetworkFailure) as ei:
        pipeline.invoke(req(variables={"workflow": "Onboarding"}))
    assert isinstance(ei.value.__cause__, requests.ConnectionError)
    rows = audit_store.entries("w1")
    assert len(rows) == 1
    assert rows[0]["level"] == "error"
    assert rows[0]["message"] == "connection refused"


def test_network_failure_during_ad_hoc_test_is_not_audited(audit_store):
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = requests.Timeout()
    pipeline = InvocationPipeline(audit_store, session=session)
    with pytest.raises(NetworkFailure) as ei:
        pipeline.invoke(req(variables={}))
    assert ei.value.message == "Failed to connect to the remote worker API"
    assert audit_store.entries("w1") == []


def test_decode_failure(audit_store):
    resp = make_response(200, "<html>", json_error=ValueError("Expecting value"))
    with pytest.raises(DecodeFailure) as ei:
        pipeline_for(audit_store, resp).invoke(req(variables={"workflow": "x"}))
    assert ei.value.status == 200
    assert isinstance(ei.value.__cause__, ValueError)
    assert len(audit_store.entries("w1", level="error")) == 1


def test_failures_are_reported_with_context(audit_store):
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = requests.ConnectionError("down")
    pipeline = InvocationPipeline(audit_store, session=session)
    with patch("platform_monitoring.log_error") as log_error:
        with pytest.raises(NetworkFailure):
            pipeline.invoke(req(workflow_id=None))
    err, context = log_error.call_args.args
    assert isinstance(err, NetworkFailure)
    assert context == {"workerId": "worker-1", "url": CALL.url, "method": "post"}


def test_preclear_failure_is_best_effort():
    store = MagicMock()
    store.delete_entries.side_effect = RuntimeError("store offline")
    pipeline = InvocationPipeline(store, session=make_session(make_response(200, {"result": "ok"})))
    assert pipeline.invoke(req(variables={})).response == "ok"
    store.insert_entry.assert_called_once()


def test_failure_audit_error_does_not_mask_original():
    store = MagicMock()
    store.insert_entry.side_effect = RuntimeError("insert failed")
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = requests.ConnectionError("down")
    pipeline = InvocationPipeline(store, session=session)
    with pytest.raises(NetworkFailure, match="down"):
        pipeline.invoke(req(variables={"workflow": "x"}))


def test_store_error_on_success_audit_surfaces_as_unknown_failure():
    store = MagicMock()
    store.insert_entry.side_effect = RuntimeError("insert failed")
    pipeline = InvocationPipeline(store, session=make_session(make_response(200, {"result": "ok"})))
    with pytest.raises(UnknownFailure) as ei:
        pipeline.invoke(req(variables={}))
    assert isinstance(ei.value, InvocationError)
    assert isinstance(ei.value.__cause__, RuntimeError)


# --- collaborators -----------------------------------------------------------------

def test_notifier_hears_success(audit_store, notifier):
    pipeline_for(audit_store, make_response(200, {"result": "ok"}), notifier=notifier).invoke(req())
    assert notifier.successes == ["API request successful"]


def test_lock_wraps_attempts_with_workflow_id(audit_store):
    held = []

    class RecordingLock:
        @contextlib.contextmanager
        def hold(self, workflow_id):
            held.append(workflow_id)
            yield

    pipeline = pipeline_for(
        audit_store,
        make_response(200, {"result": "a"}),
        make_response(200, {"result": "b"}),
        lock=RecordingLock(),
    )
    pipeline.invoke(req(workflow_id="w9"))
    pipeline.invoke(req(workflow_id=None))
    assert held == ["w9"]


def redis_lock(acquire=True, acquire_error=None, release_error=None):
    client = MagicMock()
    handle = client.lock.return_value
    handle.acquire.return_value = acquire
    handle.acquire.side_effect = acquire_error
    handle.release.side_effect = release_error
    return RedisWorkflowLock(client=client, namespace="test", ttl=1, blocking_timeout=0.1)


def test_expired_lock_on_release_keeps_the_result(audit_store, caplog):
    pipeline = pipeline_for(
        audit_store,
        make_response(200, {"result": "ok"}),
        lock=redis_lock(release_error=LockNotOwnedError("expired")),
    )
    with caplog.at_level(logging.INFO, logger="platform_monitoring"):
        result = pipeline.invoke(req(variables={}))
    assert result.response == "ok"
    assert [r["message"] for r in audit_store.entries("w1")] == [SUCCESS_MESSAGE]
    assert "invocation.lock.error" in caplog.text


def test_unavailable_lock_takes_the_failure_path(audit_store):
    session = make_session()
    pipeline = InvocationPipeline(audit_store, session=session, lock=redis_lock(acquire=False))
    with patch("platform_monitoring.log_error") as log_error:
        with pytest.raises(LockUnavailable) as ei:
            pipeline.invoke(req(variables={"workflow": "Onboarding"}))
    assert isinstance(ei.value, InvocationError)
    session.request.assert_not_called()
    err, context = log_error.call_args.args
    assert err is ei.value
    assert context == {"workerId": "worker-1", "url": CALL.url, "method": "post"}
    rows = audit_store.entries("w1", level="error")
    assert [r["message"] for r in rows] == ["could not acquire lock for workflow w1"]


def test_lock_backend_error_is_an_invocation_error(audit_store):
    lock = redis_lock(acquire_error=RedisConnectionError("refused"))
    pipeline = InvocationPipeline(audit_store, session=make_session(), lock=lock)
    with pytest.raises(LockUnavailable) as ei:
        pipeline.invoke(req(variables={}))
    assert isinstance(ei.value.__cause__, RedisConnectionError)
    # ad hoc tests leave no error rows
    assert audit_store.entries("w1") == []
