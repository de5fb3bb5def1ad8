from datetime import datetime, timezone
import json

import httpx
import pytest

from accumulation_tracker.errors import PersistenceFailure
from accumulation_tracker.integrations.table_api import TableClient, TableSessionSink
from accumulation_tracker.schemas.history import AttemptCreate, HistoryCreate
from accumulation_tracker.engine import TrainingMode

WHEN = datetime(2026, 3, 1, 7, 31, tzinfo=timezone.utc)


class Recorder:
    """MockTransport handler that remembers requests and answers from a queue."""
    def __init__(self, *responses):
        self.requests = []
        self.responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)


def make_client(handler):
    return TableClient(
        "key-123", "appBASE",
        base_url="https://tables.example/v0/",
        transport=httpx.MockTransport(handler),
    )


def finished(name="Handstand", holds=(40, 30)):
    return HistoryCreate(
        preset_id=1, date=WHEN, total_accumulated=sum(h - 5 for h in holds), target=60,
        attempt_count=len(holds), session_duration=72,
        attempts=[AttemptCreate(value=h, adjustment=5, total_counted=h - 5, timestamp=WHEN) for h in holds],
        exercise_name=name, mode=TrainingMode.time, rest_time=15, adjustment=5,
    )


def test_auth_header_and_base_url():
    rec = Recorder(httpx.Response(200, json={"id": "sess1", "fields": {"target": 60}}))
    with make_client(rec) as client:
        assert client.create_session({"target": 60}) == {"id": "sess1", "target": 60}
    req = rec.requests[0]
    assert req.method == "POST"
    assert req.headers["Authorization"] == "Bearer key-123"
    assert str(req.url) == "https://tables.example/v0/appBASE/Sessions"


def test_create_session_stamps_completion_time():
    rec = Recorder(httpx.Response(200, json={"id": "sess1", "fields": {}}))
    make_client(rec).create_session({"exercise_name": "Handstand"})
    fields = json.loads(rec.requests[0].content)["fields"]
    assert fields["exercise_name"] == "Handstand"
    assert datetime.fromisoformat(fields["completed_at"]).tzinfo is not None


def test_attempts_created_in_one_batch():
    rec = Recorder(httpx.Response(200, json={"records": [
        {"id": "a1", "fields": {"attempt_number": 1}},
        {"id": "a2", "fields": {"attempt_number": 2}},
    ]}))
    created = make_client(rec).create_attempts([{"attempt_number": 1}, {"attempt_number": 2}])
    assert [a["id"] for a in created] == ["a1", "a2"]
    assert len(rec.requests) == 1
    assert rec.requests[0].url.path.endswith("/Attempts")


def test_error_status_is_persistence_failure():
    rec = Recorder(httpx.Response(422, json={"error": {"type": "INVALID_REQUEST_UNKNOWN"}}))
    with pytest.raises(PersistenceFailure, match="INVALID_REQUEST_UNKNOWN"):
        make_client(rec).create_session({})


def test_transport_error_is_persistence_failure():
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)
    with pytest.raises(PersistenceFailure):
        make_client(boom).create_attempts([{"attempt_number": 1}])


def test_sink_writes_session_then_numbered_attempts():
    rec = Recorder(
        httpx.Response(200, json={"id": "sess1", "fields": {}}),
        httpx.Response(200, json={"records": [{"id": "a1", "fields": {}}, {"id": "a2", "fields": {}}]}),
    )
    assert TableSessionSink(make_client(rec)).save(finished())["id"] == "sess1"

    session_req, attempts_req = rec.requests
    fields = json.loads(session_req.content)["fields"]
    assert fields["exercise_name"] == "Handstand"
    assert fields["mode"] == "time"
    assert fields["session_duration"] == 72
    records = json.loads(attempts_req.content)["records"]
    assert [r["fields"]["attempt_number"] for r in records] == [1, 2]
    assert {r["fields"]["session_ref"] for r in records} == {"sess1"}


def test_names_with_quotes_travel_as_json_values():
    rec = Recorder(
        httpx.Response(200, json={"id": "sess1", "fields": {}}),
        httpx.Response(200, json={"records": []}),
    )
    TableSessionSink(make_client(rec)).save(finished(name='Front "lever"'))
    assert json.loads(rec.requests[0].content)["fields"]["exercise_name"] == 'Front "lever"'
    assert rec.requests[0].url.query == b""


def test_sink_skips_attempts_call_when_there_are_none():
    rec = Recorder(httpx.Response(200, json={"id": "sess1", "fields": {}}))
    TableSessionSink(make_client(rec)).save(finished(holds=()))
    assert len(rec.requests) == 1
