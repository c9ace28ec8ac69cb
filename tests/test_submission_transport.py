from __future__ import annotations

import json

import httpx
import pytest

from exam_app.core.errors import SubmissionError
from exam_app.core.models import SubmitResponse
from exam_app.core.services.submission_transport import HttpSubmissionTransport, post_submission

URL = "http://exam.test/forms/form-1/submit"


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_successful_reply_is_decoded():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            201, json={"success": True, "data": {"id": "abc", "score": 7, "maxScore": 10}}
        )

    with _client(handler) as client:
        response = post_submission(client, URL, {"answers": []})

    assert response == SubmitResponse(response_id="abc", score=7, max_score=10)
    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"answers": []}


def test_error_envelope_becomes_submission_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"success": False, "error": "You have already submitted"})

    with _client(handler) as client, pytest.raises(SubmissionError) as excinfo:
        post_submission(client, URL, {})

    assert str(excinfo.value) == "You have already submitted"
    assert excinfo.value.status_code == 409


def test_non_json_reply_becomes_submission_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad gateway</html>")

    with _client(handler) as client, pytest.raises(SubmissionError) as excinfo:
        post_submission(client, URL, {})

    assert excinfo.value.status_code == 502


def test_unreachable_server_becomes_submission_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client, pytest.raises(SubmissionError) as excinfo:
        post_submission(client, URL, {})

    assert excinfo.value.status_code is None
    assert "Could not reach the exam server" in str(excinfo.value)


def test_success_without_data_object_becomes_submission_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json={"success": True, "data": "ok"})

    with _client(handler) as client, pytest.raises(SubmissionError) as excinfo:
        post_submission(client, URL, {})

    assert excinfo.value.status_code == 201


def test_unencodable_payload_becomes_submission_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("nothing should be sent")

    with _client(handler) as client, pytest.raises(SubmissionError) as excinfo:
        post_submission(client, URL, {"answers": [{"fieldId": "n1", "value": float("inf")}]})

    assert "Could not encode the submission" in str(excinfo.value)


def test_transport_builds_submit_url():
    transport = HttpSubmissionTransport("http://127.0.0.1:8000/", "python-basics")

    assert transport.url == "http://127.0.0.1:8000/forms/python-basics/submit"


def test_transport_reports_success_on_the_qt_thread(qtbot):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json={"success": True, "data": {"id": "r1"}})

    transport = HttpSubmissionTransport(
        "http://exam.test", "form-1", http_transport=httpx.MockTransport(handler)
    )
    successes, failures = [], []

    transport.send({"answers": []}, successes.append, failures.append)
    qtbot.waitUntil(lambda: bool(successes or failures), timeout=5000)

    assert successes == [SubmitResponse(response_id="r1")]
    assert failures == []


def test_transport_reports_failure(qtbot):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"success": False, "error": "Server unavailable"})

    transport = HttpSubmissionTransport(
        "http://exam.test", "form-1", http_transport=httpx.MockTransport(handler)
    )
    successes, failures = [], []

    transport.send({}, successes.append, failures.append)
    qtbot.waitUntil(lambda: bool(successes or failures), timeout=5000)

    assert successes == []
    assert [str(error) for error in failures] == ["Server unavailable"]


def test_transport_reports_unexpected_worker_errors_as_failures(qtbot):
    def handler(request: httpx.Request) -> httpx.Response:
        raise RuntimeError("worker exploded")

    transport = HttpSubmissionTransport(
        "http://exam.test", "form-1", http_transport=httpx.MockTransport(handler)
    )
    successes, failures = [], []

    transport.send({}, successes.append, failures.append)
    qtbot.waitUntil(lambda: bool(successes or failures), timeout=5000)

    assert successes == []
    assert [str(error) for error in failures] == ["Submission failed: worker exploded"]
