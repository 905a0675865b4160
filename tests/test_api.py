"""
Integration tests for the HTTP API.
"""

import time

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from conftest import RecordingSink, make_bank


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def client(sink):
    app = create_app(question_bank=make_bank(6), report_sink=sink)
    with TestClient(app) as c:
        yield c


def start_untimed(client, size=4):
    resp = client.post("/api/start-exam", json={"size": size, "duration_minutes": 0, "student_name": "Lee"})
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestExamFlow:
    def test_status_before_start(self, client):
        data = client.get("/api/session-status").json()

        assert data["question_count"] == 6
        assert data["state"] == "idle"

    def test_full_attempt(self, client, sink):
        started = start_untimed(client)
        assert started["total"] == 4
        assert started["remaining_seconds"] is None

        question = client.get("/api/question/0").json()
        assert [o["letter"] for o in question["options"]] == ["A", "B", "C", "D"]
        assert "correct_index" not in question
        assert "explanation" not in question

        assert client.post("/api/save-answer", json={"position": 0, "option_index": 1}).json()["answered_count"] == 1
        assert client.post("/api/save-answer", json={"position": 1, "option_index": 1}).json()["answered_count"] == 2
        assert client.get("/api/question/1").json()["saved_answer"] == 1

        state = client.get("/api/exam-state").json()
        assert state["state"] == "active"
        assert state["answered_count"] == 2
        assert state["total"] == 4

        submitted = client.post("/api/submit-exam").json()
        assert submitted["percent"] == 50
        assert submitted["finish_reason"] == "manual"
        assert submitted["already_finished"] is False

        results = client.get("/api/results").json()
        assert results["total"] == 4
        assert results["answered"] == 2
        assert results["correct"] == 2
        assert results["unanswered"] == 2
        assert results["student_name"] == "Lee"
        assert len(results["items"]) == 4

        assert len(sink.payloads) == 1
        assert sink.payloads[0].student_name == "Lee"

    def test_double_submit(self, client, sink):
        start_untimed(client)
        client.post("/api/submit-exam")

        again = client.post("/api/submit-exam").json()

        assert again["already_finished"] is True
        assert len(sink.payloads) == 1

    def test_start_while_active_conflicts(self, client):
        start_untimed(client)

        assert client.post("/api/start-exam", json={"duration_minutes": 0}).status_code == 409

    def test_invalid_answer(self, client):
        start_untimed(client)

        resp = client.post("/api/save-answer", json={"position": 0, "option_index": 9})

        assert resp.status_code == 400
        assert client.get("/api/exam-state").json()["answered_count"] == 0

    def test_clear_answer(self, client):
        start_untimed(client)
        client.post("/api/save-answer", json={"position": 2, "option_index": 0})

        resp = client.post("/api/clear-answer", json={"position": 2})

        assert resp.json()["answered_count"] == 0

    def test_answer_after_submit_conflicts(self, client):
        start_untimed(client)
        client.post("/api/submit-exam")

        assert client.post("/api/save-answer", json={"position": 0, "option_index": 1}).status_code == 409

    def test_results_before_submit(self, client):
        start_untimed(client)

        assert client.get("/api/results").status_code == 400

    def test_no_session(self, client):
        assert client.get("/api/exam-state").status_code == 404
        assert client.get("/api/question/0").status_code == 404
        assert client.post("/api/submit-exam").status_code == 400

    def test_timed_exam_reports_remaining_time(self, client):
        started = client.post("/api/start-exam", json={"size": 3, "duration_minutes": 1}).json()

        assert started["duration_seconds"] == 60
        assert 0 < started["remaining_seconds"] <= 60
        assert 0 < client.get("/api/exam-state").json()["remaining_seconds"] <= 60

        client.post("/api/reset")
        assert client.get("/api/session-status").json()["state"] == "idle"

    def test_restart_after_submit(self, client):
        start_untimed(client)
        client.post("/api/submit-exam")

        assert start_untimed(client, size=2)["total"] == 2
        assert client.get("/api/exam-state").json()["answered_count"] == 0


    def test_timer_expiry_finishes_attempt(self, client, sink):
        client.post("/api/start-exam", json={"size": 3, "duration_minutes": 1 / 60})
        client.post("/api/save-answer", json={"position": 0, "option_index": 1})

        time.sleep(1.5)
        state = client.get("/api/exam-state").json()

        assert state["state"] == "finished"
        assert state["finish_reason"] == "timeout"
        assert state["remaining_seconds"] == 0
        assert client.post("/api/submit-exam").json()["already_finished"] is True
        assert client.get("/api/results").json()["answered"] == 1
        assert len(sink.payloads) == 1


class TestSampleExam:
    def test_sample_exam_skips_blank_options(self, client):
        resp = client.post("/api/start-sample-exam", json={"duration_minutes": 0})
        assert resp.json()["total"] == 5

        option_counts = sorted(
            len(client.get(f"/api/question/{i}").json()["options"]) for i in range(5)
        )
        assert option_counts == [4, 4, 4, 4, 4]


def test_empty_bank_rejected():
    app = create_app(question_bank=[], report_sink=RecordingSink())
    with TestClient(app) as client:
        resp = client.post("/api/start-exam", json={"duration_minutes": 0})

    assert resp.status_code == 400


def test_no_html_index_is_served(client):
    assert client.get("/").status_code == 404
    assert client.get("/docs").status_code == 200
