"""
Unit tests for report payloads and sinks.
"""

import json

import httpx
import pytest

from conftest import RecordingSink
from timed_exam.models.score_report import QuestionResult, ScoreReport
from timed_exam.models.session_state import FinishReason
from timed_exam.services.report_sink import (
    HttpReportSink,
    LoggingReportSink,
    build_payload,
    emit_report,
    make_sink,
)


@pytest.fixture
def report():
    return ScoreReport(
        total=2,
        answered=1,
        correct=1,
        percent=50,
        items=(
            QuestionResult(
                position=0, question_id="q0", prompt="Q0?", chosen_index=1,
                chosen_letter="B", chosen_text="beta", correct_index=1,
                correct_letter="B", correct_text="beta", is_correct=True,
            ),
            QuestionResult(
                position=1, question_id="q1", prompt="Q1?", correct_index=0,
                correct_letter="A", correct_text="alpha",
            ),
        ),
        finish_reason=FinishReason.TIMEOUT,
        elapsed_seconds=75,
    )


class TestBuildPayload:
    def test_fields(self, report):
        payload = build_payload(report, " Kim ")

        assert payload.student_name == "Kim"
        assert payload.score == 1
        assert payload.total == 2
        assert payload.percent == 50
        assert payload.answered == 1
        assert payload.duration_sec == 75
        assert payload.items[1]["chosen_text"] == "(no answer)"

    def test_blank_name_is_anonymous(self, report):
        assert build_payload(report, "").student_name == "Anonymous"
        assert build_payload(report).student_name == "Anonymous"

    def test_serializes_camel_case(self, report):
        data = json.loads(build_payload(report, "Kim").model_dump_json(by_alias=True))

        assert data["studentName"] == "Kim"
        assert data["durationSec"] == 75
        assert data["score"] == 1


class TestHttpReportSink:
    @pytest.mark.asyncio
    async def test_posts_payload(self, report):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text="ok")

        sink = HttpReportSink("https://example.test/exec", transport=httpx.MockTransport(handler))

        task = sink.submit(build_payload(report, "Kim"))
        await task

        assert len(seen) == 1
        assert seen[0].method == "POST"
        assert seen[0].headers["content-type"].startswith("text/plain")
        body = json.loads(seen[0].content)
        assert body["studentName"] == "Kim"
        assert body["percent"] == 50
        assert sink.last_error is None

    @pytest.mark.asyncio
    async def test_server_error_is_recorded_not_raised(self, report):
        sink = HttpReportSink(
            "https://example.test/exec",
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )

        await sink.submit(build_payload(report))

        assert isinstance(sink.last_error, httpx.HTTPStatusError)

    @pytest.mark.asyncio
    async def test_transport_error_is_recorded_not_raised(self, report):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        sink = HttpReportSink("https://example.test/exec", transport=httpx.MockTransport(handler))

        await sink.submit(build_payload(report))

        assert isinstance(sink.last_error, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_malformed_endpoint_is_recorded_not_raised(self, report):
        sink = HttpReportSink("http://exa mple.test:abc/exec")

        task = sink.submit(build_payload(report))
        await task

        assert task.exception() is None
        assert isinstance(sink.last_error, httpx.InvalidURL)

    def test_submit_without_event_loop_uses_thread(self, report):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200)

        sink = HttpReportSink("https://example.test/exec", transport=httpx.MockTransport(handler))

        thread = sink.submit(build_payload(report))
        thread.join(timeout=5)

        assert not thread.is_alive()
        assert len(seen) == 1

    def test_requires_endpoint(self):
        with pytest.raises(ValueError):
            HttpReportSink("")


class TestEmitReport:
    def test_forwards_to_sink(self, report):
        sink = RecordingSink()

        emit_report(sink, build_payload(report))

        assert len(sink.payloads) == 1

    def test_swallows_sink_errors(self, report, failing_sink):
        assert emit_report(failing_sink, build_payload(report)) is None
        assert isinstance(failing_sink.last_error, ConnectionError)

    def test_no_sink(self, report):
        assert emit_report(None, build_payload(report)) is None

    def test_logging_sink_keeps_history(self, report):
        sink = LoggingReportSink()

        emit_report(sink, build_payload(report, "Kim"))

        assert sink.history[0].student_name == "Kim"


def test_make_sink():
    assert isinstance(make_sink(""), LoggingReportSink)
    assert isinstance(make_sink("https://example.test/exec"), HttpReportSink)
