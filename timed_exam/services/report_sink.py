"""
services/report_sink.py

채점 결과를 외부로 보내는 싱크 (결과 화면, 원격 기록 등).

설계 원칙:
- 전송은 fire-and-forget. 세션 상태는 전송 결과와 무관하다.
- 전송 오류는 로그와 last_error에만 남기고 호출자에게 전파하지 않는다.
- 재시도 없음 (Finished 전이를 막거나 지연시키지 않는다).
"""

import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional, Set, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field

from config import REPORT_TIMEOUT
from timed_exam.models.score_report import ScoreReport

logger = logging.getLogger(__name__)

ANONYMOUS = "Anonymous"


class ReportPayload(BaseModel):
    """원격 기록용 페이로드. JSON 키는 camelCase (by_alias=True)."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    student_name: str = Field(ANONYMOUS, alias="studentName")
    score: int = Field(..., ge=0, description="정답 수")
    total: int = Field(..., ge=0)
    percent: int = Field(..., ge=0, le=100)
    answered: int = Field(..., ge=0)
    duration_sec: Optional[int] = Field(None, alias="durationSec")
    items: List[Dict[str, Any]] = Field(default_factory=list)


def build_payload(report: ScoreReport, student_name: str = "") -> ReportPayload:
    """ScoreReport → ReportPayload. 이름이 비어 있으면 'Anonymous'."""
    name = (student_name or "").strip() or ANONYMOUS
    return ReportPayload(
        student_name=name,
        score=report.correct,
        total=report.total,
        percent=report.percent,
        answered=report.answered,
        duration_sec=report.elapsed_seconds,
        items=[item.model_dump(mode="json") for item in report.items],
    )


class ReportSink:
    """싱크 인터페이스. submit()은 블로킹하지 않아야 한다."""

    def __init__(self) -> None:
        self.last_error: Optional[BaseException] = None

    def submit(self, payload: ReportPayload) -> Any:
        raise NotImplementedError


class LoggingReportSink(ReportSink):
    """결과를 로그로만 남긴다 (REPORT_ENDPOINT 미설정 시 기본값)."""

    def __init__(self) -> None:
        super().__init__()
        self.history: List[ReportPayload] = []

    def submit(self, payload: ReportPayload) -> None:
        self.history.append(payload)
        logger.info(
            f"결과 기록: {payload.student_name} — {payload.score}/{payload.total} "
            f"({payload.percent}%), 응답 {payload.answered}개, {payload.duration_sec}초"
        )


class HttpReportSink(ReportSink):
    """
    결과를 원격 엔드포인트(예: 스프레드시트 웹앱)로 POST 한다.

    이벤트 루프가 돌고 있으면 Task로, 아니면 데몬 스레드에서 전송한다.
    submit()은 Task 또는 Thread를 반환한다 (테스트/종료 시 대기용).
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = REPORT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__()
        if not endpoint:
            raise ValueError("REPORT_ENDPOINT가 설정되지 않았습니다.")
        self.endpoint = endpoint
        self.timeout = timeout
        self._transport = transport
        self._pending: Set[asyncio.Task] = set()

    def submit(self, payload: ReportPayload) -> Union[asyncio.Task, threading.Thread]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            t = threading.Thread(target=asyncio.run, args=(self._send(payload),), daemon=True)
            t.start()
            return t

        task = loop.create_task(self._send(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _send(self, payload: ReportPayload) -> None:
        # 원격 웹앱이 preflight 없이 받도록 text/plain으로 보낸다.
        body = payload.model_dump_json(by_alias=True)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    self.endpoint,
                    content=body,
                    headers={"Content-Type": "text/plain;charset=utf-8"},
                )
                resp.raise_for_status()
            logger.info(f"결과 전송 완료: {payload.student_name} ({resp.status_code})")
        except httpx.HTTPError as e:
            self.last_error = e
            logger.warning(f"결과 전송 실패 (무시): {type(e).__name__}: {e}")
        except Exception as e:
            self.last_error = e
            logger.warning(f"결과 전송 오류 (무시): {type(e).__name__}: {e}")


def emit_report(sink: Optional[ReportSink], payload: ReportPayload) -> Any:
    """싱크로 결과를 넘긴다. 어떤 실패도 호출자에게 전파하지 않는다."""
    if sink is None:
        return None
    try:
        return sink.submit(payload)
    except Exception as e:
        sink.last_error = e
        logger.error(f"결과 싱크 오류 (무시): {type(e).__name__}: {e}")
        return None


def make_sink(endpoint: str = "") -> ReportSink:
    """엔드포인트가 있으면 HttpReportSink, 없으면 LoggingReportSink."""
    if endpoint:
        return HttpReportSink(endpoint)
    logger.warning("REPORT_ENDPOINT가 설정되지 않아 결과를 로그로만 남깁니다.")
    return LoggingReportSink()
