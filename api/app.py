"""
api/app.py — FastAPI 앱 인스턴스 + 세션 미들웨어 + 문제은행/결과 싱크 초기화
"""

import logging
import os
import threading
import time
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import QUESTIONS_FILE, REPORT_ENDPOINT
from api.routes import router
import api.session as session
from timed_exam.models.question_model import Question
from timed_exam.services.question_bank import load_questions
from timed_exam.services.report_sink import ReportSink, make_sink

SESSION_COOKIE = "exam_session"

logger = logging.getLogger(__name__)


def _load_bank(path: str) -> list[Question]:
    """문제은행 파일을 읽는다. 없거나 깨졌으면 빈 리스트 (시험 시작 시 400)."""
    if not os.path.exists(path):
        logger.warning(f"문제은행 파일이 없습니다: {path}")
        return []
    try:
        return load_questions(path)
    except ValueError as e:
        logger.error(f"문제은행 로드 실패: {e}")
        return []


def create_app(
    question_bank: Optional[list[Question]] = None,
    report_sink: Optional[ReportSink] = None,
) -> FastAPI:
    app = FastAPI(title="Timed Exam", redoc_url=None)

    app.state.question_bank = (
        question_bank if question_bank is not None else _load_bank(QUESTIONS_FILE)
    )
    app.state.report_sink = report_sink or make_sink(REPORT_ENDPOINT)

    # CORS (모바일 브라우저 등 다양한 출처 허용)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 세션 미들웨어: 쿠키에서 세션 ID를 읽고, 없으면 새로 발급
    @app.middleware("http")
    async def session_middleware(request: Request, call_next):
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or session.get_session(sid) is None:
            sid = session.create_session()

        request.state.session_id = sid
        response: Response = await call_next(request)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=sid,
            httponly=True,
            samesite="lax",
            max_age=session.SESSION_TTL,
        )
        return response

    app.include_router(router)

    # 만료 세션 주기적 정리 (5분마다)
    def _cleanup_loop():
        while True:
            time.sleep(300)
            removed = session.cleanup_expired()
            if removed:
                logger.info(f"만료 세션 {removed}개 정리")

    t = threading.Thread(target=_cleanup_loop, daemon=True)
    t.start()

    return app
