"""
api/routes.py — FastAPI 엔드포인트
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

import config
from api.sample_questions import SAMPLE_QUESTIONS
import api.session as session

from timed_exam.exceptions import EmptyBankError, InvalidAnswerError, NotReadyError
from timed_exam.models.question_model import Question
from timed_exam.models.session_state import FinishReason, SessionState
from timed_exam.services import exam_session
from timed_exam.services.exam_session import SessionContext
from timed_exam.services.grader import option_letter

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────

class StartExamBody(BaseModel):
    size: Optional[int] = Field(None, ge=1)
    duration_minutes: Optional[float] = Field(None, ge=0)   # 0 → 시간 제한 없음
    include_explanations: Optional[bool] = None
    student_name: str = ""

class SaveAnswerBody(BaseModel):
    position: int
    option_index: int

class ClearAnswerBody(BaseModel):
    position: int


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _sid(request: Request) -> str:
    return request.state.session_id


def _context(request: Request) -> SessionContext:
    return session.context(_sid(request))


def _question_to_dict(q: Question, position: int, total: int) -> dict:
    # 응시 중 화면용: 정답/해설은 노출하지 않는다.
    return {
        "position": position,
        "total": total,
        "id": q.id,
        "question": q.question,
        "options": [
            {"index": i, "letter": option_letter(i), "text": text}
            for i, text in q.presented_options
        ],
    }


def _duration_seconds(minutes: Optional[float]) -> Optional[float]:
    if minutes is None:
        minutes = config.EXAM_DURATION_MIN
    return minutes * 60 if minutes > 0 else None


def _start(request: Request, bank: list[Question], body: StartExamBody) -> dict:
    ctx = _context(request)
    size = body.size or config.EXAM_SIZE
    try:
        started = exam_session.start(ctx, bank, size, _duration_seconds(body.duration_minutes))
    except EmptyBankError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotReadyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    # 이름/싱크/해설 설정은 finish 시점에만 쓰인다.
    name = body.student_name.strip() or session.get(_sid(request), "student_name", "")
    session.put(_sid(request), "student_name", name)
    ctx.student_name = name
    ctx.sink = request.app.state.report_sink
    ctx.include_explanations = (
        config.INCLUDE_EXPLANATIONS
        if body.include_explanations is None
        else body.include_explanations
    )

    return {
        "total": started.total_questions,
        "duration_seconds": started.duration,
        "remaining_seconds": exam_session.remaining_seconds(ctx),
        "ok": True,
    }


# ── 엔드포인트 ───────────────────────────────────────────────────────────────

@router.get("/api/session-status")
async def session_status(request: Request):
    bank: list[Question] = request.app.state.question_bank
    ctx = _context(request)
    return {
        "question_count": len(bank),
        "exam_size": config.EXAM_SIZE,
        "duration_minutes": config.EXAM_DURATION_MIN,
        "state": ctx.state.value,
        "student_name": session.get(_sid(request), "student_name", ""),
    }


@router.post("/api/start-exam")
async def start_exam(request: Request, body: StartExamBody):
    return _start(request, request.app.state.question_bank, body)


@router.post("/api/start-sample-exam")
async def start_sample_exam(request: Request, body: StartExamBody | None = None):
    body = body or StartExamBody()
    if body.size is None:
        body.size = len(SAMPLE_QUESTIONS)
    return _start(request, SAMPLE_QUESTIONS, body)


@router.get("/api/question/{position}")
async def get_question(request: Request, position: int):
    ctx = _context(request)
    questions = ctx.session.questions
    if ctx.state is SessionState.IDLE or not (0 <= position < len(questions)):
        raise HTTPException(status_code=404, detail="문제를 찾을 수 없습니다.")

    d = _question_to_dict(questions[position], position, len(questions))
    d["saved_answer"] = ctx.session.answers.get(position)
    return d


@router.get("/api/exam-state")
async def get_exam_state(request: Request):
    ctx = _context(request)
    if ctx.state is SessionState.IDLE:
        raise HTTPException(status_code=404, detail="시험 세션이 없습니다.")

    answered, total = exam_session.progress(ctx)
    reason = ctx.session.finish_reason
    return {
        "state": ctx.state.value,
        "answers": {str(k): v for k, v in ctx.session.answers.items()},
        "answered_count": answered,
        "total": total,
        "start_time": ctx.session.start_time,
        "remaining_seconds": exam_session.remaining_seconds(ctx),
        "finish_reason": reason.value if reason else None,
    }


@router.post("/api/save-answer")
async def save_answer(request: Request, body: SaveAnswerBody):
    ctx = _context(request)
    try:
        exam_session.record_answer(ctx, body.position, body.option_index)
    except InvalidAnswerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotReadyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"ok": True, "answered_count": ctx.session.answered_count}


@router.post("/api/clear-answer")
async def clear_answer(request: Request, body: ClearAnswerBody):
    ctx = _context(request)
    try:
        exam_session.clear_answer(ctx, body.position)
    except InvalidAnswerError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotReadyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"ok": True, "answered_count": ctx.session.answered_count}


@router.post("/api/submit-exam")
async def submit_exam(request: Request):
    ctx = _context(request)
    if ctx.state is SessionState.IDLE:
        raise HTTPException(status_code=400, detail="시험 세션이 없습니다.")

    report = exam_session.finish(ctx, FinishReason.MANUAL)
    # 타이머가 먼저 종료시킨 경우 report는 None — 기존 결과를 돌려준다.
    already_finished = report is None
    report = report or ctx.report
    return {
        "ok": True,
        "already_finished": already_finished,
        "finish_reason": ctx.session.finish_reason.value,
        "percent": report.percent,
    }


@router.get("/api/results")
async def get_results(request: Request):
    ctx = _context(request)
    if ctx.state is not SessionState.FINISHED or ctx.report is None:
        raise HTTPException(status_code=400, detail="시험이 아직 제출되지 않았습니다.")

    report = ctx.report
    data = report.model_dump(mode="json")
    data.update({
        "incorrect": report.incorrect,
        "unanswered": report.unanswered,
        "student_name": ctx.student_name,
    })
    return data


@router.post("/api/reset")
async def reset_session(request: Request):
    session.reset(_sid(request))
    return {"ok": True}
