"""
services/exam_session.py

응시 세션 상태 머신 (idle → active → finished).

전역 상태 없이, 호출자가 소유한 SessionContext를 모든 연산에 넘긴다.
종료 요청은 두 곳에서 온다 — 사용자의 제출 버튼과 타이머 만료.
둘 다 finish()를 호출하며, 먼저 도착한 쪽만 채점/결과 전송을 수행한다.
"""

import logging
import math
import random
import time
from typing import Callable, List, Optional, Sequence, Tuple, Union

from config import CLOCK_TICK_SECONDS, INCLUDE_EXPLANATIONS
from timed_exam.exceptions import InvalidAnswerError, NotReadyError
from timed_exam.models.question_model import Question
from timed_exam.models.score_report import ScoreReport
from timed_exam.models.session_state import ExamSession, FinishReason, SessionState
from timed_exam.services import grader, sampler
from timed_exam.services.clock import Clock, TickCallback
from timed_exam.services.report_sink import ReportSink, build_payload, emit_report

logger = logging.getLogger(__name__)


class SessionContext:
    """
    응시자 한 명의 시험 컨텍스트.

    Attributes:
        session:              현재(또는 직전) 응시 세션. 처음에는 idle.
        report:               직전 응시의 채점 결과. 새 응시를 시작하면 None.
        clock:                제한 시간 타이머.
        sink:                 결과 싱크 (None이면 전송하지 않음).
        include_explanations: 결과에 해설 포함 여부.
        student_name:         응시자 이름 (비어 있으면 'Anonymous'로 전송).
        on_finish:            종료 시 ScoreReport를 받는 리스너 (화면 갱신 등).
        on_tick:              타이머 tick 리스너 (남은 초).
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        sink: Optional[ReportSink] = None,
        include_explanations: bool = INCLUDE_EXPLANATIONS,
        student_name: str = "",
        on_finish: Optional[Callable[[ScoreReport], None]] = None,
        on_tick: Optional[TickCallback] = None,
        rng: Optional[random.Random] = None,
    ):
        self.session = ExamSession()
        self.report: Optional[ScoreReport] = None
        self.clock = clock or Clock(tick_interval=CLOCK_TICK_SECONDS)
        self.sink = sink
        self.include_explanations = include_explanations
        self.student_name = student_name
        self.on_finish = on_finish
        self.on_tick = on_tick
        self.rng = rng

    @property
    def state(self) -> SessionState:
        return self.session.state


def _with_default_ids(bank: Sequence[Question]) -> List[Question]:
    """id가 없는 문제는 문제은행 내 위치를 id로 쓴다."""
    return [
        q if q.id is not None else q.model_copy(update={"id": i})
        for i, q in enumerate(bank)
    ]


def start(
    ctx: SessionContext,
    bank: Optional[Sequence[Question]],
    size: int,
    duration: Optional[float] = None,
) -> ExamSession:
    """
    새 응시를 시작한다. idle 또는 finished 상태에서만 가능.

    finished에서 시작하면 이전 세션과 결과는 버려진다.
    duration(초)이 주어지면 타이머를 건다 — 이 경우 이벤트 루프 안에서 호출해야 한다.

    Raises:
        NotReadyError:  이미 응시 중일 때.
        EmptyBankError: 문제은행이 없거나 비어 있을 때 (세션 상태는 그대로).
        ValueError:     size < 1 또는 duration <= 0.
    """
    if ctx.session.state is SessionState.ACTIVE:
        raise NotReadyError("이미 진행 중인 시험이 있습니다. 먼저 제출하세요.")
    if size < 1:
        raise ValueError(f"출제 문항 수는 1 이상이어야 합니다: {size}")
    if duration is not None and duration <= 0:
        raise ValueError(f"제한 시간은 0보다 커야 합니다: {duration}")

    questions = sampler.sample(_with_default_ids(bank or []), size, ctx.rng)

    session = ExamSession(
        state=SessionState.ACTIVE,
        questions=tuple(questions),
        duration=duration,
    )
    if duration is not None:
        ctx.clock.arm(duration, lambda: _expire(ctx, session), on_tick=ctx.on_tick)
    else:
        ctx.clock.cancel()

    ctx.session = session
    ctx.report = None
    logger.info(
        f"시험 시작: {session.total_questions}문제, "
        f"제한 시간 {f'{duration:g}초' if duration is not None else '없음'}"
    )
    return session


def _expire(ctx: SessionContext, session: ExamSession) -> None:
    if ctx.session is not session:
        return
    finish(ctx, FinishReason.TIMEOUT)


def _require_active(ctx: SessionContext) -> ExamSession:
    if ctx.session.state is not SessionState.ACTIVE:
        raise NotReadyError(f"응시 중이 아닙니다 (현재 상태: {ctx.session.state.value}).")
    return ctx.session


def _question_at(session: ExamSession, position: int) -> Question:
    if not 0 <= position < session.total_questions:
        raise InvalidAnswerError(
            f"문제 위치가 범위를 벗어났습니다: {position} (0~{session.total_questions - 1})"
        )
    return session.questions[position]


def record_answer(ctx: SessionContext, position: int, option_index: int) -> None:
    """
    답안을 기록한다. 같은 문제에 다시 기록하면 마지막 선택이 남는다.

    범위를 벗어난 위치/보기 또는 빈 보기는 InvalidAnswerError — 상태는 바뀌지 않는다.
    """
    session = _require_active(ctx)
    q = _question_at(session, position)
    if not q.is_valid_choice(option_index):
        raise InvalidAnswerError(f"{position + 1}번 문제에 없는 보기입니다: {option_index}")
    session.answers[position] = option_index


def clear_answer(ctx: SessionContext, position: int) -> None:
    """선택 해제 (미응답으로 되돌림)."""
    session = _require_active(ctx)
    _question_at(session, position)
    session.answers.pop(position, None)


def finish(
    ctx: SessionContext,
    reason: Union[FinishReason, str] = FinishReason.MANUAL,
) -> Optional[ScoreReport]:
    """
    응시를 종료하고 채점한다.

    상태 확인과 전이 사이에 await가 없으므로 이벤트 루프 기준으로 한 단계다.
    먼저 도착한 호출만 ScoreReport를 받고, 이후 호출(또는 응시 중이 아닐 때)은
    아무 일도 하지 않고 None을 반환한다.
    """
    reason = FinishReason(reason)
    session = ctx.session
    if session.state is not SessionState.ACTIVE:
        logger.info(f"finish({reason.value}) 무시: 현재 상태 {session.state.value}")
        return None
    session.state = SessionState.FINISHED

    ctx.clock.cancel()
    session.end_time = time.time()
    session.finish_reason = reason

    report = grader.grade(session, include_explanations=ctx.include_explanations)
    ctx.report = report
    logger.info(f"시험 종료 ({reason.value}): {report.correct}/{report.total}")

    if ctx.on_finish is not None:
        try:
            ctx.on_finish(report)
        except Exception:
            logger.exception("종료 리스너 오류 (무시)")
    emit_report(ctx.sink, build_payload(report, ctx.student_name))
    return report


def remaining_seconds(ctx: SessionContext) -> Optional[int]:
    """
    남은 시간(초, 올림). 시간 제한이 없거나 응시 전이면 None,
    시간 제한이 있던 세션이 끝났으면 0.
    """
    session = ctx.session
    deadline = session.deadline
    if deadline is None or session.state is SessionState.IDLE:
        return None
    if session.state is SessionState.FINISHED:
        return 0
    return max(0, math.ceil(deadline - time.time()))


def progress(ctx: SessionContext) -> Tuple[int, int]:
    """(응답 수, 전체 문항 수)."""
    return ctx.session.answered_count, ctx.session.total_questions
