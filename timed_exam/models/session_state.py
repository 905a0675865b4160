"""
models/session_state.py

시험 진행 상태를 담는 OMR 카드 모델.
Pydantic BaseModel 기반 — 직렬화/역직렬화 및 타입 안전성 확보.
UI 코드 없음. 상태 전이는 services/exam_session.py 에서만 수행한다.
"""

import time
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, Field

from timed_exam.models.question_model import Question


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FINISHED = "finished"


class FinishReason(str, Enum):
    MANUAL = "manual"
    TIMEOUT = "timeout"


class ExamSession(BaseModel):
    """
    한 번의 응시(attempt) 전체 상태를 표현하는 모델.

    Attributes:
        state:         응시 상태 (idle → active → finished).
        questions:     출제된 문제 튜플. 응시 중에는 바뀌지 않는다.
        answers:       사용자 답안지. {문제 위치(0-based): 선택한 보기 인덱스}
                       키가 없으면 미응답.
        start_time:    시험 시작 시각 (Unix timestamp, time.time() 기준).
        duration:      제한 시간(초). None이면 시간 제한 없음.
        finish_reason: 종료 사유 (manual | timeout).
        end_time:      종료 시각 (Unix timestamp).
    """

    state: SessionState = Field(
        default=SessionState.IDLE,
        description="응시 상태"
    )
    questions: Tuple[Question, ...] = Field(
        default=(),
        description="출제된 문제 (응시 중 고정)"
    )
    answers: Dict[int, int] = Field(
        default_factory=dict,
        description="사용자 답안지. key: 문제 위치, value: 보기 인덱스"
    )
    start_time: float = Field(
        default_factory=time.time,
        description="시험 시작 시각 (Unix timestamp)"
    )
    duration: Optional[float] = Field(
        default=None,
        gt=0,
        description="제한 시간(초). None이면 무제한"
    )
    finish_reason: Optional[FinishReason] = Field(
        default=None,
        description="종료 사유"
    )
    end_time: Optional[float] = Field(
        default=None,
        description="종료 시각 (Unix timestamp)"
    )

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    @property
    def elapsed_seconds(self) -> int:
        end = self.end_time if self.end_time is not None else time.time()
        # 0.5초는 올림
        return max(0, int(end - self.start_time + 0.5))

    @property
    def deadline(self) -> Optional[float]:
        if self.duration is None:
            return None
        return self.start_time + self.duration
