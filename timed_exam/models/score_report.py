"""
models/score_report.py

채점 결과 모델. 생성 후에는 수정할 수 없다 (frozen).
"""

from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from timed_exam.models.session_state import FinishReason

NO_ANSWER = "(no answer)"


class QuestionResult(BaseModel):
    """문제별 채점 내역 (답안 리뷰 화면용)."""
    model_config = ConfigDict(frozen=True)

    position: int
    question_id: Optional[Union[int, str]] = None
    prompt: str
    chosen_index: Optional[int] = None
    chosen_letter: str = NO_ANSWER
    chosen_text: str = NO_ANSWER
    correct_index: int
    correct_letter: str
    correct_text: str
    is_correct: bool = False
    explanation: Optional[str] = None


class ScoreReport(BaseModel):
    """
    응시 1회의 채점 결과.

    percent는 정수(반올림, 0.5는 올림)이며 total이 0이면 0이다.
    """
    model_config = ConfigDict(frozen=True)

    total: int = Field(..., ge=0)
    answered: int = Field(..., ge=0)
    correct: int = Field(..., ge=0)
    percent: int = Field(..., ge=0, le=100)
    items: Tuple[QuestionResult, ...] = ()
    finish_reason: Optional[FinishReason] = None
    elapsed_seconds: Optional[int] = None

    @property
    def incorrect(self) -> int:
        return self.answered - self.correct

    @property
    def unanswered(self) -> int:
        return self.total - self.answered
