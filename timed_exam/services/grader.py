"""
services/grader.py

시험 채점 및 결과 집계 비즈니스 로직.
순수 Python 함수로 구성 — UI 코드, 전역 상태 변경 없음.
"""

import logging
import string
from typing import List, Optional

from timed_exam.models.score_report import NO_ANSWER, QuestionResult, ScoreReport
from timed_exam.models.session_state import ExamSession

logger = logging.getLogger(__name__)


def option_letter(index: Optional[int]) -> str:
    """보기 인덱스 → 'A', 'B', ... (26개 초과 시 번호 그대로)."""
    if index is None:
        return NO_ANSWER
    if 0 <= index < len(string.ascii_uppercase):
        return string.ascii_uppercase[index]
    return str(index + 1)


def percent_score(correct: int, total: int) -> int:
    """
    정답 비율을 0~100 정수로 환산한다 (0.5는 올림).

    부동소수점 오차 없이 floor(100*correct/total + 1/2)를 정수 연산으로 계산.
    total이 0이면 0 반환.
    """
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def grade(session: ExamSession, include_explanations: bool = True) -> ScoreReport:
    """
    종료된 세션의 답안을 채점하여 ScoreReport를 반환한다.

    정답 판정 기준: session.answers.get(position) == question.correct_index
    응답하지 않은 문제(키 없음)는 오답으로 처리.

    Args:
        session:              채점 대상 세션.
        include_explanations: False이면 문제별 해설을 결과에서 제외.

    Returns:
        ScoreReport. 문제가 하나도 없으면 percent는 0.
    """
    items: List[QuestionResult] = []
    answered = 0
    correct_count = 0

    for position, q in enumerate(session.questions):
        chosen = session.answers.get(position)
        is_correct = chosen is not None and chosen == q.correct_index
        if chosen is not None:
            answered += 1
        if is_correct:
            correct_count += 1

        items.append(
            QuestionResult(
                position=position,
                question_id=q.id,
                prompt=q.question,
                chosen_index=chosen,
                chosen_letter=option_letter(chosen),
                chosen_text=q.option_text(chosen) if chosen is not None else NO_ANSWER,
                correct_index=q.correct_index,
                correct_letter=option_letter(q.correct_index),
                correct_text=q.option_text(q.correct_index),
                is_correct=is_correct,
                explanation=q.explanation if include_explanations else None,
            )
        )

    total = len(session.questions)
    report = ScoreReport(
        total=total,
        answered=answered,
        correct=correct_count,
        percent=percent_score(correct_count, total),
        items=tuple(items),
        finish_reason=session.finish_reason,
        elapsed_seconds=session.elapsed_seconds,
    )
    logger.info(
        f"채점 완료: {correct_count}/{total} ({report.percent}%), 응답 {answered}개"
    )
    return report
