"""
exceptions.py — 시험 엔진 예외

모든 예외는 상태 머신을 잘 정의된 상태로 남긴다.
(중복 finish는 예외가 아니라 no-op)
"""


class ExamError(Exception):
    """시험 엔진 예외의 기본 클래스."""


class NotReadyError(ExamError):
    """현재 상태에서 허용되지 않는 호출 (예: 응시 중 start, 응시 전 답안 기록)."""


class EmptyBankError(NotReadyError):
    """문제은행이 없거나 비어 있어 시험을 시작할 수 없음."""


class InvalidAnswerError(ExamError, ValueError):
    """범위를 벗어난 문제 위치 또는 보기 인덱스."""
