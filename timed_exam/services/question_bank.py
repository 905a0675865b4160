"""
services/question_bank.py

문제은행 JSON 로더.
Public API:
  - parse_questions(data) -> List[Question]  : JSON 배열 → Question 리스트
  - load_questions(path) -> List[Question]   : 파일에서 읽기

형식: [{"question": str, "options": [str, ...], "correctIndex": int,
        "id": (선택), "explanation": (선택)}, ...]
검증 실패 항목은 건너뛰고 경고만 남긴다 (전체 중단 없음).
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Union

from pydantic import ValidationError

from timed_exam.models.question_model import Question

logger = logging.getLogger(__name__)


def parse_questions(data: Any) -> List[Question]:
    """
    JSON 데이터 → Question 리스트. id가 없으면 배열 내 위치로 채운다.

    Raises:
        ValueError: data가 배열이 아닐 때.
    """
    if not isinstance(data, list):
        raise ValueError("문제은행은 JSON 배열이어야 합니다.")

    questions: List[Question] = []
    for idx, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning(f"item[{idx}]: 객체가 아니므로 건너뜀")
            continue
        try:
            q = Question.model_validate(item)
        except ValidationError as e:
            logger.warning(f"item[{idx}]: Question 생성 실패 — {e.error_count()}개 오류")
            continue
        if q.id is None:
            q = q.model_copy(update={"id": idx})
        questions.append(q)

    skipped = len(data) - len(questions)
    if skipped:
        logger.warning(f"parse_questions: {skipped}개 항목 건너뜀")
    logger.info(f"parse_questions: 총 {len(questions)}개 문제 로드")
    return questions


def load_questions(path: Union[str, Path]) -> List[Question]:
    """
    파일 경로에서 문제은행을 읽는다.

    Raises:
        FileNotFoundError: 파일이 없을 때.
        ValueError:        JSON 형식 오류 또는 배열이 아닐 때.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"문제은행 JSON 파싱 실패: {path} — {e}") from e
    return parse_questions(data)
