"""
services/sampler.py

문제은행에서 중복 없이 무작위로 문제를 뽑는다.

정렬 비교 함수에 난수를 넣는 방식(sort(() => rand - 0.5))은 순열 분포가 치우치므로
쓰지 않고, count 번의 교환으로 끝나는 부분 Fisher–Yates 셔플을 사용한다.
"""

import logging
import random
from typing import List, Optional, Sequence, TypeVar

from timed_exam.exceptions import EmptyBankError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def sample(
    bank: Optional[Sequence[T]],
    count: int,
    rng: Optional[random.Random] = None,
) -> List[T]:
    """
    bank에서 min(count, len(bank))개를 비복원 추출한다.

    선택된 부분집합의 모든 순서가 같은 확률로 나온다.
    원본 bank는 변경하지 않는다.

    Raises:
        EmptyBankError: bank가 None이거나 비어 있을 때.
        ValueError:     count가 음수일 때.
    """
    if not bank:
        raise EmptyBankError("문제은행이 비어 있습니다.")
    if count < 0:
        raise ValueError(f"count는 0 이상이어야 합니다: {count}")

    rng = rng or random.Random()
    pool = list(bank)
    n = min(count, len(pool))

    for i in range(n):
        j = rng.randint(i, len(pool) - 1)
        pool[i], pool[j] = pool[j], pool[i]

    if n < count:
        logger.info(f"요청 {count}문제 중 문제은행 크기만큼 {n}문제만 출제")
    return pool[:n]
