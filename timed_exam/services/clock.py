"""
services/clock.py

시험 제한 시간 카운트다운.

asyncio 이벤트 루프(단일 스레드 협력 스케줄링) 위에서 동작한다.
  - tick_interval 마다 on_tick(남은 초)을 호출 (화면 타이머 갱신용)
  - duration 경과 시 on_expire()를 정확히 한 번 호출
  - cancel() 이후에는 어떤 tick/만료 콜백도 호출되지 않는다
"""

import asyncio
import logging
import math
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], None]
ExpireCallback = Callable[[], None]


class Clock:
    def __init__(self, tick_interval: float = 1.0):
        if tick_interval <= 0:
            raise ValueError(f"tick_interval은 0보다 커야 합니다: {tick_interval}")
        self.tick_interval = tick_interval
        self.expired = False
        self._task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._deadline: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None

    @property
    def remaining(self) -> float:
        """남은 시간(초). 멈춰 있으면 0."""
        if self._task is None or self._loop is None or self._deadline is None:
            return 0.0
        return max(0.0, self._deadline - self._loop.time())

    def arm(
        self,
        duration_seconds: float,
        on_expire: ExpireCallback,
        on_tick: Optional[TickCallback] = None,
    ) -> None:
        """
        카운트다운을 시작한다. 실행 중인 카운트다운이 있으면 먼저 취소한다.

        실행 중인 이벤트 루프 안에서 호출해야 한다 (없으면 RuntimeError).
        """
        if duration_seconds <= 0:
            raise ValueError(f"duration_seconds는 0보다 커야 합니다: {duration_seconds}")
        loop = asyncio.get_running_loop()

        self.cancel()
        self.expired = False
        self._loop = loop
        self._deadline = loop.time() + duration_seconds
        self._task = loop.create_task(self._run(self._deadline, on_expire, on_tick))
        logger.info(f"타이머 시작: {duration_seconds}초")

    def cancel(self) -> bool:
        """실행 중이면 멈추고 True. 이미 멈췄거나 만료됐으면 아무것도 하지 않고 False."""
        task, self._task = self._task, None
        if task is None:
            return False
        task.cancel()
        logger.info("타이머 취소")
        return True

    async def _run(
        self,
        deadline: float,
        on_expire: ExpireCallback,
        on_tick: Optional[TickCallback],
    ) -> None:
        task = asyncio.current_task()
        loop = asyncio.get_running_loop()

        while True:
            left = deadline - loop.time()
            if left <= 0:
                break
            await asyncio.sleep(min(self.tick_interval, left))
            if self._task is not task:
                return
            left = deadline - loop.time()
            if on_tick is not None and left > 0:
                try:
                    on_tick(math.ceil(left))
                except Exception:
                    logger.exception("타이머 tick 콜백 오류")

        # 만료 콜백 안에서 cancel()이 호출돼도 no-op이 되도록 먼저 정지 상태로 만든다.
        self._task = None
        self.expired = True
        logger.info("타이머 만료")
        try:
            on_expire()
        except Exception:
            logger.exception("타이머 만료 콜백 오류")
