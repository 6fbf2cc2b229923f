"""
どこで: `engine.core.frame_clock`。
何を: `Tickable` の列を固定順序で呼ぶ FrameClock と、条件成立まで回すヘッドレス用 `run_until`。
なぜ: UI のフレームコールバックと CLI の単発レンダリングで更新順と dt 計測を共通化するため。
"""

from __future__ import annotations

import time
from typing import Callable, Sequence

from .tickable import Tickable


class FrameClock:
    def __init__(self, tickables: Sequence[Tickable]):
        self._tickables = tuple(tickables)
        self._last_time = time.perf_counter()

    # UI のフレームコールバックから呼ばせる（dt を渡さない場合は自前で計測）
    def tick(self, dt: float | None = None) -> None:
        if dt is None:
            now = time.perf_counter()
            dt = now - self._last_time
            self._last_time = now

        for t in self._tickables:
            t.tick(dt)

    def run_until(
        self,
        done: Callable[[], bool],
        *,
        poll_interval: float = 0.01,
        timeout: float | None = None,
    ) -> bool:
        """`done()` が真になるまで tick を回す。タイムアウト時は False。"""
        deadline = None if timeout is None else time.perf_counter() + timeout
        while True:
            self.tick()
            if done():
                return True
            if deadline is not None and time.perf_counter() >= deadline:
                return False
            time.sleep(poll_interval)
