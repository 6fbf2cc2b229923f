"""
どこで: `engine.core.tickable`。
何を: 1 フレームぶんのポーリング `tick(dt)` を持つ `Tickable` Protocol。
なぜ: スケジューラ/エクスプローラを UI ループ・ヘッドレス実行のどちらからも同じ形で駆動するため。
"""

from typing import Protocol


class Tickable(Protocol):
    def tick(self, dt: float) -> None:
        """`dt` 秒ぶん進める。呼び出し側スレッドをブロックしてはならない。"""
