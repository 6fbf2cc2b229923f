"""
どこで: `engine.runtime.recompiler`。
何を: ユーザ編集のデバイス関数テキストから候補 `ComputeContext` を作り、成功時のみ差し替える `Recompiler`。
なぜ: ビルド失敗時に現行コンテキストを一切壊さず、エラー文字列だけを表示へ残すため。

手順:
1) UI スレッドでジョブ未完了なら即 Busy（ロックにすら触れない）
2) 同じロックを非ブロッキング取得（取れなければ Busy）
3) 現行の `cl.Context` と寸法を流用して候補をビルド
4) 成功 → リース経由で差し替え、スケジューラを invalidate（次 tick で再計算）
   失敗 → `last_error` に保持して例外を再送出
"""

from __future__ import annotations

import logging
from typing import Callable

from engine.compute.context import ComputeContext
from engine.compute.errors import BusyError, FractalError
from engine.compute.slot import ContextSlot

from .scheduler import JobScheduler

logger = logging.getLogger(__name__)

ContextBuilder = Callable[..., ComputeContext]


class Recompiler:
    def __init__(
        self,
        slot: ContextSlot[ComputeContext],
        scheduler: JobScheduler,
        builder: ContextBuilder = ComputeContext.build,
    ):
        self._slot = slot
        self._scheduler = scheduler
        self._builder = builder
        self.last_error: str | None = None

    def try_recompile(self, source_text: str) -> None:
        """`source_text` で再ビルドして差し替える。失敗は `FractalError` として送出する。"""
        try:
            self._recompile(source_text)
        except FractalError as e:
            self.last_error = str(e)
            logger.warning("recompile rejected: %s", e.__class__.__name__)
            raise
        self.last_error = None

    def _recompile(self, source_text: str) -> None:
        if self._scheduler.has_outstanding_job:
            raise BusyError("could not recompile, a job is still running")
        with self._slot.try_acquire() as lease:
            current = lease.context
            candidate = self._builder(
                current.dims, source_text, cl_context=current.cl_context
            )
            lease.replace(candidate)
            current.release()
        self._scheduler.invalidate()
        logger.info("device program recompiled")


__all__ = ["Recompiler", "ContextBuilder"]
