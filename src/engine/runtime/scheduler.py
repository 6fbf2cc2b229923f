"""
どこで: `engine.runtime.scheduler`。
何を: 毎フレームの `tick(dt)` で「前回投入したスナップショットとの値比較 → アイドルなら 1 本だけ投入」を行う
      `JobScheduler`。
なぜ: 実行中の編集をキューに積まず、完了後に最新状態だけを 1 回追従させる（合体）ため。

1 tick の流れ:
1) ハンドルがあり完了済み → 結果を受け取り `on_result` へ渡し、ハンドルを破棄（アイドルへ）
2) ハンドルが残っている → busy
3) アイドルで (snapshot, dims) が前回投入と等しい → waiting
4) 異なる → 現在値を捕捉して Job を起動、last-dispatched を更新 → busy

Busy 失敗時は last-dispatched を捨て、次のアイドル tick で同じ値を再投入する。
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable

from engine.compute.context import Dims
from engine.compute.errors import BusyError
from engine.params import ParamSnapshot

from .job import Job, JobFailure, JobHandle, JobResult, JobRunner
from .status import Status

logger = logging.getLogger(__name__)


class JobScheduler:
    """同時に高々 1 本のジョブだけを走らせるポーリング型スケジューラ（UI スレッド専用）。"""

    def __init__(
        self,
        runner: JobRunner,
        snapshot: Callable[[], ParamSnapshot],
        dims: Callable[[], Dims],
        on_result: Callable[[JobResult], None] | None = None,
    ):
        self._runner = runner
        self._snapshot = snapshot
        self._dims = dims
        self._on_result = on_result
        self._handle: JobHandle | None = None
        self._last_dispatched: ParamSnapshot | None = None
        self._last_dims: Dims | None = None
        self._ids = itertools.count(1)
        self._status = Status.waiting()
        self.dispatched_count = 0

    # --- 観測用 ---
    @property
    def status(self) -> Status:
        return self._status

    @property
    def has_outstanding_job(self) -> bool:
        return self._handle is not None

    @property
    def handle(self) -> JobHandle | None:
        return self._handle

    @property
    def last_dispatched(self) -> ParamSnapshot | None:
        return self._last_dispatched

    def invalidate(self) -> None:
        """前回投入の記録を捨て、次のアイドル tick で必ず再計算させる。"""
        self._last_dispatched = None
        self._last_dims = None

    # --- 本体 ---
    def tick(self, dt: float) -> None:
        handle = self._handle
        if handle is not None and handle.is_finished():
            self._handle = None
            self._consume(handle.take_result())

        if self._handle is not None:
            self._status = Status.busy()
            return

        current = self._snapshot()
        dims = tuple(self._dims())
        if current == self._last_dispatched and dims == self._last_dims:
            self._status = Status.waiting()
            return

        job = Job(job_id=next(self._ids), snapshot=current, dims=(int(dims[0]), int(dims[1])))
        self._handle = JobHandle(job, self._runner).start()
        self._last_dispatched = current
        self._last_dims = job.dims
        self.dispatched_count += 1
        self._status = Status.busy()
        logger.debug("job %d dispatched: dims=%s", job.job_id, job.dims)

    def _consume(self, result: JobResult) -> None:
        if isinstance(result, JobFailure):
            logger.warning("job %d failed: %s", result.job.job_id, result.message)
            if isinstance(result.error, BusyError):
                self.invalidate()
        else:
            logger.debug("job %d finished", result.job.job_id)
        if self._on_result is not None:
            self._on_result(result)


__all__ = ["JobScheduler"]
