"""
どこで: `engine.runtime.job`。
何を: バックグラウンドで 1 回だけ実行される計算ジョブ（Job）と、その型付き結果
      （JobSuccess / JobFailure）、ワーカスレッドを包む `JobHandle`、既定の実行関数 `run_job`。
なぜ: ワーカ側の失敗を制御不能な例外ではなく値として UI スレッドへ返すため。

ジョブの一生:
- 生成: dirty 検出かつアイドル時にスナップショットと寸法を捕捉
- 実行: ワーカスレッドでロックを非ブロッキング取得 → パイプライン → RGB 読み戻し
- 終端: Success（ホスト RGB ミラーが埋まっている）/ Failure（メッセージ付き）。結果は 1 度だけ消費される。
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Union

from engine.compute.context import ComputeContext, Dims
from engine.compute.errors import FractalError, WorkerJobError
from engine.compute.pipeline import FieldPipeline
from engine.compute.slot import ContextSlot
from engine.params import ParamSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Job:
    job_id: int
    snapshot: ParamSnapshot
    dims: Dims


@dataclass(frozen=True)
class JobSuccess:
    job: Job


@dataclass(frozen=True)
class JobFailure:
    job: Job
    error: FractalError

    @property
    def message(self) -> str:
        return str(self.error)


JobResult = Union[JobSuccess, JobFailure]
JobRunner = Callable[[Job], JobResult]


def run_job(slot: ContextSlot[ComputeContext], job: Job, pipeline: FieldPipeline) -> JobResult:
    """ロックを待たずに取得し、寸法合わせ → パイプライン → RGB 読み戻しを行う。

    ロックが取れなければ即座に `BusyError` の Failure を返す（内部で再試行しない）。
    """
    try:
        with slot.try_acquire() as lease:
            ctx = lease.context
            if ctx.ensure_dims(job.dims):
                logger.debug("job %d: buffers reallocated to %s", job.job_id, job.dims)
            pipeline.run(ctx, job.snapshot)
            ctx.rgb.from_device()
    except FractalError as e:
        return JobFailure(job, e)
    return JobSuccess(job)


class JobHandle:
    """1 ジョブぶんのワーカスレッド。UI スレッドからは `is_finished()` だけを見る。"""

    def __init__(self, job: Job, runner: JobRunner):
        self.job = job
        self._runner = runner
        self._result: JobResult | None = None
        self._done = threading.Event()
        self._consumed = False
        self._thread = threading.Thread(
            target=self._run, name=f"FractalJob-{job.job_id}", daemon=True
        )

    def start(self) -> "JobHandle":
        self._thread.start()
        return self

    def _run(self) -> None:
        try:
            self._result = self._runner(self.job)
        except Exception as e:  # ランナー外の想定外例外も値として返す
            logger.exception("job %d crashed", self.job.job_id)
            self._result = JobFailure(self.job, WorkerJobError(self.job.job_id, e))
        finally:
            self._done.set()

    def is_finished(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """完了を待つ（テスト/ヘッドレス用。UI スレッドからは呼ばない）。"""
        return self._done.wait(timeout)

    def take_result(self) -> JobResult:
        """終端結果を 1 度だけ取り出す。未完了/二重取得は `RuntimeError`。"""
        if not self._done.is_set():
            raise RuntimeError(f"job {self.job.job_id} is still running")
        if self._consumed:
            raise RuntimeError(f"job {self.job.job_id} result was already consumed")
        self._consumed = True
        assert self._result is not None
        return self._result


__all__ = [
    "Job",
    "JobSuccess",
    "JobFailure",
    "JobResult",
    "JobRunner",
    "JobHandle",
    "run_job",
]
