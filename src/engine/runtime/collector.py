"""
どこで: `engine.runtime.collector`。
何を: 表示用 RGB ラスタ `DisplayImage` と、ジョブ結果を反映する `ResultCollector`。
なぜ: 結果の公開を「所有ジョブの終了後」「ロック取得下」に限定し、古い描画キャッシュを確実に捨てるため。

補足:
- デバイスからの読み戻しはワーカ側（`run_job`）で済んでいる。ここではホストミラーを複製するだけで、
  UI スレッドで GPU 待ちを発生させない。
- 失敗時は画像を変更せず、メッセージのみ `last_error` に残す。
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import numpy as np

from engine.compute.context import ComputeContext, Dims
from engine.compute.errors import BusyError
from engine.compute.slot import ContextSlot

from .job import JobFailure, JobResult

logger = logging.getLogger(__name__)


class DisplayImage:
    """現在表示中の RGB ラスタ（H, W, 3 uint8）と、その派生表現のキャッシュ。"""

    def __init__(self, dims: Dims):
        self._rgb = np.zeros((int(dims[0]), int(dims[1]), 3), dtype=np.uint8)
        self._version = 0
        self._renderable: Any = None

    @property
    def rgb(self) -> np.ndarray:
        return self._rgb

    @property
    def dims(self) -> Dims:
        return int(self._rgb.shape[0]), int(self._rgb.shape[1])

    @property
    def version(self) -> int:
        """公開回数（初期画像は 0）。"""
        return self._version

    def publish(self, rgb: np.ndarray) -> None:
        arr = np.asarray(rgb)
        if arr.ndim != 3 or arr.shape[2] != 3 or arr.dtype != np.uint8:
            raise ValueError(f"display image must be HxWx3 uint8, got {arr.shape} {arr.dtype}")
        self._rgb = arr.copy()
        self._version += 1
        self._renderable = None

    def renderable(self, factory: Callable[[np.ndarray], Any]) -> Any:
        """描画用表現（テクスチャ等）を遅延生成して返す。公開のたびに作り直す。"""
        if self._renderable is None:
            self._renderable = factory(self._rgb)
        return self._renderable


class ResultCollector:
    def __init__(self, slot: ContextSlot[ComputeContext], image: DisplayImage):
        self._slot = slot
        self.image = image
        self.last_error: str | None = None

    def collect(self, result: JobResult) -> None:
        if isinstance(result, JobFailure):
            self.last_error = result.message
            return
        try:
            with self._slot.try_acquire() as lease:
                self.image.publish(lease.context.rgb.host)
        except BusyError as e:
            self.last_error = f"could not publish job {result.job.job_id}: {e}"
            logger.warning("%s", self.last_error)
            return
        self.last_error = None
        logger.debug("job %d published (version %d)", result.job.job_id, self.image.version)


__all__ = ["DisplayImage", "ResultCollector"]
