"""
どこで: `api.explorer`。
何を: ContextSlot/FieldPipeline/JobScheduler/Recompiler/ResultCollector を結線した `FractalExplorer`。
なぜ: UI（またはヘッドレス実行）がプレーンな値（スナップショット・状態・RGB・ソース文字列・パス）
      だけをやり取りすればよいようにするため。

使い方:
    from api import FractalExplorer

    ex = FractalExplorer()
    # UI のフレームコールバックから
    ex.tick(dt)
    label = ex.status().label
    rgb = ex.image.rgb
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Callable, Sequence

import numpy as np

from engine.compute.context import ComputeContext, Dims
from engine.compute.errors import BusyError, FractalError, ResourceError
from engine.compute.pipeline import FieldPipeline
from engine.compute.slot import ContextSlot
from engine.compute.source import DEFAULT_USER_FUNCTION
from engine.io.image import load_rgb, save_rgb
from engine.params import ParamSnapshot
from engine.runtime import (
    DisplayImage,
    JobResult,
    JobScheduler,
    Recompiler,
    ResultCollector,
    Status,
    run_job,
)
from util.utils import load_config, resolve_raster_dims

logger = logging.getLogger(__name__)


class FractalExplorer:
    """UI 協調用の高レベルファサード（UI スレッドからのみ呼ぶ）。"""

    def __init__(
        self,
        params: ParamSnapshot | None = None,
        dims: Sequence[int] | None = None,
        *,
        context: ComputeContext | None = None,
        builder: Callable[..., ComputeContext] = ComputeContext.build,
        pipeline: FieldPipeline | None = None,
        image_loader: Callable[[str], np.ndarray] = load_rgb,
    ):
        cfg = load_config() if params is None or dims is None else {}
        self.params: ParamSnapshot = params if params is not None else ParamSnapshot.from_config(cfg)
        h, w = dims if dims is not None else resolve_raster_dims(cfg)
        self._dims: Dims = (int(h), int(w))
        self._image_loader = image_loader

        self._slot: ContextSlot[ComputeContext] = ContextSlot(
            context if context is not None else builder(self._dims)
        )
        self.image = DisplayImage(self._dims)
        self._collector = ResultCollector(self._slot, self.image)
        self._scheduler = JobScheduler(
            runner=partial(run_job, self._slot, pipeline=pipeline or FieldPipeline(image_loader)),
            snapshot=lambda: self.params,
            dims=lambda: self._dims,
            on_result=self._on_result,
        )
        self._recompiler = Recompiler(self._slot, self._scheduler, builder)
        self.function_text = DEFAULT_USER_FUNCTION
        self._error: str | None = None

    # --- 寸法 ---
    @property
    def dims(self) -> Dims:
        return self._dims

    def resize(self, dims: Sequence[int]) -> None:
        h, w = int(dims[0]), int(dims[1])
        if h <= 0 or w <= 0:
            raise ValueError(f"raster dims must be positive, got {(h, w)}")
        self._dims = (h, w)

    # --- フレーム駆動 ---
    def tick(self, dt: float) -> None:
        self._scheduler.tick(dt)

    def status(self) -> Status:
        """ジョブ実行中は常に busy。エラー文言は `last_error` からも読める。"""
        if self._scheduler.has_outstanding_job:
            return Status.busy()
        if self._error is not None:
            return Status.error(self._error)
        return self._scheduler.status

    @property
    def last_error(self) -> str | None:
        return self._error

    @property
    def scheduler(self) -> JobScheduler:
        return self._scheduler

    def _on_result(self, result: JobResult) -> None:
        self._collector.collect(result)
        self._error = self._collector.last_error

    # --- 再コンパイル ---
    def recompile(self, source_text: str | None = None) -> bool:
        """関数テキストで再ビルドする。失敗時はエラー状態にして False。"""
        text = self.function_text if source_text is None else source_text
        try:
            self._recompiler.try_recompile(text)
        except FractalError as e:
            self._error = str(e)
            return False
        self.function_text = text
        self._error = None
        return True

    @property
    def last_build_error(self) -> str | None:
        return self._recompiler.last_error

    # --- 入出力 ---
    def save_image(self, path: str | Path | None = None) -> Path | None:
        """表示中の画像を保存する。ロックが取れなければ保存せず None。"""
        try:
            with self._slot.try_acquire():
                rgb = self.image.rgb.copy()
        except BusyError as e:
            self._error = f"could not save image: {e}"
            logger.warning("%s", self._error)
            return None
        try:
            return save_rgb(rgb, path)
        except RuntimeError as e:
            self._error = str(e)
            return None

    def load_sampled_image(self, path: str | Path) -> bool:
        """外部画像を検証し、DualField のサンプル元として設定する。"""
        try:
            self._image_loader(str(path))
        except ResourceError as e:
            self._error = str(e)
            return False
        self.params = self.params.with_sampled_image(str(path))
        return True


__all__ = ["FractalExplorer"]
