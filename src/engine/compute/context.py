"""
どこで: `engine.compute.context`。
何を: コンパイル済みデバイスプログラムと、ラスタ寸法に合わせたスカラー場バッファ（3 枠）/
      RGB 出力バッファ/外部サンプル画像キャッシュを所有する `ComputeContext`。
なぜ: GPU 資源をひとまとめにし、排他ロック（`ContextSlot`）越しにだけ触れる単位とするため。

注意:
- 本クラス自体はスレッドセーフではない。必ず `ContextSlot.try_acquire()` の内側で使う。
- ラスタ寸法が変わったら `reallocate()` で全バッファを作り直す（旧寸法のバッファは再利用しない）。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np
import pyopencl as cl

from common.settings import get as get_settings

from .buffers import PairedBuffer
from .errors import BuildError, KernelError, ResourceError
from .source import build_options, compose_program_source

logger = logging.getLogger(__name__)

Dims = tuple[int, int]

FIELD_KERNELS: tuple[str, ...] = (
    "escape_iter_fpn",
    "min_prox",
    "orbit_trap_re",
    "orbit_trap_im",
)
COMBINE_KERNELS: tuple[str, ...] = (
    "map_sines",
    "image_map_nearest",
    "image_map_bilinear",
    "pack_rgb_raw",
    "pack_rgb_normalized",
)
ENTRY_POINTS: tuple[str, ...] = FIELD_KERNELS + COMBINE_KERNELS

N_FIELD_SLOTS = 3


@dataclass
class SampledImage:
    """DualField 用にデバイスへ転送済みの外部画像。"""

    path: str
    host: np.ndarray  # (H, W, 3) uint8
    device: cl.Buffer

    @property
    def height(self) -> int:
        return int(self.host.shape[0])

    @property
    def width(self) -> int:
        return int(self.host.shape[1])


def _check_dims(dims: Sequence[int]) -> Dims:
    h, w = int(dims[0]), int(dims[1])
    if h <= 0 or w <= 0:
        raise ValueError(f"raster dims must be positive, got {(h, w)}")
    return h, w


class ComputeContext:
    """プログラム + 場バッファ + RGB バッファ + サンプル画像キャッシュ。"""

    def __init__(
        self,
        cl_context: cl.Context,
        queue: cl.CommandQueue,
        program: cl.Program,
        dims: Dims,
        *,
        user_function: str | None = None,
    ):
        self.cl_context = cl_context
        self.queue = queue
        self.program = program
        self.user_function = user_function
        self._kernels: dict[str, cl.Kernel] = {}
        self._dims: Dims = _check_dims(dims)
        self._work_dims: Dims = self._dims
        self.fields: list[PairedBuffer] = []
        self.rgb: PairedBuffer
        self.sampled_image: SampledImage | None = None
        self._profile = bool(get_settings().PROFILE_KERNELS)
        self._allocate()

    # --- 構築 ---
    @classmethod
    def build(
        cls,
        dims: Sequence[int],
        user_function: str | None = None,
        *,
        cl_context: cl.Context | None = None,
    ) -> "ComputeContext":
        """ソースを組み立ててコンパイルし、指定寸法のバッファを確保したコンテキストを返す。

        `cl_context` を渡すとそれを再利用する（再コンパイル経路）。
        コンパイル失敗・エントリポイント欠落は `BuildError`。
        """
        settings = get_settings()
        if cl_context is None:
            try:
                cl_context = cl.create_some_context(interactive=False)
            except cl.Error as e:
                raise BuildError(f"no usable OpenCL device: {e}") from e
        props = cl.command_queue_properties.PROFILING_ENABLE if settings.PROFILE_KERNELS else 0
        queue = cl.CommandQueue(cl_context, properties=props)

        source = compose_program_source(user_function)
        try:
            program = cl.Program(cl_context, source).build(
                options=build_options(settings.CL_BUILD_OPTIONS)
            )
        except cl.Error as e:
            raise BuildError("device program failed to compile", build_log=str(e)) from e

        ctx = cls(cl_context, queue, program, _check_dims(dims), user_function=user_function)
        try:
            for name in ENTRY_POINTS:
                ctx.kernel(name)
        except KernelError as e:
            raise BuildError(str(e)) from e
        logger.info(
            "compute context built: dims=%s device=%s custom_function=%s",
            ctx.dims,
            cl_context.devices[0].name,
            user_function is not None,
        )
        return ctx

    def _allocate(self) -> None:
        h, w = self._dims
        self.fields = [
            PairedBuffer.zeros(self.cl_context, self.queue, (h, w), np.float64)
            for _ in range(N_FIELD_SLOTS)
        ]
        self.rgb = PairedBuffer.zeros(self.cl_context, self.queue, (h, w, 3), np.uint8)

    # --- 寸法 ---
    @property
    def dims(self) -> Dims:
        return self._dims

    @property
    def work_dims(self) -> Dims:
        return self._work_dims

    def reset_work_dims(self) -> None:
        """カーネルのグローバルサイズをラスタ寸法へ戻す。"""
        self._work_dims = self._dims

    def reallocate(self, dims: Sequence[int]) -> None:
        """全ラスタバッファを新寸法で作り直す（内容は 0 初期化）。"""
        new_dims = _check_dims(dims)
        for buf in self.fields:
            buf.release()
        self.rgb.release()
        self._dims = new_dims
        self._allocate()
        self.reset_work_dims()
        logger.debug("compute buffers reallocated: dims=%s", new_dims)

    def release(self) -> None:
        """全デバイスバッファ（場・RGB・サンプル画像）を解放する。以後このコンテキストは使えない。"""
        for buf in self.fields:
            buf.release()
        self.rgb.release()
        if self.sampled_image is not None:
            self.sampled_image.device.release()
            self.sampled_image = None
        logger.debug("compute context released: dims=%s", self._dims)

    def ensure_dims(self, dims: Sequence[int]) -> bool:
        """寸法が異なれば再確保して True を返す。"""
        if _check_dims(dims) == self._dims:
            return False
        self.reallocate(dims)
        return True

    # --- カーネル ---
    def kernel(self, name: str) -> cl.Kernel:
        k = self._kernels.get(name)
        if k is None:
            try:
                k = cl.Kernel(self.program, name)
            except cl.Error as e:
                raise KernelError(f"entry point '{name}' is not available: {e}") from e
            self._kernels[name] = k
        return k

    def enqueue(self, name: str, *args: object) -> cl.Event:
        """`work_dims` をグローバルサイズとしてカーネルを投入する。"""
        k = self.kernel(name)
        try:
            evt = k(self.queue, self._work_dims, None, *args)
        except cl.Error as e:
            raise KernelError(f"kernel '{name}' failed to enqueue: {e}") from e
        if self._profile:
            evt.wait()
            elapsed_ms = (evt.profile.end - evt.profile.start) * 1e-6
            logger.debug("kernel %s: %.3f ms", name, elapsed_ms)
        return evt

    def finish(self) -> None:
        try:
            self.queue.finish()
        except cl.Error as e:
            raise KernelError(f"device queue failed: {e}") from e

    # --- 外部サンプル画像 ---
    def load_sampled_image(
        self, path: str, loader: Callable[[str], np.ndarray]
    ) -> SampledImage:
        """パスが変わった場合のみ画像を読み直してデバイスへ転送する。

        デコード失敗（`ResourceError`）時は既存キャッシュを保持したまま例外を伝播する。
        読み直した場合は作業寸法をラスタ寸法へリセットする。
        """
        cached = self.sampled_image
        if cached is not None and cached.path == path:
            return cached
        host = np.ascontiguousarray(loader(path), dtype=np.uint8)
        if host.ndim != 3 or host.shape[2] != 3:
            raise ResourceError(f"sampled image must be HxWx3, got shape {host.shape}")
        mf = cl.mem_flags
        try:
            device = cl.Buffer(
                self.cl_context, mf.READ_ONLY | mf.COPY_HOST_PTR, hostbuf=host
            )
        except cl.Error as e:
            raise KernelError(f"failed to upload sampled image: {e}") from e
        if cached is not None:
            cached.device.release()
        self.sampled_image = SampledImage(path=path, host=host, device=device)
        self.reset_work_dims()
        logger.info("sampled image loaded: %s (%dx%d)", path, host.shape[1], host.shape[0])
        return self.sampled_image


__all__ = [
    "Dims",
    "FIELD_KERNELS",
    "COMBINE_KERNELS",
    "ENTRY_POINTS",
    "N_FIELD_SLOTS",
    "SampledImage",
    "ComputeContext",
]
