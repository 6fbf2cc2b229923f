"""
どこで: `engine.compute.buffers`。
何を: ホスト側 numpy 配列とデバイス側 `pyopencl.Buffer` の組（PairedBuffer）。
なぜ: 「デバイスで計算 → 必要時にだけホストへ読み戻す」往復を 1 オブジェクトに閉じ込めるため。
"""

from __future__ import annotations

import numpy as np
import pyopencl as cl

from .errors import KernelError


class PairedBuffer:
    """同形状のホストミラーを持つデバイスバッファ。"""

    def __init__(self, cl_context: cl.Context, queue: cl.CommandQueue, host: np.ndarray):
        self.host = np.ascontiguousarray(host)
        self._queue = queue
        mf = cl.mem_flags
        self.device = cl.Buffer(cl_context, mf.READ_WRITE | mf.COPY_HOST_PTR, hostbuf=self.host)

    @classmethod
    def zeros(
        cls,
        cl_context: cl.Context,
        queue: cl.CommandQueue,
        shape: tuple[int, ...],
        dtype: np.dtype | type,
    ) -> "PairedBuffer":
        return cls(cl_context, queue, np.zeros(shape, dtype=dtype))

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(self.host.shape)

    @property
    def nbytes(self) -> int:
        return int(self.host.nbytes)

    def to_device(self) -> None:
        try:
            cl.enqueue_copy(self._queue, self.device, self.host).wait()
        except cl.Error as e:
            raise KernelError(f"host -> device copy failed: {e}") from e

    def from_device(self) -> np.ndarray:
        """デバイス内容をホストミラーへ読み戻して返す（完了まで待つ）。"""
        try:
            cl.enqueue_copy(self._queue, self.host, self.device).wait()
        except cl.Error as e:
            raise KernelError(f"device -> host copy failed: {e}") from e
        return self.host

    def release(self) -> None:
        self.device.release()


__all__ = ["PairedBuffer"]
