"""
どこで: `engine.compute.slot`。
何を: 有効な `ComputeContext` を単一ロックで保持する `ContextSlot` と、保持中だけ使える `ContextLease`。
なぜ: ジョブ/再コンパイル/保存の全経路を同じ非ブロッキング try-acquire に通し、
      UI スレッドを決してブロックしないバックプレッシャとするため。

注意:
- `try_acquire()` は待たない。取得できなければ即座に `BusyError`。
- コンテキストの差し替えはリース経由でのみ行う（ロック保持中に限る）。
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Generic, Iterator, TypeVar

from .errors import BusyError

C = TypeVar("C")


class ContextLease(Generic[C]):
    """ロック保持中のみ有効なコンテキスト参照。"""

    def __init__(self, slot: "ContextSlot[C]"):
        self._slot = slot
        self._valid = True

    @property
    def context(self) -> C:
        self._check()
        return self._slot._context

    def replace(self, new_context: C) -> None:
        """保持中のロックのもとで有効コンテキストを差し替える。"""
        self._check()
        self._slot._context = new_context

    def _check(self) -> None:
        if not self._valid:
            raise RuntimeError("context lease used after release")

    def _invalidate(self) -> None:
        self._valid = False


class ContextSlot(Generic[C]):
    """有効コンテキスト 1 つと、それを守る粗粒度ロック。"""

    def __init__(self, context: C):
        self._context = context
        self._lock = threading.Lock()

    @contextmanager
    def try_acquire(self) -> Iterator[ContextLease[C]]:
        if not self._lock.acquire(blocking=False):
            raise BusyError("compute context is locked")
        lease: ContextLease[C] = ContextLease(self)
        try:
            yield lease
        finally:
            lease._invalidate()
            self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()


__all__ = ["ContextSlot", "ContextLease"]
