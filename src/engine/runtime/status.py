"""
どこで: `engine.runtime.status`。
何を: UI へ返す状態分類 `Status`（busy / waiting / error(message)）。
なぜ: 表示文字列の組み立てを UI 側から切り離し、テストで値比較できるようにするため。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

StatusKind = Literal["busy", "waiting", "error"]


@dataclass(frozen=True)
class Status:
    kind: StatusKind
    message: str | None = None

    @classmethod
    def busy(cls) -> "Status":
        return cls("busy")

    @classmethod
    def waiting(cls) -> "Status":
        return cls("waiting")

    @classmethod
    def error(cls, message: str) -> "Status":
        return cls("error", message)

    @property
    def label(self) -> str:
        if self.kind == "busy":
            return "GPU Busy"
        if self.kind == "waiting":
            return "GPU Waiting"
        return self.message or "error"


__all__ = ["Status", "StatusKind"]
