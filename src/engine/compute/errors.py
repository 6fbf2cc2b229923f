"""
どこで: `engine.compute.errors`。
何を: 計算コアの例外階層（Busy/Build/Kernel/Resource/WorkerJob）。
なぜ: ワーカ結果を型付きで返し、UI 側で種類ごとに扱えるようにするため。

補足:
- BusyError はロック取得失敗。致命的ではなく、dirty 判定による次回ディスパッチで自然に再試行される。
- BuildError はビルドログを保持する。直前のコンテキストは保持されたまま。
- KernelError はカーネル投入/読み戻しの失敗。該当ジョブのみ終了する。
- ResourceError は外部画像のデコード失敗。既存のサンプル画像キャッシュは保持される。
"""

from __future__ import annotations


class FractalError(Exception):
    """計算コア由来の例外の基底。"""


class BusyError(FractalError):
    """ComputeContext のロックが取得できなかった。"""


class BuildError(FractalError):
    """デバイスプログラムのコンパイルに失敗した。"""

    def __init__(self, message: str, build_log: str | None = None) -> None:
        super().__init__(message)
        self.build_log = build_log

    def __str__(self) -> str:
        base = super().__str__()
        if self.build_log:
            return f"{base}\n{self.build_log}"
        return base


class KernelError(FractalError):
    """カーネル投入またはバッファ読み戻しの失敗。"""


class ResourceError(FractalError):
    """外部画像の読み込み/デコード失敗。"""


class WorkerJobError(FractalError):
    """ワーカスレッド内の想定外例外をジョブ ID 付きでラップする。"""

    def __init__(self, job_id: int | None = None, original: BaseException | None = None) -> None:
        super().__init__(f"WorkerJobError(job_id={job_id}): {original!r}")
        self.job_id = job_id
        self.original = original


__all__ = [
    "FractalError",
    "BusyError",
    "BuildError",
    "KernelError",
    "ResourceError",
    "WorkerJobError",
]
