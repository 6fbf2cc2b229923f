"""
どこで: `engine.compute` サブパッケージ。
何を: GPU 計算資源（ComputeContext/ContextSlot）、カーネル引数レイアウト、ソーステンプレート、
      FieldPipeline を提供する。
なぜ: デバイス依存（pyopencl）をこの層に閉じ込め、ランタイム層からは名前付きエントリポイントと
      固定の引数レイアウトだけで扱えるようにするため。

循環 import を避けるため、ここでは例外型のみ再輸出する（各モジュールは明示的に import する）。
"""

from .errors import (
    BuildError,
    BusyError,
    FractalError,
    KernelError,
    ResourceError,
    WorkerJobError,
)

__all__ = [
    "FractalError",
    "BusyError",
    "BuildError",
    "KernelError",
    "ResourceError",
    "WorkerJobError",
]
