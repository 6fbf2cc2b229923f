"""
どこで: `api` 入口（高レベル公開 API）。
何を: UI 協調用ファサード `FractalExplorer` と状態型 `Status` を再輸出。
なぜ: 利用者が単一名前空間からパラメータ編集 → tick → 画像取得/保存まで完結できるようにするため。

Usage:
    from api import FractalExplorer

    ex = FractalExplorer()
    ex.tick(0.016)
    print(ex.status().label)
"""

from engine.runtime.status import Status

from .explorer import FractalExplorer

__all__ = ["FractalExplorer", "Status"]
