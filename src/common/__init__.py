"""
どこで: `common` パッケージ。
何を: 環境変数パース（env）・型付き設定（settings）・最小ロギング構成（logging）。
なぜ: 計算コア/API/CLI から共通に使う基盤を分離し、依存の向きを単純化するため。
"""

from .logging import setup_default_logging

__all__ = [
    "setup_default_logging",
]
