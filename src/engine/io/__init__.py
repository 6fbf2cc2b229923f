"""
どこで: `engine.io` サブパッケージ。
何を: 外部画像の読み込み/保存（Pillow）を提供する。
なぜ: ファイル I/O とコーデック依存を計算コアから隔離するため。
"""

from .image import load_rgb, save_rgb

__all__ = ["load_rgb", "save_rgb"]
