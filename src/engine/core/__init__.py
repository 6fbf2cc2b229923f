"""
どこで: `engine.core` サブパッケージ。
何を: フレーム駆動（Tickable/FrameClock）を提供。
なぜ: UI ループとヘッドレス実行で同じ更新経路を使うため。
"""

from .frame_clock import FrameClock
from .tickable import Tickable

__all__ = ["FrameClock", "Tickable"]
