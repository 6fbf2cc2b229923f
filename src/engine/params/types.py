"""
どこで: `engine.params.types`。
何を: 複素数/矩形/周波数/近接ターゲットの小さな値型。
なぜ: デバイス側構造体へ詰める前のホスト表現を、等価比較可能な frozen dataclass で持つため。
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Complex:
    re: float = 0.0
    im: float = 0.0


@dataclass(frozen=True)
class BBox:
    """複素平面上の軸平行矩形（left < right, bot < top を想定）。"""

    left: float = -2.0
    right: float = 2.0
    bot: float = -2.0
    top: float = 2.0

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.top - self.bot


@dataclass(frozen=True)
class Freqs:
    """正弦カラーマップの RGB 各チャンネル周波数。"""

    f1: float = 1.1
    f2: float = 3.3
    f3: float = 9.9


@dataclass(frozen=True)
class ProximityTargets:
    """近接距離を測る対象（単位円/実軸/虚軸）のフラグ。"""

    to_unit_circle: bool = False
    to_horizontal: bool = False
    to_vertical: bool = False


__all__ = ["Complex", "BBox", "Freqs", "ProximityTargets"]
