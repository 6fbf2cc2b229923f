"""
どこで: `engine.params.fields`。
何を: スカラー場の種類（FieldType）と可視化選択（VisualizationSelection）の閉じた直和型。
なぜ: パイプラインが `isinstance` + `assert_never` で網羅的に分岐でき、
      バリアント追加時の取りこぼしを型検査で検出できるようにするため。

補足:
- FieldType は 1 バッファぶんのデバイスカーネルに対応する。
- VisualizationSelection は必要なバッファ数（1〜3）と合成カーネルを決める。
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Union

from .types import BBox, Freqs, ProximityTargets

# 軌道トラップの既定矩形（原点まわり 1x1）
DEFAULT_TRAP_BOX = BBox(-0.5, 0.5, -0.5, 0.5)


@dataclass(frozen=True)
class IterationCount:
    """脱出までの反復回数（MAXITER で 0..1 に正規化）。"""


@dataclass(frozen=True)
class ProximityMeasure:
    """軌道と対象との最小距離。"""

    targets: ProximityTargets = ProximityTargets(to_unit_circle=True)


@dataclass(frozen=True)
class OrbitTrapReal:
    """軌道が box に入った最初の点の U 座標。"""

    box: BBox = DEFAULT_TRAP_BOX


@dataclass(frozen=True)
class OrbitTrapImag:
    """軌道が box に入った最初の点の V 座標。"""

    box: BBox = DEFAULT_TRAP_BOX


FieldType = Union[IterationCount, ProximityMeasure, OrbitTrapReal, OrbitTrapImag]


class Interpolation(enum.Enum):
    NEAREST = "nearest"
    BILINEAR = "bilinear"


@dataclass(frozen=True)
class SingleField:
    """1 場 + 正弦カラーマップ。"""

    field_type: FieldType = field(default_factory=IterationCount)
    frequencies: Freqs = field(default_factory=Freqs)


@dataclass(frozen=True)
class DualField:
    """2 場を UV として外部画像をサンプルする。"""

    field_u: FieldType = field(default_factory=OrbitTrapReal)
    field_v: FieldType = field(default_factory=OrbitTrapImag)
    image_path: str | None = None
    interpolation: Interpolation = Interpolation.NEAREST


@dataclass(frozen=True)
class TriField:
    """3 場をそのまま RGB チャンネルへ詰める（normalize で場ごとに min/max 正規化）。"""

    field_r: FieldType = field(default_factory=IterationCount)
    field_g: FieldType = field(default_factory=ProximityMeasure)
    field_b: FieldType = field(default_factory=OrbitTrapReal)
    normalize: bool = False


VisualizationSelection = Union[SingleField, DualField, TriField]


__all__ = [
    "DEFAULT_TRAP_BOX",
    "IterationCount",
    "ProximityMeasure",
    "OrbitTrapReal",
    "OrbitTrapImag",
    "FieldType",
    "Interpolation",
    "SingleField",
    "DualField",
    "TriField",
    "VisualizationSelection",
]
