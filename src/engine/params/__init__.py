"""
どこで: `engine.params` サブパッケージ。
何を: 複素平面ビューと可視化選択を表す不変スナップショット型（ParamSnapshot 等）を再輸出。
なぜ: UI/スケジューラ/パイプラインが値等価で比較できる単一の設定表現を共有するため。
"""

from .fields import (
    DualField,
    FieldType,
    Interpolation,
    IterationCount,
    OrbitTrapImag,
    OrbitTrapReal,
    ProximityMeasure,
    SingleField,
    TriField,
    VisualizationSelection,
)
from .snapshot import (
    MAX_ITERATIONS,
    FractalMode,
    Fixed,
    ParamSnapshot,
    Parametrized,
    ViewSpec,
)
from .types import BBox, Complex, Freqs, ProximityTargets

__all__ = [
    "BBox",
    "Complex",
    "Freqs",
    "ProximityTargets",
    "FieldType",
    "IterationCount",
    "ProximityMeasure",
    "OrbitTrapReal",
    "OrbitTrapImag",
    "VisualizationSelection",
    "SingleField",
    "DualField",
    "TriField",
    "Interpolation",
    "FractalMode",
    "Fixed",
    "Parametrized",
    "ViewSpec",
    "ParamSnapshot",
    "MAX_ITERATIONS",
]
