"""
どこで: `engine.params.snapshot`。
何を: 1 回の計算に必要な全設定を束ねる不変値 `ParamSnapshot` と、その構成要素
      （FractalMode / ViewSpec）を定義する。
なぜ: スケジューラが「前回ディスパッチした値」と構造的等価で比較するだけで
      dirty 判定できるようにするため（可変状態の差分追跡を持たない）。

補足:
- `max_iterations` は `[1, MAX_ITERATIONS]` に収まらなければ `ValueError`。
  UI 側のクランプは UI の責務。
- `from_config()` は `util.utils.load_config()` の辞書から既定スナップショットを組み立てる。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Union

from .fields import DualField, SingleField, VisualizationSelection
from .types import BBox, Complex, Freqs

MAX_ITERATIONS = 10_000


@dataclass(frozen=True)
class Fixed:
    """定数を持たないモード（Mandelbrot 型: c = 画素座標）。"""


@dataclass(frozen=True)
class Parametrized:
    """ユーザ指定の定数 c を使うモード（Julia 型）。"""

    c: Complex = Complex(-0.7, 0.3)


FractalMode = Union[Fixed, Parametrized]


@dataclass(frozen=True)
class ViewSpec:
    """中心・ズーム・アスペクトで表したビュー。"""

    center: Complex = Complex(-0.4, 0.0)
    zoom: float = 1.0
    aspect: float = 1.0

    def resolve(self) -> BBox:
        """ビューを複素平面上の矩形へ解決する。

        実軸方向の半幅が `zoom`、虚軸方向の半幅が `zoom * aspect`。
        """
        delta_re = self.zoom
        delta_im = self.zoom * self.aspect
        return BBox(
            left=self.center.re - delta_re,
            right=self.center.re + delta_re,
            bot=self.center.im - delta_im,
            top=self.center.im + delta_im,
        )


@dataclass(frozen=True)
class ParamSnapshot:
    """ビュー/反復/可視化選択を含む 1 構成ぶんの不変値。"""

    mode: FractalMode = field(default_factory=Fixed)
    view: ViewSpec = field(default_factory=ViewSpec)
    max_iterations: int = 100
    visualization: VisualizationSelection = field(default_factory=SingleField)

    def __post_init__(self) -> None:
        n = self.max_iterations
        if isinstance(n, bool) or not isinstance(n, int):
            raise TypeError(f"max_iterations must be int, got {type(n).__name__}")
        if not 1 <= n <= MAX_ITERATIONS:
            raise ValueError(f"max_iterations must be in [1, {MAX_ITERATIONS}], got {n}")

    def view_bbox(self) -> BBox:
        return self.view.resolve()

    def with_sampled_image(self, path: str) -> "ParamSnapshot":
        """外部画像パスを差し替えたスナップショットを返す。

        DualField 以外が選択されている場合は既定の DualField（軌道トラップ UV）へ切り替える。
        """
        vis = self.visualization
        if isinstance(vis, DualField):
            return replace(self, visualization=replace(vis, image_path=str(path)))
        return replace(self, visualization=DualField(image_path=str(path)))

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any] | None) -> "ParamSnapshot":
        """設定辞書から既定スナップショットを構築する（欠損キーは既定値）。"""
        cfg = cfg or {}
        view_cfg = cfg.get("view") or {}
        center = view_cfg.get("center") or (-0.4, 0.0)
        view = ViewSpec(
            center=Complex(float(center[0]), float(center[1])),
            zoom=float(view_cfg.get("zoom", 1.0)),
            aspect=float(view_cfg.get("aspect", 1.0)),
        )
        freqs = cfg.get("frequencies") or (1.1, 3.3, 9.9)
        return cls(
            mode=Fixed(),
            view=view,
            max_iterations=int(cfg.get("max_iterations", 100)),
            visualization=SingleField(
                frequencies=Freqs(float(freqs[0]), float(freqs[1]), float(freqs[2]))
            ),
        )


__all__ = [
    "MAX_ITERATIONS",
    "Fixed",
    "Parametrized",
    "FractalMode",
    "ViewSpec",
    "ParamSnapshot",
]
