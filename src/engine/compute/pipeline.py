"""
どこで: `engine.compute.pipeline`。
何を: 可視化選択から「どのバッファ枠にどの場カーネルを流すか」と最後の合成カーネルを決め（plan）、
      `ComputeContext` に対して順に投入する（run）。
なぜ: FieldType/VisualizationSelection の直和型を 1 箇所で網羅的に解決し、
      スケジューラ側を可視化の種類から独立させるため。

流れ（run）:
1) DualField のみ: 外部画像を解決（パス変更時のみ再読込 → 作業寸法をリセット）
2) 場カーネル 1〜3 本（枠 0, 1, 2 の順）
3) 合成カーネル 1 本（正弦カラーマップ / 画像サンプル / チャンネルパック）
4) キュー完了待ち
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, assert_never

import numpy as np

from engine.io.image import load_rgb
from engine.params import (
    DualField,
    FieldType,
    Interpolation,
    IterationCount,
    OrbitTrapImag,
    OrbitTrapReal,
    ParamSnapshot,
    ProximityMeasure,
    SingleField,
    TriField,
    VisualizationSelection,
)

from .context import ComputeContext
from .errors import ResourceError
from .structs import (
    pack_box,
    pack_field_ranges,
    pack_fparam,
    pack_freqs,
    pack_im_dims,
    pack_prox_type,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldStep:
    """1 本の場カーネル投入（書き込み先の枠と場の種類）。"""

    slot: int
    field: FieldType

    @property
    def kernel_name(self) -> str:
        return field_kernel_name(self.field)


@dataclass(frozen=True)
class CombineStep:
    """場バッファ群から RGB を作る合成カーネル。"""

    kernel_name: str
    slots: tuple[int, ...]


@dataclass(frozen=True)
class PipelinePlan:
    fields: tuple[FieldStep, ...]
    combine: CombineStep

    @property
    def kernel_names(self) -> tuple[str, ...]:
        """投入順のカーネル名列。"""
        return tuple(s.kernel_name for s in self.fields) + (self.combine.kernel_name,)


def field_kernel_name(field: FieldType) -> str:
    if isinstance(field, IterationCount):
        return "escape_iter_fpn"
    if isinstance(field, ProximityMeasure):
        return "min_prox"
    if isinstance(field, OrbitTrapReal):
        return "orbit_trap_re"
    if isinstance(field, OrbitTrapImag):
        return "orbit_trap_im"
    assert_never(field)


def plan(selection: VisualizationSelection) -> PipelinePlan:
    """可視化選択を (枠, 場) の列と合成ステップへ解決する。"""
    if isinstance(selection, SingleField):
        fields: tuple[FieldType, ...] = (selection.field_type,)
        combine = "map_sines"
    elif isinstance(selection, DualField):
        fields = (selection.field_u, selection.field_v)
        if selection.interpolation is Interpolation.NEAREST:
            combine = "image_map_nearest"
        elif selection.interpolation is Interpolation.BILINEAR:
            combine = "image_map_bilinear"
        else:
            assert_never(selection.interpolation)
    elif isinstance(selection, TriField):
        fields = (selection.field_r, selection.field_g, selection.field_b)
        combine = "pack_rgb_normalized" if selection.normalize else "pack_rgb_raw"
    else:
        assert_never(selection)
    steps = tuple(FieldStep(slot=i, field=f) for i, f in enumerate(fields))
    return PipelinePlan(
        fields=steps,
        combine=CombineStep(kernel_name=combine, slots=tuple(s.slot for s in steps)),
    )


def _finite_range(values: np.ndarray) -> tuple[float, float]:
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        return 0.0, 0.0
    return float(finite.min()), float(finite.max())


class FieldPipeline:
    """plan に従って ComputeContext へカーネルを投入する。"""

    def __init__(self, image_loader: Callable[[str], np.ndarray] = load_rgb):
        self._image_loader = image_loader

    def run(self, ctx: ComputeContext, snapshot: ParamSnapshot) -> PipelinePlan:
        selection = snapshot.visualization
        p = plan(selection)

        if isinstance(selection, DualField):
            self._resolve_sampled_image(ctx, selection)

        fparam = pack_fparam(snapshot)
        for step in p.fields:
            self._run_field(ctx, step, fparam)
        self._run_combine(ctx, p.combine, selection)
        ctx.finish()
        logger.debug("pipeline done: %s", " -> ".join(p.kernel_names))
        return p

    # --- 内部 ---
    def _resolve_sampled_image(self, ctx: ComputeContext, selection: DualField) -> None:
        path = selection.image_path
        if path is None:
            if ctx.sampled_image is None:
                raise ResourceError("no sampled image loaded for dual-field view")
            return
        ctx.load_sampled_image(path, self._image_loader)

    def _run_field(self, ctx: ComputeContext, step: FieldStep, fparam: np.void) -> None:
        out = ctx.fields[step.slot].device
        field = step.field
        if isinstance(field, IterationCount):
            ctx.enqueue("escape_iter_fpn", out, fparam)
        elif isinstance(field, ProximityMeasure):
            ctx.enqueue("min_prox", out, fparam, pack_prox_type(field.targets))
        elif isinstance(field, OrbitTrapReal):
            ctx.enqueue("orbit_trap_re", out, fparam, pack_box(field.box))
        elif isinstance(field, OrbitTrapImag):
            ctx.enqueue("orbit_trap_im", out, fparam, pack_box(field.box))
        else:
            assert_never(field)

    def _run_combine(
        self, ctx: ComputeContext, combine: CombineStep, selection: VisualizationSelection
    ) -> None:
        inputs = [ctx.fields[s].device for s in combine.slots]
        rgb = ctx.rgb.device
        if isinstance(selection, SingleField):
            ctx.enqueue(combine.kernel_name, inputs[0], rgb, pack_freqs(selection.frequencies))
        elif isinstance(selection, DualField):
            image = ctx.sampled_image
            if image is None:
                raise ResourceError("no sampled image loaded for dual-field view")
            dims = pack_im_dims(image.height, image.width)
            ctx.enqueue(combine.kernel_name, inputs[0], inputs[1], image.device, rgb, dims)
        elif isinstance(selection, TriField):
            if selection.normalize:
                ranges = tuple(_finite_range(ctx.fields[s].from_device()) for s in combine.slots)
                ctx.enqueue(combine.kernel_name, *inputs, rgb, pack_field_ranges(ranges))
            else:
                ctx.enqueue(combine.kernel_name, *inputs, rgb)
        else:
            assert_never(selection)


__all__ = [
    "FieldStep",
    "CombineStep",
    "PipelinePlan",
    "field_kernel_name",
    "plan",
    "FieldPipeline",
]
