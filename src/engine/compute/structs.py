"""
どこで: `engine.compute.structs`。
何を: カーネル引数として値渡しする構造体の numpy dtype と、パラメータ → レコードの詰め替え。
なぜ: デバイス側 `mandelstructs.h` とバイト単位で一致するレイアウトを 1 箇所で固定するため。

注意:
- すべて `align=False` の packed dtype。パディングは `_pad*` フィールドとして明示し、
  暗黙のパディングは入れない（C 側も同名の pad を持つ）。
- レイアウトを変える場合は `kernels/mandelstructs.h` と同時に更新すること。
"""

from __future__ import annotations

from typing import assert_never

import numpy as np

from engine.params import (
    BBox,
    Fixed,
    FractalMode,
    Freqs,
    ParamSnapshot,
    Parametrized,
    ProximityTargets,
)

BOX_DTYPE = np.dtype(
    [("left", "<f8"), ("right", "<f8"), ("bot", "<f8"), ("top", "<f8")],
    align=False,
)

COMPLEX_DTYPE = np.dtype([("re", "<f8"), ("im", "<f8")], align=False)

FPARAM_DTYPE = np.dtype(
    [
        ("mandel", "<i4"),
        ("_pad0", "<i4"),
        ("c", COMPLEX_DTYPE),
        ("view_rect", BOX_DTYPE),
        ("max_iter", "<i4"),
        ("_pad1", "<i4"),
    ],
    align=False,
)

FREQS_DTYPE = np.dtype([("f1", "<f8"), ("f2", "<f8"), ("f3", "<f8")], align=False)

PROXTYPE_DTYPE = np.dtype(
    [
        ("to_unit_circ", "u1"),
        ("to_horizontal", "u1"),
        ("to_vertical", "u1"),
        ("_pad0", "u1"),
    ],
    align=False,
)

IMDIMS_DTYPE = np.dtype([("imH", "<i4"), ("imW", "<i4")], align=False)

FIELD_RANGES_DTYPE = np.dtype(
    [
        ("lo_r", "<f8"),
        ("hi_r", "<f8"),
        ("lo_g", "<f8"),
        ("hi_g", "<f8"),
        ("lo_b", "<f8"),
        ("hi_b", "<f8"),
    ],
    align=False,
)

# C 側の sizeof と一致すべき値
STRUCT_SIZES: dict[str, int] = {
    "FParam_t": 64,
    "Box_t": 32,
    "Freqs_t": 24,
    "ProxType_t": 4,
    "ImDims_t": 8,
    "FieldRanges_t": 48,
}


def _record(dtype: np.dtype) -> np.ndarray:
    return np.zeros(1, dtype=dtype)


def mode_flag_and_constant(mode: FractalMode) -> tuple[int, float, float]:
    """モードをデバイス側の (mandel フラグ, c.re, c.im) に変換する。"""
    if isinstance(mode, Fixed):
        return 1, 0.0, 0.0
    if isinstance(mode, Parametrized):
        return 0, float(mode.c.re), float(mode.c.im)
    assert_never(mode)


def pack_box(box: BBox) -> np.void:
    rec = _record(BOX_DTYPE)
    rec["left"], rec["right"], rec["bot"], rec["top"] = box.left, box.right, box.bot, box.top
    return rec[0]


def pack_fparam(snapshot: ParamSnapshot) -> np.void:
    """共有パラメータ（モード/定数/ビュー矩形/最大反復）を FParam_t に詰める。"""
    flag, c_re, c_im = mode_flag_and_constant(snapshot.mode)
    view = snapshot.view_bbox()
    rec = _record(FPARAM_DTYPE)
    rec["mandel"] = flag
    rec["c"]["re"] = c_re
    rec["c"]["im"] = c_im
    rec["view_rect"]["left"] = view.left
    rec["view_rect"]["right"] = view.right
    rec["view_rect"]["bot"] = view.bot
    rec["view_rect"]["top"] = view.top
    rec["max_iter"] = snapshot.max_iterations
    return rec[0]


def pack_freqs(freqs: Freqs) -> np.void:
    rec = _record(FREQS_DTYPE)
    rec["f1"], rec["f2"], rec["f3"] = freqs.f1, freqs.f2, freqs.f3
    return rec[0]


def pack_prox_type(targets: ProximityTargets) -> np.void:
    rec = _record(PROXTYPE_DTYPE)
    rec["to_unit_circ"] = int(bool(targets.to_unit_circle))
    rec["to_horizontal"] = int(bool(targets.to_horizontal))
    rec["to_vertical"] = int(bool(targets.to_vertical))
    return rec[0]


def pack_im_dims(height: int, width: int) -> np.void:
    rec = _record(IMDIMS_DTYPE)
    rec["imH"], rec["imW"] = int(height), int(width)
    return rec[0]


def pack_field_ranges(ranges: tuple[tuple[float, float], ...]) -> np.void:
    """(lo, hi) × 3 を FieldRanges_t に詰める。"""
    if len(ranges) != 3:
        raise ValueError(f"expected 3 ranges, got {len(ranges)}")
    rec = _record(FIELD_RANGES_DTYPE)
    for (lo, hi), ch in zip(ranges, "rgb"):
        rec[f"lo_{ch}"] = lo
        rec[f"hi_{ch}"] = hi
    return rec[0]


__all__ = [
    "BOX_DTYPE",
    "COMPLEX_DTYPE",
    "FPARAM_DTYPE",
    "FREQS_DTYPE",
    "PROXTYPE_DTYPE",
    "IMDIMS_DTYPE",
    "FIELD_RANGES_DTYPE",
    "STRUCT_SIZES",
    "mode_flag_and_constant",
    "pack_box",
    "pack_fparam",
    "pack_freqs",
    "pack_prox_type",
    "pack_im_dims",
    "pack_field_ranges",
]
