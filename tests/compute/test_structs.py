from __future__ import annotations

import numpy as np
import pytest

from engine.compute import structs as S
from engine.params import (
    BBox,
    Complex,
    Freqs,
    ParamSnapshot,
    Parametrized,
    ProximityTargets,
    ViewSpec,
)


@pytest.mark.parametrize(
    "dtype, c_name",
    [
        (S.FPARAM_DTYPE, "FParam_t"),
        (S.BOX_DTYPE, "Box_t"),
        (S.FREQS_DTYPE, "Freqs_t"),
        (S.PROXTYPE_DTYPE, "ProxType_t"),
        (S.IMDIMS_DTYPE, "ImDims_t"),
        (S.FIELD_RANGES_DTYPE, "FieldRanges_t"),
    ],
)
def test_record_sizes_match_device_layout(dtype: np.dtype, c_name: str) -> None:
    assert dtype.itemsize == S.STRUCT_SIZES[c_name]
    assert not dtype.isalignedstruct


def test_fparam_field_offsets_have_no_implicit_padding() -> None:
    fields = S.FPARAM_DTYPE.fields
    assert fields is not None
    assert fields["mandel"][1] == 0
    assert fields["c"][1] == 8
    assert fields["view_rect"][1] == 24
    assert fields["max_iter"][1] == 56


def test_fixed_mode_packs_flag_and_zero_constant() -> None:
    snap = ParamSnapshot(view=ViewSpec(Complex(-0.4, 0.0), 1.0, 1.0), max_iterations=100)
    rec = S.pack_fparam(snap)
    assert int(rec["mandel"]) == 1
    assert float(rec["c"]["re"]) == 0.0 and float(rec["c"]["im"]) == 0.0
    assert int(rec["max_iter"]) == 100
    view = rec["view_rect"]
    assert (float(view["left"]), float(view["right"])) == pytest.approx((-1.4, 0.6))
    assert (float(view["bot"]), float(view["top"])) == pytest.approx((-1.0, 1.0))


def test_parametrized_mode_packs_constant() -> None:
    flag, re, im = S.mode_flag_and_constant(Parametrized(Complex(-0.7, 0.3)))
    assert (flag, re, im) == (0, -0.7, 0.3)
    rec = S.pack_fparam(ParamSnapshot(mode=Parametrized(Complex(-0.7, 0.3))))
    assert int(rec["mandel"]) == 0
    assert float(rec["c"]["re"]) == -0.7


def test_fparam_bytes_are_little_endian_layout() -> None:
    rec = S.pack_fparam(ParamSnapshot(max_iterations=7))
    raw = rec.tobytes()
    assert len(raw) == 64
    assert int.from_bytes(raw[0:4], "little") == 1
    assert int.from_bytes(raw[56:60], "little") == 7


def test_small_records() -> None:
    box = S.pack_box(BBox(-1.0, 2.0, -3.0, 4.0))
    assert np.frombuffer(box.tobytes(), dtype="<f8").tolist() == [-1.0, 2.0, -3.0, 4.0]

    freqs = S.pack_freqs(Freqs(1.1, 3.3, 9.9))
    assert np.frombuffer(freqs.tobytes(), dtype="<f8").tolist() == [1.1, 3.3, 9.9]

    prox = S.pack_prox_type(ProximityTargets(to_unit_circle=True, to_vertical=True))
    assert prox.tobytes() == bytes([1, 0, 1, 0])

    dims = S.pack_im_dims(480, 640)
    assert np.frombuffer(dims.tobytes(), dtype="<i4").tolist() == [480, 640]


def test_field_ranges_requires_three_channels() -> None:
    rec = S.pack_field_ranges(((0.0, 1.0), (2.0, 3.0), (4.0, 5.0)))
    assert np.frombuffer(rec.tobytes(), dtype="<f8").tolist() == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]
    with pytest.raises(ValueError):
        S.pack_field_ranges(((0.0, 1.0),))
