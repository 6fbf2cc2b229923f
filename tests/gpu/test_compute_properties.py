from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import numpy as np
import pytest

pytest.importorskip("pyopencl")

from engine.compute.context import ComputeContext, ENTRY_POINTS  # noqa: E402
from engine.compute.errors import BuildError, ResourceError  # noqa: E402
from engine.compute.pipeline import FieldPipeline  # noqa: E402
from engine.compute.slot import ContextSlot  # noqa: E402
from engine.io.image import save_rgb  # noqa: E402
from engine.params import (  # noqa: E402
    DualField,
    Interpolation,
    IterationCount,
    ParamSnapshot,
    SingleField,
    TriField,
)
from engine.runtime import Job, JobFailure, JobSuccess, run_job  # noqa: E402

pytestmark = pytest.mark.gpu

SMALL = (48, 64)


@pytest.fixture()
def small_ctx(cl_context) -> ComputeContext:  # noqa: ANN001
    return ComputeContext.build(SMALL, cl_context=cl_context)


def _render(ctx: ComputeContext, snap: ParamSnapshot, job_id: int = 1) -> bytes:
    result = run_job(ContextSlot(ctx), Job(job_id, snap, ctx.dims), FieldPipeline())
    assert isinstance(result, JobSuccess), getattr(result, "message", result)
    return ctx.rgb.host.tobytes()


def test_scenario_full_raster(cl_context, scenario_snapshot: ParamSnapshot) -> None:  # noqa: ANN001
    ctx = ComputeContext.build((768, 1280), cl_context=cl_context)
    raw = _render(ctx, scenario_snapshot)
    assert len(raw) == 768 * 1280 * 3
    arr = np.frombuffer(raw, dtype=np.uint8)
    assert arr.min() >= 0 and arr.max() <= 255
    assert arr.max() > arr.min()


def test_all_entry_points_are_available(small_ctx: ComputeContext) -> None:
    for name in ENTRY_POINTS:
        assert small_ctx.kernel(name) is small_ctx.kernel(name)


def test_identical_snapshots_render_identical_bytes(
    small_ctx: ComputeContext, scenario_snapshot: ParamSnapshot
) -> None:
    first = _render(small_ctx, scenario_snapshot, 1)
    second = _render(small_ctx, scenario_snapshot, 2)
    assert first == second


def test_visualization_round_trip_is_idempotent(
    small_ctx: ComputeContext, scenario_snapshot: ParamSnapshot
) -> None:
    single = _render(small_ctx, scenario_snapshot)
    tri = _render(small_ctx, replace(scenario_snapshot, visualization=TriField()))
    again = _render(small_ctx, scenario_snapshot)
    assert single == again
    assert tri != single


def test_resize_rebuilds_buffers_with_new_dims(
    cl_context, scenario_snapshot: ParamSnapshot  # noqa: ANN001
) -> None:
    ctx = ComputeContext.build((768, 1280), cl_context=cl_context)
    slot = ContextSlot(ctx)
    result = run_job(slot, Job(1, scenario_snapshot, (400, 600)), FieldPipeline())
    assert isinstance(result, JobSuccess)
    assert ctx.dims == (400, 600)
    assert ctx.work_dims == (400, 600)
    assert [f.shape for f in ctx.fields] == [(400, 600)] * 3
    assert ctx.rgb.shape == (400, 600, 3)
    assert len(ctx.rgb.host.tobytes()) == 400 * 600 * 3


def test_normalized_tri_field_spans_full_byte_range(
    small_ctx: ComputeContext, scenario_snapshot: ParamSnapshot
) -> None:
    snap = replace(
        scenario_snapshot,
        visualization=TriField(IterationCount(), IterationCount(), IterationCount(), normalize=True),
    )
    _render(small_ctx, snap)
    red = small_ctx.rgb.host[..., 0]
    assert red.min() == 0
    assert red.max() == 255


def test_single_field_matches_host_colormap(
    small_ctx: ComputeContext, scenario_snapshot: ParamSnapshot
) -> None:
    _render(small_ctx, scenario_snapshot)
    field = small_ctx.fields[0].from_device()
    expected = np.floor((0.5 + 0.5 * np.sin(1.1 * field)) * 255.0 + 0.5).astype(np.uint8)
    diff = np.abs(small_ctx.rgb.host[..., 0].astype(int) - expected.astype(int))
    assert diff.max() <= 1


@pytest.mark.parametrize("interp", [Interpolation.NEAREST, Interpolation.BILINEAR])
def test_dual_field_samples_external_image(
    small_ctx: ComputeContext, scenario_snapshot: ParamSnapshot, tmp_path: Path, interp: Interpolation
) -> None:
    tex = np.zeros((8, 8, 3), dtype=np.uint8)
    tex[..., 1] = 200
    path = save_rgb(tex, tmp_path / "tex.png")
    snap = replace(scenario_snapshot, visualization=DualField(image_path=str(path), interpolation=interp))
    _render(small_ctx, snap)
    rgb = small_ctx.rgb.host
    assert (rgb[..., 0] == 0).all()
    assert (rgb[..., 1] == 200).all()
    assert small_ctx.sampled_image is not None
    assert small_ctx.sampled_image.path == str(path)


def test_dual_field_decode_failure_keeps_cached_image(
    small_ctx: ComputeContext, scenario_snapshot: ParamSnapshot, tmp_path: Path
) -> None:
    good = save_rgb(np.full((4, 4, 3), 50, dtype=np.uint8), tmp_path / "good.png")
    _render(small_ctx, replace(scenario_snapshot, visualization=DualField(image_path=str(good))))
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"garbage")
    snap = replace(scenario_snapshot, visualization=DualField(image_path=str(bad)))
    result = run_job(ContextSlot(small_ctx), Job(2, snap, SMALL), FieldPipeline())
    assert isinstance(result, JobFailure)
    assert isinstance(result.error, ResourceError)
    assert small_ctx.sampled_image is not None
    assert small_ctx.sampled_image.path == str(good)


def test_bad_user_function_is_a_build_error(cl_context) -> None:  # noqa: ANN001
    with pytest.raises(BuildError) as ei:
        ComputeContext.build(SMALL, "Complex_t f(Complex_t z, Complex_t c) { return ; }", cl_context=cl_context)
    assert str(ei.value).startswith("device program failed to compile")


def test_custom_user_function_changes_output(
    cl_context, small_ctx: ComputeContext, scenario_snapshot: ParamSnapshot  # noqa: ANN001
) -> None:
    cubic = "Complex_t f(Complex_t z, Complex_t c) {\n  return complex_add(complex_pow(z, 3), c);\n}"
    other = ComputeContext.build(SMALL, cubic, cl_context=cl_context)
    assert other.user_function == cubic
    assert _render(small_ctx, scenario_snapshot) != _render(other, scenario_snapshot)
