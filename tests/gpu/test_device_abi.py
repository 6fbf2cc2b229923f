from __future__ import annotations

import numpy as np
import pytest

cl = pytest.importorskip("pyopencl")

from engine.compute import structs as S  # noqa: E402
from engine.compute.source import STRUCTS_SOURCE  # noqa: E402
from engine.params import Complex, ParamSnapshot, Parametrized  # noqa: E402

pytestmark = pytest.mark.gpu

ABI_KERNELS = """
__kernel void sizes(__global int *out) {
  out[0] = (int)sizeof(FParam_t);
  out[1] = (int)sizeof(Box_t);
  out[2] = (int)sizeof(Freqs_t);
  out[3] = (int)sizeof(ProxType_t);
  out[4] = (int)sizeof(ImDims_t);
  out[5] = (int)sizeof(FieldRanges_t);
}

__kernel void echo_fparam(__global FPN *out, __global int *iout, FParam_t p) {
  out[0] = p.c.re;
  out[1] = p.c.im;
  out[2] = p.view_rect.left;
  out[3] = p.view_rect.top;
  iout[0] = p.mandel;
  iout[1] = p.MAXITER;
}
"""


@pytest.fixture(scope="module")
def abi_program(cl_context):  # noqa: ANN001, ANN201
    program = cl.Program(cl_context, STRUCTS_SOURCE + ABI_KERNELS).build()
    return cl_context, cl.CommandQueue(cl_context), program


def test_device_struct_sizes_match_host(abi_program) -> None:  # noqa: ANN001
    ctx, queue, program = abi_program
    out = np.zeros(6, dtype=np.int32)
    buf = cl.Buffer(ctx, cl.mem_flags.WRITE_ONLY, out.nbytes)
    program.sizes(queue, (1,), None, buf)
    cl.enqueue_copy(queue, out, buf).wait()
    expected = [
        S.STRUCT_SIZES[n]
        for n in ("FParam_t", "Box_t", "Freqs_t", "ProxType_t", "ImDims_t", "FieldRanges_t")
    ]
    assert out.tolist() == expected


def test_fparam_round_trips_through_device(abi_program) -> None:  # noqa: ANN001
    ctx, queue, program = abi_program
    snap = ParamSnapshot(mode=Parametrized(Complex(-0.7, 0.3)), max_iterations=321)
    fout = np.zeros(4, dtype=np.float64)
    iout = np.zeros(2, dtype=np.int32)
    fbuf = cl.Buffer(ctx, cl.mem_flags.WRITE_ONLY, fout.nbytes)
    ibuf = cl.Buffer(ctx, cl.mem_flags.WRITE_ONLY, iout.nbytes)
    program.echo_fparam(queue, (1,), None, fbuf, ibuf, S.pack_fparam(snap))
    cl.enqueue_copy(queue, fout, fbuf)
    cl.enqueue_copy(queue, iout, ibuf).wait()
    view = snap.view_bbox()
    assert fout.tolist() == [-0.7, 0.3, view.left, view.top]
    assert iout.tolist() == [0, 321]
