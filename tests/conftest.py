"""共通フィクスチャ。

- 乱数シード固定
- 設定（FRX_*）の隔離
- OpenCL コンテキスト（利用できなければ gpu テストを skip）
"""

from __future__ import annotations

from typing import Iterator

import numpy as np
import pytest

from common import settings
from engine.params import (
    Complex,
    Fixed,
    Freqs,
    IterationCount,
    ParamSnapshot,
    SingleField,
    ViewSpec,
)


@pytest.fixture(scope="session", autouse=True)
def np_seed() -> None:
    """NumPy の乱数を固定。"""
    np.random.seed(12345)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """テスト中に設定した FRX_* を外へ漏らさない。"""
    for name in (
        "FRX_LOG_LEVEL",
        "FRX_CL_BUILD_OPTIONS",
        "FRX_PROFILE_KERNELS",
        "FRX_RASTER_HEIGHT",
        "FRX_RASTER_WIDTH",
    ):
        monkeypatch.delenv(name, raising=False)
    settings.reload_from_env()
    yield
    monkeypatch.undo()
    settings.reload_from_env()


@pytest.fixture()
def scenario_snapshot() -> ParamSnapshot:
    """Fixed / zoom=1 / aspect=1 / center=(-0.4, 0) / 100 反復 / 反復回数 + 正弦カラーマップ。"""
    return ParamSnapshot(
        mode=Fixed(),
        view=ViewSpec(center=Complex(-0.4, 0.0), zoom=1.0, aspect=1.0),
        max_iterations=100,
        visualization=SingleField(IterationCount(), Freqs(1.1, 3.3, 9.9)),
    )


@pytest.fixture(scope="session")
def cl_context():
    """利用可能な OpenCL コンテキスト。無ければ skip。"""
    cl = pytest.importorskip("pyopencl")
    try:
        return cl.create_some_context(interactive=False)
    except (cl.Error, RuntimeError) as e:
        pytest.skip(f"no OpenCL platform available: {e}")
