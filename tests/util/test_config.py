from __future__ import annotations

from pathlib import Path

import pytest

from common import settings
from util import utils
from util.paths import unique_path


def test_default_config_is_loaded() -> None:
    cfg = utils.load_config()
    assert cfg["raster"] == {"height": 768, "width": 1280}
    assert cfg["max_iterations"] == 100
    assert cfg["frequencies"] == [1.1, 3.3, 9.9]


def test_safe_load_yaml_is_fail_soft(tmp_path: Path) -> None:
    bad = tmp_path / "bad.yaml"
    bad.write_text("raster: [unclosed", encoding="utf-8")
    assert utils._safe_load_yaml(bad) == {}
    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("42\n", encoding="utf-8")
    assert utils._safe_load_yaml(scalar) == {}
    assert utils._safe_load_yaml(tmp_path / "missing.yaml") == {}


def test_raster_dims_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    assert utils.resolve_raster_dims({}) == utils.DEFAULT_RASTER_DIMS
    assert utils.resolve_raster_dims({"raster": {"height": 400, "width": 600}}) == (400, 600)
    monkeypatch.setenv("FRX_RASTER_WIDTH", "320")
    settings.reload_from_env()
    assert utils.resolve_raster_dims({"raster": {"height": 400, "width": 600}}) == (400, 320)


def test_unique_path_appends_counter(tmp_path: Path) -> None:
    p = tmp_path / "shot.png"
    assert unique_path(p) == p
    p.write_bytes(b"")
    assert unique_path(p) == tmp_path / "shot-1.png"
    (tmp_path / "shot-1.png").write_bytes(b"")
    assert unique_path(p) == tmp_path / "shot-2.png"
