"""
どこで: `util.utils`。
何を: プロジェクトルート推定と YAML 設定の読み込み（configs/default.yaml + ルート config.yaml）、
      およびラスタ寸法の解決。
なぜ: 起動時の既定値を 1 箇所から供給し、欠損/不正時もフェイルソフトに動かすため。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from common.settings import get as get_settings

logger = logging.getLogger(__name__)

DEFAULT_RASTER_DIMS: tuple[int, int] = (768, 1280)


def _safe_load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("failed to read config %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _find_project_root(start: Path) -> Path:
    """プロジェクトルートを推定して返す。

    - `src/` 配下から呼ばれることを想定し、上位に `.git` や `pyproject.toml`、`configs/` がある
      もっとも近いディレクトリを返す。
    - 見つからない場合は `start.parent.parent` をフォールバックとして返す。
    """
    cur = start.resolve()
    for parent in [cur] + list(cur.parents):
        if (
            (parent / ".git").exists()
            or (parent / "pyproject.toml").exists()
            or (parent / "configs").exists()
        ):
            return parent
    # 典型: <repo>/src/util/utils.py -> <repo>
    return cur.parent.parent


def load_config() -> Dict[str, Any]:
    """構成を読み込んで辞書で返す（フェイルソフト）。

    優先順:
    1) `configs/default.yaml`（ベース）
    2) ルート `config.yaml`（ベースに上書き）

    - いずれも存在しない/不正な場合は空辞書を返す。
    - ネストした辞書のディープマージは行わず、トップレベルのみ上書き。
    """
    project_root = _find_project_root(Path(__file__).parent)
    base: Dict[str, Any] = {}

    default_path = project_root / "configs" / "default.yaml"
    if default_path.exists():
        base.update(_safe_load_yaml(default_path))

    root_config_path = project_root / "config.yaml"
    if root_config_path.exists():
        base.update(_safe_load_yaml(root_config_path))

    return base


def resolve_raster_dims(cfg: Dict[str, Any] | None = None) -> tuple[int, int]:
    """ラスタ寸法 (height, width) を解決する。

    優先順: 環境変数（FRX_RASTER_HEIGHT/WIDTH）> 設定 `raster.height/width` > (768, 1280)。
    """
    cfg = load_config() if cfg is None else cfg
    raster = cfg.get("raster") if isinstance(cfg.get("raster"), dict) else {}
    h = int(raster.get("height", DEFAULT_RASTER_DIMS[0]))
    w = int(raster.get("width", DEFAULT_RASTER_DIMS[1]))
    settings = get_settings()
    if settings.RASTER_HEIGHT is not None:
        h = settings.RASTER_HEIGHT
    if settings.RASTER_WIDTH is not None:
        w = settings.RASTER_WIDTH
    return max(1, h), max(1, w)
