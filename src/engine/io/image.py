"""
どこで: `engine.io.image`。
何を: 外部サンプル画像の読み込み（RGB uint8 配列へデコード）と、RGB ラスタの画像保存。
なぜ: 画像コーデックを Pillow に閉じ込め、計算コアには (H, W, 3) uint8 の配列だけを渡すため。
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from engine.compute.errors import ResourceError
from util.paths import ensure_screenshots_dir, unique_path


def load_rgb(path: str | Path) -> np.ndarray:
    """画像を読み込み `(H, W, 3)` の uint8 配列で返す。

    デコードできない/存在しない場合は `ResourceError`。
    """
    try:
        with Image.open(path) as img:
            rgb = img.convert("RGB")
            arr = np.asarray(rgb, dtype=np.uint8)
    except (OSError, UnidentifiedImageError, ValueError) as e:
        raise ResourceError(f"could not load image '{path}': {e}") from e
    return np.ascontiguousarray(arr)


def save_rgb(rgb: np.ndarray, path: str | Path | None = None) -> Path:
    """RGB ラスタ（行優先, 1 画素 3 バイト）を画像として保存する。

    Parameters
    ----------
    rgb : np.ndarray
        `(H, W, 3)` の uint8 配列。
    path : str | Path | None
        出力先。None の場合は `data/screenshot/` にタイムスタンプ名の PNG で保存。

    Returns
    -------
    Path
        保存先のファイルパス。
    """
    arr = np.asarray(rgb)
    if arr.ndim != 3 or arr.shape[2] != 3 or arr.dtype != np.uint8:
        raise ValueError(f"expected (H, W, 3) uint8 raster, got {arr.shape} {arr.dtype}")
    if path is None:
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        h, w = arr.shape[:2]
        path = unique_path(ensure_screenshots_dir() / f"{ts}_{w}x{h}.png")
    out = Path(path)
    try:
        Image.fromarray(np.ascontiguousarray(arr)).save(out)
    except (OSError, ValueError) as e:
        raise RuntimeError(f"image save failed: {e}") from e
    return out


__all__ = ["load_rgb", "save_rgb"]
