"""
どこで: `common.settings`
何を: プロジェクトの環境変数を型付きで一元管理し、起動時に読み込む。
なぜ: `os.getenv` の散在を解消し、既定値/型の一貫性とテスト容易性を高めるため。

環境変数（すべて `FRX_` 接頭辞）:
- `FRX_LOG_LEVEL`: `setup_default_logging()` の既定レベル。
- `FRX_CL_BUILD_OPTIONS`: OpenCL ビルドに追加するオプション（空白区切り）。
- `FRX_PROFILE_KERNELS`: 1 でカーネルごとの所要時間を debug ログへ出す。
- `FRX_RASTER_HEIGHT` / `FRX_RASTER_WIDTH`: 設定ファイルのラスタ寸法を上書き。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_int, env_str


@dataclass
class _Settings:
    # Logging
    LOG_LEVEL: str = "INFO"

    # OpenCL
    CL_BUILD_OPTIONS: str | None = None
    PROFILE_KERNELS: bool = False

    # Raster（None なら設定ファイル/既定値を使う）
    RASTER_HEIGHT: int | None = None
    RASTER_WIDTH: int | None = None


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。

    - bool は `env_bool`、int は `env_int`、文字列は `env_str` を使用。
    - ラスタ寸法は 1 未満を 1 に丸める。
    """
    _settings.LOG_LEVEL = env_str("FRX_LOG_LEVEL", "INFO") or "INFO"

    _settings.CL_BUILD_OPTIONS = env_str("FRX_CL_BUILD_OPTIONS", None)
    _settings.PROFILE_KERNELS = env_bool("FRX_PROFILE_KERNELS", False)

    _settings.RASTER_HEIGHT = env_int("FRX_RASTER_HEIGHT", None, min_value=1)
    _settings.RASTER_WIDTH = env_int("FRX_RASTER_WIDTH", None, min_value=1)


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
