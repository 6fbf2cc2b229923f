"""
どこで: `engine.compute.source`。
何を: 同梱の OpenCL ソース（構造体ヘッダ/ユーティリティテンプレート/カーネル）を読み込み、
      ユーザ定義の反復関数をテンプレートの差し替え区間へ埋め込んでプログラム全文を組み立てる。
なぜ: テンプレートは起動時に 1 度だけ読み込む不変リソースとし、差し替え規約を明示するため。

差し替え規約:
- ユーティリティテンプレートには `//>>` と `//<<` がこの順で 1 つずつ含まれる。
- `//>>` より前 + ユーザ文字列 + `//<<` より後ろ、を逐語的に連結する（マーカー自体は残らない）。
- ユーザ文字列は検証しない。マーカーを含む文字列はテンプレートを壊し得るため警告のみ出す。
"""

from __future__ import annotations

import logging
from importlib import resources

logger = logging.getLogger(__name__)

SPLICE_BEGIN = "//>>"
SPLICE_END = "//<<"

# 連結ビルドであることをテンプレートへ伝える（#include を無効化）
BASE_BUILD_OPTIONS: tuple[str, ...] = ("-DEXTERNAL_CONCAT",)

DEFAULT_USER_FUNCTION = """\
// Define custom iteration function f: (Complex_t, Complex_t) -> Complex_t
// first argument is spatially dependent while the second is either
// z_0 for mandel-like and user input for julia-like options.
// Complex_t has fields re and im. Convenience functions
// `complex_add: (Complex_t, Complex_t) -> Complex_t`
// `complex_mult: (Complex_t, Complex_t) -> Complex_t`
// and `complex_pow: (Complex_t, int) -> Complex_t` are in scope.
Complex_t f(Complex_t z, Complex_t c) {
  return complex_add(complex_pow(z, 2), c);
}"""


def _read_kernel_text(name: str) -> str:
    return (resources.files("engine.compute") / "kernels" / name).read_text(encoding="utf-8")


def _check_template(text: str) -> None:
    begin = text.find(SPLICE_BEGIN)
    end = text.find(SPLICE_END)
    if begin < 0 or end < 0 or end < begin:
        raise RuntimeError("utility template must contain '//>>' followed by '//<<'")
    if text.count(SPLICE_BEGIN) != 1 or text.count(SPLICE_END) != 1:
        raise RuntimeError("utility template must contain each splice marker exactly once")


# 起動時に 1 度だけ読み込む（ホットリロードしない）
STRUCTS_SOURCE: str = _read_kernel_text("mandelstructs.h")
UTILS_TEMPLATE: str = _read_kernel_text("mandelutils.cl")
KERNELS_SOURCE: str = _read_kernel_text("mandel.cl")
_check_template(UTILS_TEMPLATE)


def splice_user_function(user_function: str, template: str = UTILS_TEMPLATE) -> str:
    """テンプレートの差し替え区間をユーザ文字列で置き換えた全文を返す。"""
    if SPLICE_BEGIN in user_function or SPLICE_END in user_function:
        # 既知の制約: 区切りを含む入力は検証せずそのまま埋め込む
        logger.warning("user function contains a splice marker; template may be corrupted")
    before, _, remainder = template.partition(SPLICE_BEGIN)
    _, _, after = remainder.partition(SPLICE_END)
    return f"{before}{user_function}{after}"


def compose_program_source(user_function: str | None = None) -> str:
    """ヘッダ + (差し替え済み)ユーティリティ + カーネルを連結したプログラム全文。"""
    utils = UTILS_TEMPLATE if user_function is None else splice_user_function(user_function)
    return f"{STRUCTS_SOURCE}\n{utils}\n{KERNELS_SOURCE}"


def build_options(extra: str | None = None) -> list[str]:
    opts = list(BASE_BUILD_OPTIONS)
    if extra:
        opts.extend(extra.split())
    return opts


__all__ = [
    "SPLICE_BEGIN",
    "SPLICE_END",
    "DEFAULT_USER_FUNCTION",
    "STRUCTS_SOURCE",
    "UTILS_TEMPLATE",
    "KERNELS_SOURCE",
    "splice_user_function",
    "compose_program_source",
    "build_options",
]
