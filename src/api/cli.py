"""
Headless one-shot renderer.

Builds a compute context, drives `FractalExplorer` with a `FrameClock` until the
first image is published, then writes it as PNG.

Usage (after `pip install -e .`):
    fractal-render --out out.png
    fractal-render --height 400 --width 600 --zoom 0.5 --center -0.75 0.1
    fractal-render --julia -0.7 0.3 --vis tri --normalize
    fractal-render --vis dual --image texture.png --interpolation bilinear
    fractal-render --function my_f.cl

Exit code is 1 when the build, the render or the save fails.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from common.logging import setup_default_logging
from engine.compute.errors import FractalError
from engine.core import FrameClock
from engine.params import (
    Complex,
    DualField,
    Fixed,
    Freqs,
    Interpolation,
    MAX_ITERATIONS,
    ParamSnapshot,
    Parametrized,
    SingleField,
    TriField,
    ViewSpec,
)
from util.utils import load_config, resolve_raster_dims

from .explorer import FractalExplorer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fractal-render", description=__doc__.splitlines()[1])
    p.add_argument("--out", default=None, help="output PNG (default: data/screenshot/<ts>.png)")
    p.add_argument("--height", type=int, default=None)
    p.add_argument("--width", type=int, default=None)
    p.add_argument("--center", type=float, nargs=2, metavar=("RE", "IM"), default=None)
    p.add_argument("--zoom", type=float, default=None)
    p.add_argument("--aspect", type=float, default=None)
    p.add_argument("--iterations", type=int, default=None, help=f"1..{MAX_ITERATIONS}")
    p.add_argument(
        "--julia", type=float, nargs=2, metavar=("RE", "IM"), default=None,
        help="use a fixed constant c (Julia-like mode)",
    )
    p.add_argument("--vis", choices=["single", "tri", "dual"], default="single")
    p.add_argument("--freqs", type=float, nargs=3, default=None, help="sine colormap frequencies")
    p.add_argument("--normalize", action="store_true", help="normalize tri-field channels")
    p.add_argument("--image", default=None, help="image sampled by the dual-field view")
    p.add_argument("--interpolation", choices=["nearest", "bilinear"], default="nearest")
    p.add_argument("--function", type=Path, default=None, help="file with a custom f() body")
    p.add_argument("--timeout", type=float, default=60.0, help="seconds to wait for the render")
    p.add_argument("--log-level", default=None)
    return p


def snapshot_from_args(args: argparse.Namespace, cfg: dict) -> ParamSnapshot:
    base = ParamSnapshot.from_config(cfg)
    view = base.view
    view = ViewSpec(
        center=Complex(*args.center) if args.center is not None else view.center,
        zoom=args.zoom if args.zoom is not None else view.zoom,
        aspect=args.aspect if args.aspect is not None else view.aspect,
    )
    mode = Parametrized(Complex(*args.julia)) if args.julia is not None else Fixed()
    if args.vis == "single":
        freqs = Freqs(*args.freqs) if args.freqs is not None else base.visualization.frequencies
        vis = SingleField(frequencies=freqs)
    elif args.vis == "tri":
        vis = TriField(normalize=args.normalize)
    else:
        if args.image is None:
            raise ValueError("--vis dual requires --image")
        vis = DualField(image_path=args.image, interpolation=Interpolation[args.interpolation.upper()])
    return ParamSnapshot(
        mode=mode,
        view=view,
        max_iterations=args.iterations if args.iterations is not None else base.max_iterations,
        visualization=vis,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_default_logging(args.log_level)
    cfg = load_config()

    try:
        params = snapshot_from_args(args, cfg)
    except (TypeError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    h, w = resolve_raster_dims(cfg)
    dims = (args.height or h, args.width or w)

    try:
        explorer = FractalExplorer(params, dims)
    except FractalError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.function is not None:
        try:
            text = args.function.read_text(encoding="utf-8")
        except OSError as e:
            print(f"error: cannot read {args.function}: {e}", file=sys.stderr)
            return 1
        if not explorer.recompile(text):
            print(f"error: {explorer.status().label}", file=sys.stderr)
            return 1

    clock = FrameClock([explorer])
    finished = clock.run_until(
        lambda: explorer.image.version > 0 or explorer.status().kind == "error",
        poll_interval=float(cfg.get("poll_interval", 0.01)),
        timeout=args.timeout,
    )
    status = explorer.status()
    if status.kind == "error":
        print(f"error: {status.label}", file=sys.stderr)
        return 1
    if not finished:
        print(f"error: render did not finish within {args.timeout}s", file=sys.stderr)
        return 1

    out = explorer.save_image(args.out)
    if out is None:
        print(f"error: {explorer.status().label}", file=sys.stderr)
        return 1
    logger.info("saved %s", out)
    print(out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
