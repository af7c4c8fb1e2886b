#!/usr/bin/env python3
"""
Render the line work recovered from an ECG printout page to a PNG so the
baseline and trace classification can be checked by eye.

Grid and other strokes are drawn grey, paths accepted as trace are blue and
the detected row baselines are overlaid in red.  Example:

    python render_trace_png.py kardiamobile-1l-ecg.pdf --output page2.png --size 2048
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence, Tuple

from PIL import Image, ImageDraw

from ecgpdf.config import LayoutConfig
from ecgpdf.content import load_page_paths
from ecgpdf.entities import DrawingPath, Point
from ecgpdf.errors import BaselinesNotFound, ECGPDFError
from ecgpdf.geometry import path_bounds
from ecgpdf.waveform import extract_baselines, is_trace_path

GRID_COLOR = (170, 170, 170)
TRACE_COLOR = (20, 60, 200)
BASELINE_COLOR = (220, 30, 30)


def _collect_bounds(paths: Sequence[DrawingPath]) -> Tuple[float, float, float, float]:
    boxes = [box for box in (path_bounds(path.segments) for path in paths) if box is not None]
    if not boxes:
        raise RuntimeError("Unable to compute bounds for the requested geometry.")
    return (
        min(box[0] for box in boxes),
        min(box[1] for box in boxes),
        max(box[2] for box in boxes),
        max(box[3] for box in boxes),
    )


def _build_transform(
    bounds: Tuple[float, float, float, float],
    size_px: int,
    padding_ratio: float,
):
    min_x, min_y, max_x, max_y = bounds
    width = max(max_x - min_x, 1e-9)
    height = max(max_y - min_y, 1e-9)
    pad = max(width, height) * padding_ratio

    world_min_x = min_x - pad
    world_min_y = min_y - pad
    world_width = width + 2 * pad
    world_height = height + 2 * pad

    scale = size_px / world_width
    image_height = max(1, int(round(world_height * scale)))

    # Page space is already top-left origin, so no vertical flip here.
    def transform(point: Point) -> Tuple[float, float]:
        return (point.x - world_min_x) * scale, (point.y - world_min_y) * scale

    return transform, image_height


def render_png(
    paths: Sequence[DrawingPath],
    destination: Path,
    size_px: int,
    *,
    layout: LayoutConfig | None = None,
    padding_ratio: float = 0.02,
) -> None:
    layout = layout or LayoutConfig()
    bounds = _collect_bounds(paths)
    transform, image_height = _build_transform(bounds, size_px, padding_ratio)

    image = Image.new("RGB", (size_px, image_height), (255, 255, 255))
    draw = ImageDraw.Draw(image)
    stroke = max(1, int(size_px / 1024))

    for path in paths:
        color = TRACE_COLOR if is_trace_path(path, layout) else GRID_COLOR
        for start, end in path.segments:
            draw.line([transform(start), transform(end)], fill=color, width=stroke)

    try:
        baselines = extract_baselines(paths, layout)
    except BaselinesNotFound:
        print("[warn] No baselines detected; rendering without overlay")
        baselines = []
    min_x, _, max_x, _ = bounds
    for y in baselines:
        draw.line(
            [transform(Point(min_x, y)), transform(Point(max_x, y))],
            fill=BASELINE_COLOR,
            width=stroke,
        )

    destination.parent.mkdir(parents=True, exist_ok=True)
    image.save(destination)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render recovered ECG page geometry to PNG.")
    parser.add_argument("input", type=Path, help="Source PDF")
    parser.add_argument("--output", type=Path, required=True, help="Destination PNG path")
    parser.add_argument("--page", type=int, default=2, help="1-based page to render (default: 2)")
    parser.add_argument("--size", type=int, default=1600, help="Output width in pixels")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        paths, _height = load_page_paths(args.input, args.page)
        if not paths:
            raise ECGPDFError("No stroked paths were found on the requested page.")
        render_png(paths, args.output, args.size)
    except (ECGPDFError, OSError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    print(f"[+] PNG written to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
