#!/usr/bin/env python3
"""
List every stroked drawing path recovered from a PDF page and flag the ones
the converter treats as grid rulings or trace.  Read-only; handy when the
layout thresholds need retuning for a new printout.
"""

from __future__ import annotations

import argparse
from collections import Counter
from pathlib import Path
from typing import Sequence

from ecgpdf.config import LayoutConfig
from ecgpdf.content import load_page_paths
from ecgpdf.geometry import path_bounds
from ecgpdf.waveform import is_trace_path


def list_paths(path: Path, page: int, layout: LayoutConfig) -> None:
    paths, height = load_page_paths(path, page)
    print(f"{path.name} page {page}: {len(paths)} paths, height {height:.1f}")
    styles = Counter((p.color, round(p.width, 3)) for p in paths)
    for (color, width), count in styles.most_common():
        print(f"  style color={color} width={width}: {count} path(s)")
    for idx, p in enumerate(paths):
        tag = ""
        if is_trace_path(p, layout):
            tag = " [trace]"
        elif p.is_black and layout.width_in_band(p.width) and len(p.segments) >= layout.baseline_min_segments:
            tag = " [grid?]"
        box = path_bounds(p.segments)
        print(f"  #{idx:04d} segments={len(p.segments):<5} width={p.width:.3f} bbox={box}{tag}")


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Summarise stroked paths on a PDF page.")
    parser.add_argument("input", type=Path)
    parser.add_argument("--page", type=int, default=2)
    args = parser.parse_args(argv)
    list_paths(args.input, args.page, LayoutConfig())


if __name__ == "__main__":
    main()
