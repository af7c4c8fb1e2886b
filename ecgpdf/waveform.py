"""
Turn interpreted drawing paths into a calibrated voltage trace.

The printout draws one lead across several rows.  Each row has a black
baseline ruling at 0 mV and the trace itself is a dense polyline in the same
pen style.  Both are black strokes in the ~0.4 pt width band; rulings are a
handful of long horizontal segments while the trace is hundreds of short ones.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from .config import LayoutConfig
from .entities import DrawingPath, Point
from .errors import BaselinesNotFound, IncompleteRowSet
from .geometry import points_match
from .logging import RowReportLogger

Rows = Dict[int, List[Point]]

DEFAULT_LAYOUT = LayoutConfig()


def _pen_matches(path: DrawingPath, layout: LayoutConfig) -> bool:
    return path.is_black and layout.width_in_band(path.width)


def extract_baselines(
    paths: Sequence[DrawingPath],
    layout: LayoutConfig = DEFAULT_LAYOUT,
) -> List[float]:
    """Return the y of each row's zero line, in discovery order."""

    for path in paths:
        if not _pen_matches(path, layout) or len(path.segments) < layout.baseline_min_segments:
            continue
        rulings = [
            p1.y
            for p1, p2 in path.segments
            if abs(p1.y - p2.y) < layout.horizontal_tol and abs(p2.x - p1.x) > layout.baseline_min_span
        ]
        visible = [y for y in rulings if y < layout.visible_y_limit]
        if len(visible) >= layout.row_count:
            return visible[: layout.row_count]
    raise BaselinesNotFound("Could not find baseline grid lines in PDF")


def path_points(path: DrawingPath, tol: float = DEFAULT_LAYOUT.point_tol) -> List[Point]:
    """Flatten a segment chain, skipping start points shared with the previous end."""

    points: List[Point] = []
    for start, end in path.segments:
        if not points or not points_match(points[-1], start, tol):
            points.append(start)
        points.append(end)
    return points


def is_trace_path(path: DrawingPath, layout: LayoutConfig = DEFAULT_LAYOUT) -> bool:
    return _pen_matches(path, layout) and len(path.segments) >= layout.trace_min_segments


def nearest_row(y_center: float, baselines: Sequence[float]) -> tuple[int, float]:
    best_row = 0
    best_dist = float("inf")
    for idx, baseline in enumerate(baselines):
        dist = abs(y_center - baseline)
        if dist < best_dist:
            best_row, best_dist = idx, dist
    return best_row, best_dist


def extract_waveform_rows(
    paths: Sequence[DrawingPath],
    baselines: Sequence[float],
    layout: LayoutConfig = DEFAULT_LAYOUT,
) -> Rows:
    """
    Group trace points by row.  Each qualifying path goes wholly to the row
    whose baseline is closest to its mean y, or is dropped when no baseline
    lies within ``layout.row_max_distance``.  Rows come back sorted by x.
    """

    rows: Rows = {idx: [] for idx in range(len(baselines))}
    for path in paths:
        if not is_trace_path(path, layout):
            continue
        points = path_points(path, layout.point_tol)
        if not points:
            continue
        y_center = sum(p.y for p in points) / len(points)
        row, dist = nearest_row(y_center, baselines)
        if dist < layout.row_max_distance:
            rows[row].extend(points)

    for idx in rows:
        rows[idx] = sorted(rows[idx], key=lambda p: p.x)
    return rows


def dedupe_x(points: Sequence[Point], tol: float = DEFAULT_LAYOUT.dedup_x_tol) -> List[Point]:
    """Keep the first point of every run whose x values sit within ``tol`` of the last kept one."""

    if not points:
        return []
    kept = [points[0]]
    for point in points[1:]:
        if abs(point.x - kept[-1].x) > tol:
            kept.append(point)
    return kept


def points_to_voltage(points: Sequence[Point], baseline_y: float, cal_pt_per_mv: float) -> List[float]:
    return [(baseline_y - p.y) / cal_pt_per_mv for p in points]


def concatenate_to_signal(
    rows: Mapping[int, Sequence[Point]],
    baselines: Sequence[float],
    layout: LayoutConfig = DEFAULT_LAYOUT,
    *,
    report: RowReportLogger | None = None,
) -> List[float]:
    """Convert every row to millivolts and join them in row (time) order."""

    signal: List[float] = []
    for idx, baseline in enumerate(baselines):
        if idx not in rows:
            raise IncompleteRowSet(idx)
        points = rows[idx]
        if not points:
            print(f"[i] Row {idx}: no data")
            if report:
                report.record(row=idx, baseline=baseline, samples=0)
            continue

        deduped = dedupe_x(points, layout.dedup_x_tol)
        voltages = points_to_voltage(deduped, baseline, layout.cal_pt_per_mv)
        print(
            f"[+] Row {idx}: {len(voltages)} samples, "
            f"x:[{deduped[0].x:.1f}-{deduped[-1].x:.1f}], "
            f"range [{min(voltages):.3f}, {max(voltages):.3f}] mV"
        )
        if report:
            report.record(
                row=idx,
                baseline=baseline,
                samples=len(voltages),
                x_range=(deduped[0].x, deduped[-1].x),
                v_range=(min(voltages), max(voltages)),
            )
        signal.extend(voltages)
    return signal
