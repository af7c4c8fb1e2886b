import pytest

from ecgpdf.config import LayoutConfig
from ecgpdf.entities import DrawingPath, Point
from ecgpdf.errors import BaselinesNotFound, IncompleteRowSet
from ecgpdf.logging import RowReportLogger
from ecgpdf.waveform import (
    concatenate_to_signal,
    dedupe_x,
    extract_baselines,
    extract_waveform_rows,
    is_trace_path,
    path_points,
    points_to_voltage,
)

BLACK = (0.0, 0.0, 0.0)


def rulings(ys, x0=20.0, x1=580.0, color=BLACK, width=0.4):
    return DrawingPath(
        segments=tuple((Point(x0, y), Point(x1, y)) for y in ys),
        color=color,
        width=width,
    )


def trace(y, n_segments, x0=30.0, color=BLACK, width=0.4, dy=0.0):
    points = [Point(x0 + i, y + (dy if i % 2 else 0.0)) for i in range(n_segments + 1)]
    return DrawingPath(
        segments=tuple(zip(points[:-1], points[1:])),
        color=color,
        width=width,
    )


def test_baselines_in_discovery_order():
    grid = rulings([400.0, 100.0, 250.0, 775.0, 550.0])
    assert extract_baselines([grid]) == [400.0, 100.0, 250.0, 550.0]


def test_baselines_take_first_four_of_first_qualifying_path():
    first = rulings([90.0, 240.0, 390.0, 540.0, 690.0])
    second = rulings([10.0, 20.0, 30.0, 40.0])
    assert extract_baselines([first, second]) == [90.0, 240.0, 390.0, 540.0]


def test_baselines_skip_paths_outside_fingerprint():
    grey = rulings([1.0, 2.0, 3.0, 4.0], color=(0.5, 0.5, 0.5))
    thick = rulings([5.0, 6.0, 7.0, 8.0], width=0.45)
    thin = rulings([9.0, 10.0, 11.0, 12.0], width=0.35)
    good = rulings([100.0, 200.0, 300.0, 400.0])
    assert extract_baselines([grey, thick, thin, good]) == [100.0, 200.0, 300.0, 400.0]


def test_baselines_ignore_short_and_sloped_segments():
    segments = (
        (Point(20.0, 100.0), Point(400.0, 100.0)),
        (Point(20.0, 200.0), Point(580.0, 200.02)),
        (Point(20.0, 300.0), Point(580.0, 300.0)),
        (Point(580.0, 400.0), Point(20.0, 400.0)),
    )
    path = DrawingPath(segments=segments, color=BLACK, width=0.4)
    with pytest.raises(BaselinesNotFound):
        extract_baselines([path])


def test_baselines_not_found():
    with pytest.raises(BaselinesNotFound):
        extract_baselines([rulings([100.0, 200.0, 770.0, 780.0])])
    with pytest.raises(BaselinesNotFound):
        extract_baselines([])


def test_baselines_respect_layout_override():
    layout = LayoutConfig(row_count=2)
    assert extract_baselines([rulings([100.0, 200.0, 300.0, 400.0])], layout) == [100.0, 200.0]


def test_trace_segment_threshold():
    assert not is_trace_path(trace(100.0, 39))
    assert is_trace_path(trace(100.0, 40))
    assert not is_trace_path(trace(100.0, 40, color=(0.0, 0.0, 0.1)))
    assert not is_trace_path(trace(100.0, 40, width=0.5))


def test_path_points_skip_shared_endpoints():
    path = DrawingPath(
        segments=(
            (Point(0.0, 0.0), Point(1.0, 0.0)),
            (Point(1.0005, 0.0), Point(2.0, 1.0)),
            (Point(5.0, 5.0), Point(6.0, 5.0)),
        ),
        color=BLACK,
        width=0.4,
    )
    assert path_points(path) == [
        Point(0.0, 0.0),
        Point(1.0, 0.0),
        Point(2.0, 1.0),
        Point(5.0, 5.0),
        Point(6.0, 5.0),
    ]


def test_rows_assigned_by_nearest_baseline():
    baselines = [100.0, 250.0, 400.0, 550.0]
    paths = [
        trace(395.0, 40, x0=200.0),
        trace(105.0, 40, x0=100.0),
        trace(398.0, 40, x0=50.0),
        trace(700.0, 40),  # farther than 80 from every baseline
        trace(250.0, 39),  # too sparse
    ]
    rows = extract_waveform_rows(paths, baselines)
    assert sorted(rows) == [0, 1, 2, 3]
    assert len(rows[0]) == 41
    assert rows[1] == []
    assert len(rows[2]) == 82
    assert rows[3] == []
    xs = [p.x for p in rows[2]]
    assert xs == sorted(xs)
    assert xs[0] == 50.0


def test_row_distance_cutoff_is_exclusive():
    rows = extract_waveform_rows([trace(180.0, 40)], [100.0])
    assert rows[0] == []
    rows = extract_waveform_rows([trace(179.9, 40)], [100.0])
    assert len(rows[0]) == 41


def test_row_sort_is_idempotent():
    rows = extract_waveform_rows([trace(100.0, 50, dy=3.0)], [100.0])
    again = sorted(rows[0], key=lambda p: p.x)
    assert again == rows[0]


def test_dedupe_x():
    points = [Point(1.0, 0.0), Point(1.005, 1.0), Point(2.0, 2.0), Point(2.0, 3.0)]
    assert dedupe_x(points, 0.01) == [Point(1.0, 0.0), Point(2.0, 2.0)]
    assert dedupe_x([]) == []


def test_points_to_voltage():
    (voltage,) = points_to_voltage([Point(0.0, 100.0)], 150.0, 28.346)
    assert voltage == pytest.approx(1.764, abs=1e-3)
    (voltage,) = points_to_voltage([Point(0.0, 160.0)], 150.0, 28.346)
    assert voltage < 0


def test_concatenate_in_row_order(capsys):
    baselines = [100.0, 200.0, 300.0]
    rows = {
        0: [Point(1.0, 100.0), Point(1.001, 90.0), Point(2.0, 110.0)],
        1: [],
        2: [Point(5.0, 300.0 - 28.346)],
    }
    signal = concatenate_to_signal(rows, baselines)
    assert signal == pytest.approx([0.0, -10.0 / 28.346, 1.0])
    out = capsys.readouterr().out
    assert "Row 1: no data" in out
    assert "Row 0: 2 samples" in out


def test_concatenate_missing_row_is_fatal():
    with pytest.raises(IncompleteRowSet) as excinfo:
        concatenate_to_signal({0: [Point(0.0, 0.0)]}, [0.0, 10.0])
    assert excinfo.value.row == 1


def test_concatenate_records_row_report(tmp_path):
    report = RowReportLogger(tmp_path / "rows.txt")
    concatenate_to_signal({0: [], 1: [Point(0.0, 50.0), Point(1.0, 60.0)]}, [0.0, 50.0], report=report)
    report.flush()
    lines = (tmp_path / "rows.txt").read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Row 0 baseline=0.000 samples=0 | no data"
    assert lines[1].startswith("Row 1 baseline=50.000 samples=2 x=[0.000,1.000]")
