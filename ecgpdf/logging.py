from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple

from .entities import DrawingPath
from .geometry import path_bounds


def log_paths(paths: Sequence[DrawingPath], destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    lines: List[str] = []
    for idx, path in enumerate(paths):
        r, g, b = path.color
        bounds = path_bounds(path.segments)
        bbox = "n/a" if bounds is None else "({:.2f},{:.2f})-({:.2f},{:.2f})".format(*bounds)
        lines.append(
            f"#{idx:04d} color=({r:.3f},{g:.3f},{b:.3f}) width={path.width:.3f} "
            f"segments={len(path.segments):<5} bbox={bbox}"
        )
    destination.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")


@dataclass
class RowReportLogger:
    destination: Path

    def __post_init__(self) -> None:
        self._lines: List[str] = []

    def record(
        self,
        *,
        row: int,
        baseline: float,
        samples: int,
        x_range: Tuple[float, float] | None = None,
        v_range: Tuple[float, float] | None = None,
    ) -> None:
        line = f"Row {row} baseline={baseline:.3f} samples={samples}"
        if x_range is not None:
            line += f" x=[{x_range[0]:.3f},{x_range[1]:.3f}]"
        if v_range is not None:
            line += f" mV=[{v_range[0]:.4f},{v_range[1]:.4f}]"
        if samples == 0:
            line += " | no data"
        self._lines.append(line)

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def flush(self) -> None:
        if not self._lines:
            return
        self.destination.parent.mkdir(parents=True, exist_ok=True)
        self.destination.write_text("\n".join(self._lines) + "\n", encoding="utf-8")
