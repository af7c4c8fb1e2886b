from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

Matrix = Tuple[float, float, float, float, float, float]
Color = Tuple[float, float, float]

IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)
BLACK: Color = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Point:
    """Page coordinate with a top-left origin; y grows downward."""

    x: float
    y: float


Segment = Tuple[Point, Point]


@dataclass(frozen=True)
class DrawingPath:
    segments: Tuple[Segment, ...]
    color: Color
    width: float

    @property
    def is_black(self) -> bool:
        return self.color == BLACK


@dataclass
class GraphicsState:
    ctm: Matrix = IDENTITY
    stroke_color: Color = BLACK
    line_width: float = 1.0

    def copy(self) -> "GraphicsState":
        return GraphicsState(self.ctm, self.stroke_color, self.line_width)


@dataclass
class Subpath:
    """Pending segments for the path currently under construction."""

    current: Point = Point(0.0, 0.0)
    start: Point = Point(0.0, 0.0)
    segments: List[Segment] = field(default_factory=list)
