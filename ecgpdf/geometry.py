from __future__ import annotations

from typing import Iterable, Tuple

from .entities import Matrix, Point, Segment

POINT_TOL = 1e-3


def fuzzy_eq(a: float, b: float, tol: float = 1e-6) -> bool:
    return abs(a - b) <= tol


def points_match(p1: Point, p2: Point, tol: float = POINT_TOL) -> bool:
    return fuzzy_eq(p1.x, p2.x, tol) and fuzzy_eq(p1.y, p2.y, tol)


def compose(outer: Matrix, inner: Matrix) -> Matrix:
    """
    Product ``outer * inner`` of two affine matrices stored as
    ``(a, b, c, d, e, f)``.  The result applies ``inner`` first, then
    ``outer``, which is how a ``cm`` operand nests inside the current CTM.
    """

    a1, b1, c1, d1, e1, f1 = outer
    a2, b2, c2, d2, e2, f2 = inner
    return (
        a1 * a2 + c1 * b2,
        b1 * a2 + d1 * b2,
        a1 * c2 + c1 * d2,
        b1 * c2 + d1 * d2,
        a1 * e2 + c1 * f2 + e1,
        b1 * e2 + d1 * f2 + f1,
    )


def apply(x: float, y: float, ctm: Matrix, page_height: float) -> Point:
    """Map a user-space coordinate through ``ctm`` and flip to a top-left origin."""

    a, b, c, d, e, f = ctm
    x_page = a * x + c * y + e
    y_page = b * x + d * y + f
    return Point(x_page, page_height - y_page)


def path_bounds(segments: Iterable[Segment]) -> Tuple[float, float, float, float] | None:
    xs: list[float] = []
    ys: list[float] = []
    for p1, p2 in segments:
        xs.extend((p1.x, p2.x))
        ys.extend((p1.y, p2.y))
    if not xs:
        return None
    return min(xs), min(ys), max(xs), max(ys)
