import pytest

from ecgpdf.entities import IDENTITY, Point
from ecgpdf.geometry import apply, compose, path_bounds, points_match

MATRICES = [
    (2.0, 0.0, 0.0, 3.0, 10.0, -4.0),
    (0.0, 1.0, -1.0, 0.0, 5.0, 5.0),
    (1.5, 0.2, -0.3, 0.8, 0.0, 72.0),
]


@pytest.mark.parametrize("m", MATRICES)
def test_identity_is_neutral_on_both_sides(m):
    assert compose(m, IDENTITY) == m
    assert compose(IDENTITY, m) == m


def test_compose_applies_inner_first():
    translate = (1.0, 0.0, 0.0, 1.0, 10.0, 20.0)
    scale = (2.0, 0.0, 0.0, 2.0, 0.0, 0.0)
    # scale inside translate: points are scaled, then shifted
    ctm = compose(translate, scale)
    assert apply(1.0, 1.0, ctm, 0.0) == Point(12.0, -22.0)
    # translate inside scale: the shift is scaled too
    ctm = compose(scale, translate)
    assert apply(1.0, 1.0, ctm, 0.0) == Point(22.0, -42.0)


def test_compose_is_associative():
    a, b, c = MATRICES
    left = compose(compose(a, b), c)
    right = compose(a, compose(b, c))
    assert left == pytest.approx(right)


def test_apply_flips_vertical_axis_once():
    assert apply(30.0, 700.0, IDENTITY, 792.0) == Point(30.0, 92.0)
    ctm = (1.0, 0.0, 0.0, 1.0, 0.0, 100.0)
    assert apply(0.0, 0.0, ctm, 792.0) == Point(0.0, 692.0)


def test_points_match_tolerance():
    assert points_match(Point(1.0, 1.0), Point(1.0005, 0.9995))
    assert not points_match(Point(1.0, 1.0), Point(1.002, 1.0))


def test_path_bounds():
    segments = [(Point(3, 4), Point(1, 8)), (Point(1, 8), Point(9, 2))]
    assert path_bounds(segments) == (1, 2, 9, 8)
    assert path_bounds([]) is None
