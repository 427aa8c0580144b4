"""Tests for brushflow.utils.vector2.

Test cases:
    - Arithmetic returns new values, inputs untouched
    - length/distance non-negative, zero only for the zero vector
    - lerp exact at k=0 and k=1 (position and radius)
    - Dot/TimedPoint inheritance and value semantics

Run:
    pytest tests/test_vector2.py -v
"""

import dataclasses
import math

import pytest

from brushflow.utils.vector2 import (
    Dot,
    Point2D,
    TimedPoint,
    add,
    as_point,
    distance,
    length,
    lerp,
    scale,
    sub,
)


# ============================================================================
# ARITHMETIC
# ============================================================================

def test_add_sub_scale():
    a = Point2D(1.0, 2.0)
    b = Point2D(3.5, -1.0)
    assert add(a, b) == Point2D(4.5, 1.0)
    assert sub(a, b) == Point2D(-2.5, 3.0)
    assert scale(a, 3.0) == Point2D(3.0, 6.0)
    # Inputs unchanged
    assert a == Point2D(1.0, 2.0)


def test_points_are_immutable():
    p = Point2D(1.0, 2.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.x = 5.0


def test_length_and_distance():
    assert length(Point2D(3.0, 4.0)) == pytest.approx(5.0)
    assert length(Point2D(0.0, 0.0)) == 0.0
    assert length(Point2D(-1e-9, 0.0)) > 0.0
    assert distance(Point2D(1.0, 1.0), Point2D(4.0, 5.0)) == pytest.approx(5.0)
    assert distance(Point2D(2.0, 2.0), Point2D(2.0, 2.0)) == 0.0


def test_distance_symmetric():
    a, b = Point2D(0.3, -7.1), Point2D(12.0, 4.4)
    assert distance(a, b) == distance(b, a)


# ============================================================================
# LERP
# ============================================================================

@pytest.mark.parametrize("a,b", [
    (Point2D(0.1, 0.7), Point2D(3.3, -2.9)),
    (Point2D(-1e6, 1e-6), Point2D(7.77, 123456.789)),
    (Point2D(0.0, 0.0), Point2D(0.0, 0.0)),
])
def test_lerp_exact_endpoints(a, b):
    assert lerp(a, b, 0.0) == a
    assert lerp(a, b, 1.0) == b


def test_lerp_midpoint():
    mid = lerp(Point2D(0.0, 0.0), Point2D(10.0, -4.0), 0.5)
    assert mid.x == pytest.approx(5.0)
    assert mid.y == pytest.approx(-2.0)


def test_lerp_interpolates_radius():
    a = Dot(0.0, 0.0, 2.0)
    b = Dot(10.0, 0.0, 6.0)
    mid = lerp(a, b, 0.25)
    assert isinstance(mid, Dot)
    assert mid.r == pytest.approx(3.0)
    assert lerp(a, b, 0.0) == a
    assert lerp(a, b, 1.0) == b


def test_lerp_mixed_types_drops_radius():
    out = lerp(Dot(0.0, 0.0, 2.0), Point2D(2.0, 2.0), 0.5)
    assert type(out) is Point2D


# ============================================================================
# TYPES
# ============================================================================

def test_timed_point_defaults():
    p = TimedPoint(1.0, 2.0)
    assert p.t == 0
    assert p.last is False
    assert isinstance(p, Point2D)


def test_as_point_strips_radius():
    d = Dot(1.5, 2.5, 3.0)
    assert as_point(d) == Point2D(1.5, 2.5)
    # Equality is per concrete type
    assert Point2D(1.5, 2.5) != d


def test_distance_ignores_extra_channels():
    assert distance(Dot(0.0, 0.0, 100.0), TimedPoint(3.0, 4.0, 10)) == pytest.approx(5.0)
    assert math.isfinite(distance(Dot(0.0, 0.0, 1.0), Dot(0.0, 0.0, 9.0)))
