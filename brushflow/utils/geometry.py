"""Curve construction and evaluation for stroke windows.

Provides:
    - Catmull-Rom (uniform, tension 1) → cubic Bézier conversion
    - Cubic Bézier evaluation via de Casteljau interpolation
    - Candidate-point generation at a requested count (lazy)
    - Polyline length and bounding box helpers

Used by:
    - PointProcessor: window → segment → candidate stamp positions
    - strokes: bounding box of stored strokes
    - Tests: endpoint and over-sampling checks

All coordinates in canvas pixels. When control points carry a radius
(``Dot``) it is carried through every interpolation step, so position and
radius stay consistent along the curve.
"""

import math
from typing import Iterator, Sequence, Tuple

from .vector2 import Dot, Point2D, as_point, distance, lerp

BezierSegment = Tuple[Point2D, Point2D, Point2D, Point2D]


def _has_radius(points: Sequence[Point2D]) -> bool:
    return all(isinstance(p, Dot) for p in points)


def catmull_rom_to_bezier(window: Sequence[Point2D]) -> BezierSegment:
    """Convert a 4-point Catmull-Rom window to Bézier control points.

    Parameters
    ----------
    window : sequence of 4 Point2D
        Consecutive points P0, P1, P2, P3 in temporal order.

    Returns
    -------
    BezierSegment
        ``(P1, C1, C2, P2)``; the rendered segment runs from P1 to P2,
        P0 and P3 only shape the tangents.

    Notes
    -----
    Uniform parameterization, tension 1:
        C1 = P1 + (P2 - P0) / 6
        C2 = P2 - (P3 - P1) / 6
    The radius channel, if present on all four points, uses the same
    combination.
    """
    if len(window) != 4:
        raise ValueError(f"Catmull-Rom window needs 4 points, got {len(window)}")

    p0, p1, p2, p3 = window
    i6 = 1.0 / 6.0

    c1x = p1.x + (p2.x - p0.x) * i6
    c1y = p1.y + (p2.y - p0.y) * i6
    c2x = p2.x - (p3.x - p1.x) * i6
    c2y = p2.y - (p3.y - p1.y) * i6

    if _has_radius(window):
        return (
            Dot(p1.x, p1.y, p1.r),
            Dot(c1x, c1y, p1.r + (p2.r - p0.r) * i6),
            Dot(c2x, c2y, p2.r - (p3.r - p1.r) * i6),
            Dot(p2.x, p2.y, p2.r),
        )
    return (as_point(p1), Point2D(c1x, c1y), Point2D(c2x, c2y), as_point(p2))


def bezier_point(bezier: BezierSegment, k: float) -> Point2D:
    """Evaluate a cubic Bézier at parameter ``k`` (de Casteljau).

    Parameters
    ----------
    bezier : BezierSegment
        Control points (P0, P1, P2, P3).
    k : float
        Curve parameter in [0, 1].

    Returns
    -------
    Point2D or Dot
        Point on the curve; a ``Dot`` when all control points are Dots.
    """
    p0, p1, p2, p3 = bezier
    p01 = lerp(p0, p1, k)
    p12 = lerp(p1, p2, k)
    p23 = lerp(p2, p3, k)

    p012 = lerp(p01, p12, k)
    p123 = lerp(p12, p23, k)

    return lerp(p012, p123, k)


def eval_bezier(bezier: BezierSegment, count: float) -> Iterator[Point2D]:
    """Yield ``floor(count)`` samples of a Bézier segment, end point excluded.

    Parameters
    ----------
    bezier : BezierSegment
        Control points (P0, P1, P2, P3).
    count : float
        Requested number of samples; a heuristic supplied by the caller.
        Values <= 0 (or NaN) yield nothing.

    Yields
    ------
    Point2D or Dot
        Samples at ``k = i / (count + 1)`` for ``i in range(floor(count))``.

    Notes
    -----
    Lazy and single-use: the generator cannot be restarted. The exact
    end point k=1 is never produced; the first sample (k=0) is P0.
    """
    if not count > 0 or math.isinf(count):
        return

    n = int(math.floor(count))
    for i in range(n):
        yield bezier_point(bezier, i / (count + 1))


def polyline_length(points: Sequence[Point2D]) -> float:
    """Sum of distances between consecutive points (0 for < 2 points)."""
    return sum(distance(a, b) for a, b in zip(points, points[1:]))


def polyline_bbox(points: Sequence[Point2D]) -> Tuple[float, float, float, float]:
    """Axis-aligned bounding box ``(xmin, ymin, xmax, ymax)``.

    Returns ``(0, 0, 0, 0)`` for an empty sequence.
    """
    if not points:
        return (0.0, 0.0, 0.0, 0.0)

    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return (min(xs), min(ys), max(xs), max(ys))
