"""2D point value types and vector arithmetic.

Provides:
    - Point2D: immutable canvas-space coordinate (px)
    - Dot: Point2D carrying a brush radius (px)
    - TimedPoint: Point2D with a stroke timestamp (ms) and termination flag
    - Pure helpers: add, sub, scale, length, distance, lerp

Used by:
    - geometry: Catmull-Rom conversion and Bezier evaluation
    - stroke_engine: movement gate, speed estimate, distance filter
    - paint_context: stamp positions

All coordinates are canvas pixels, origin top-left, +Y down.
Every helper returns a new value; inputs are never mutated.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Point2D:
    """Canvas-space point (px)."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Dot(Point2D):
    """Point with a brush radius attached.

    The radius is treated as a third coordinate by ``lerp`` so that curve
    evaluation interpolates position and size consistently.
    """

    r: float


@dataclass(frozen=True, slots=True)
class TimedPoint(Point2D):
    """Raw input sample.

    Parameters
    ----------
    x, y : float
        Canvas position (px).
    t : int
        Milliseconds since stroke start (integer-rounded by
        ``strokes.make_timed_point``).
    last : bool
        True on the single point that terminates the stroke.
    """

    t: int = 0
    last: bool = False


def add(a: Point2D, b: Point2D) -> Point2D:
    """Component-wise sum ``a + b`` (position only)."""
    return Point2D(a.x + b.x, a.y + b.y)


def sub(a: Point2D, b: Point2D) -> Point2D:
    """Component-wise difference ``a - b`` (position only)."""
    return Point2D(a.x - b.x, a.y - b.y)


def scale(p: Point2D, k: float) -> Point2D:
    """Scale position by scalar ``k``."""
    return Point2D(p.x * k, p.y * k)


def length(p: Point2D) -> float:
    """Euclidean norm of ``p``, always >= 0."""
    return math.hypot(p.x, p.y)


def distance(a: Point2D, b: Point2D) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a.x - b.x, a.y - b.y)


def lerp(a: Point2D, b: Point2D, k: float) -> Point2D:
    """Affine combination ``(1 - k) * a + k * b``.

    Parameters
    ----------
    a, b : Point2D
        End points. If both carry a radius (``Dot``) the radius is
        interpolated too and a ``Dot`` is returned.
    k : float
        Interpolation factor; 0 returns ``a``'s coordinates, 1 returns ``b``'s.

    Returns
    -------
    Point2D or Dot
    """
    j = 1.0 - k
    x = a.x * j + b.x * k
    y = a.y * j + b.y * k
    if isinstance(a, Dot) and isinstance(b, Dot):
        return Dot(x, y, a.r * j + b.r * k)
    return Point2D(x, y)


def as_point(p: Point2D) -> Point2D:
    """Strip any extra channels, keep position."""
    return Point2D(p.x, p.y)
