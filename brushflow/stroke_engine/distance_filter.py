"""Output-side spacing filter for candidate stamps.

The curve evaluator deliberately produces more candidates than needed;
this filter keeps only those that moved more than ``distance`` away from
the last forwarded stamp, so the drawn spacing depends on the brush
settings and not on how generously the segment was subdivided.
"""

from typing import Iterable, Iterator, Optional

from ..utils.vector2 import Point2D, distance


class DistanceFilter:
    """Stateful throttle on stamp positions.

    Parameters
    ----------
    distance : float
        Forward a point only if it is strictly farther than this from the
        previously forwarded one (px). Must be >= 0.
    """

    def __init__(self, distance: float):
        if not distance >= 0.0:
            raise ValueError(f"Filter distance must be >= 0, got {distance}")
        self.distance = distance
        self._last: Optional[Point2D] = None

    @property
    def last(self) -> Optional[Point2D]:
        """Last forwarded point, None before the first one."""
        return self._last

    def accept(self, point: Point2D) -> bool:
        """Decide on one candidate; remembers it when forwarded."""
        if self._last is None or distance(self._last, point) > self.distance:
            self._last = point
            return True
        return False

    def filter(self, points: Iterable[Point2D]) -> Iterator[Point2D]:
        """Yield the forwarded subsequence of ``points``, lazily."""
        for point in points:
            if self.accept(point):
                yield point

    def reset(self) -> None:
        """Forget the last forwarded point."""
        self._last = None
