"""Headless paint context that records every call."""

from typing import List, Sequence, Tuple

from ..utils.vector2 import Point2D
from .base import WHITE, BrushStamp, PaintContext


class RecordingPaintContext(PaintContext):
    """Keeps stamps and clears in call order; draws nothing.

    Attributes
    ----------
    stamps : list[BrushStamp]
        Stamps drawn since the last ``clear``
    calls : list[tuple]
        Full call log: ``("draw_brush", BrushStamp)`` or ``("clear", color)``
    """

    def __init__(self):
        self.stamps: List[BrushStamp] = []
        self.calls: List[Tuple[str, object]] = []
        self.clear_color: Tuple[float, ...] = WHITE

    def draw_brush(
        self,
        position: Point2D,
        radius: float,
        blur: float,
        color: Sequence[float]
    ) -> None:
        stamp = BrushStamp(position, radius, blur, tuple(color))
        self.stamps.append(stamp)
        self.calls.append(("draw_brush", stamp))

    def clear(self, color: Sequence[float] = WHITE) -> None:
        self.clear_color = tuple(color)
        self.stamps.clear()
        self.calls.append(("clear", self.clear_color))

    @property
    def positions(self) -> List[Point2D]:
        """Stamp centers in draw order."""
        return [s.position for s in self.stamps]
