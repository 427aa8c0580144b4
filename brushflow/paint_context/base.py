"""Rendering sink contract and the stamp command type.

A paint context turns brush stamps into pixels. The pipeline only needs
two operations:

    draw_brush(position, radius, blur, color)  -- splat one stamp
    clear(color=(1, 1, 1, 1))                  -- reset to a flat color

Colors arrive premultiplied (RGB already scaled by alpha). ``blur`` is
the soft-edge width as a fraction of ``radius`` (0 = hard edge).

Implementations:
    - RecordingPaintContext: headless recorder for tests and tooling
    - CPUPaintContext: numpy rasterizer with PNG export
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from ..utils.color import FloatColor
from ..utils.vector2 import Point2D

WHITE: FloatColor = (1.0, 1.0, 1.0, 1.0)


@dataclass(frozen=True, slots=True)
class BrushStamp:
    """One brush-mark draw command.

    Parameters
    ----------
    position : Point2D
        Stamp center (px)
    radius : float
        Stamp radius (px)
    blur : float
        Soft-edge fraction of the radius, in [0, 1]
    color : FloatColor
        Premultiplied RGBA
    """

    position: Point2D
    radius: float
    blur: float
    color: FloatColor


class PaintContext(ABC):
    """Abstract rendering sink."""

    @abstractmethod
    def draw_brush(
        self,
        position: Point2D,
        radius: float,
        blur: float,
        color: Sequence[float]
    ) -> None:
        """Splat a single stamp into the rendering target."""

    @abstractmethod
    def clear(self, color: Sequence[float] = WHITE) -> None:
        """Reset the whole target to ``color``."""

    def draw_stamp(self, stamp: BrushStamp) -> None:
        """Convenience wrapper around ``draw_brush``."""
        self.draw_brush(stamp.position, stamp.radius, stamp.blur, stamp.color)
