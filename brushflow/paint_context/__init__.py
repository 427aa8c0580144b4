"""Rendering sinks for brush stamps.

Modules:
    - base: PaintContext contract and BrushStamp command
    - recording: headless recorder (tests, tooling)
    - cpu_raster: numpy reference rasterizer with PNG export
"""

from .base import WHITE, BrushStamp, PaintContext
from .cpu_raster import CPUPaintContext
from .recording import RecordingPaintContext

__all__ = [
    'WHITE',
    'BrushStamp',
    'PaintContext',
    'CPUPaintContext',
    'RecordingPaintContext',
]
