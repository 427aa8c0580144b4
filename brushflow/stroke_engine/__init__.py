"""Incremental stroke resampling.

Modules:
    - velocity: smoothed speed estimate and speed → radius mapping
    - distance_filter: minimum spacing between forwarded stamps
    - point_processor: per-stroke state machine (samples → BrushStamps)
"""

from .distance_filter import DistanceFilter
from .point_processor import OVERSAMPLE, PointProcessor, StrokeState
from .velocity import VelocityRadiusModel

__all__ = [
    'DistanceFilter',
    'OVERSAMPLE',
    'PointProcessor',
    'StrokeState',
    'VelocityRadiusModel',
]
