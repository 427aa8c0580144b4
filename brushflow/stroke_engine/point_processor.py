"""Stroke state machine: raw timed samples → brush stamps.

Each stroke gets its own PointProcessor. Samples are pushed one at a time
with ``feed()``; every call returns (and, when a paint context is attached,
draws) the stamps produced by that sample before the next one is known.

States:
    PRIMING  -- fewer than 4 samples buffered, nothing drawn yet
    ACTIVE   -- window full; each accepted sample adds one curve segment
    DONE     -- terminal sample processed; further input is ignored

Per accepted sample in ACTIVE:
    1. Movement gate: samples within ``movement_min`` of the newest window
       point are dropped (unless flagged ``last``)
    2. Slide the 4-point window, update the speed estimate, attach radius
    3. Catmull-Rom window → Bézier segment from P1 to P2
    4. Over-sample the segment (``OVERSAMPLE`` × length / spacing candidates)
    5. Distance filter trims candidates to ``spacing`` and stamps are emitted

The terminal sample is re-fed twice more so the spline tail reaches the
final input position. A stroke that ends while still priming is padded
by repeating its first sample; a tap (all samples identical) draws one dot.
"""

import enum
import logging
from typing import Iterable, List, Optional

from ..paint_context.base import BrushStamp, PaintContext
from ..utils.color import premultiply
from ..utils.geometry import BezierSegment, catmull_rom_to_bezier, eval_bezier
from ..utils.validators import Parameters
from ..utils.vector2 import Dot, TimedPoint, as_point, distance
from .distance_filter import DistanceFilter
from .velocity import VelocityRadiusModel

logger = logging.getLogger(__name__)

# Candidate over-estimation factor; the distance filter trims the excess
OVERSAMPLE = 1.5

# EMA weight of the previous speed estimate
SPEED_SMOOTHING = 0.5

# Extra slide-and-emit passes after the terminal sample
TAIL_DRAIN_STEPS = 2

DEBUG_MARKER_RADIUS = 4.0
DEBUG_MARKER_COLORS = (
    (0.0, 0.0, 1.0, 1.0),  # segment start
    (1.0, 0.0, 0.0, 1.0),  # first handle
    (0.0, 1.0, 0.0, 1.0),  # second handle
)


class StrokeState(enum.Enum):
    PRIMING = "priming"
    ACTIVE = "active"
    DONE = "done"


class PointProcessor:
    """Incremental stroke resampler.

    Parameters
    ----------
    params : Parameters
        Sanitized brush configuration (see ``validators.sanitize_parameters``)
    paint_context : PaintContext, optional
        Sink that receives every stamp as it is produced

    Attributes
    ----------
    state : StrokeState
    window : list[Dot]
        Most recent accepted samples (at most 4) with their radii
    final_color : FloatColor
        ``color * opacity``, computed once
    spacing : float
        Stamp spacing in px (``step_size * brush_size``)
    """

    def __init__(self, params: Parameters, paint_context: Optional[PaintContext] = None):
        self.params = params
        self.paint_context = paint_context

        self.final_color = premultiply(params.color, params.opacity)
        self.blur = params.blur
        self.spacing = params.spacing
        self.movement_min = params.movement_min

        self.velocity = VelocityRadiusModel(
            min_radius=params.brush_size / 4.0,
            max_radius=params.brush_size / 2.0,
            smoothing=SPEED_SMOOTHING,
        )
        self.distance_filter = DistanceFilter(self.spacing)

        self.state = StrokeState.PRIMING
        self.window: List[Dot] = []
        self._prev_input: Optional[TimedPoint] = None

        self.accepted = 0
        self.rejected = 0
        self.emitted = 0

    @property
    def is_done(self) -> bool:
        return self.state is StrokeState.DONE

    def feed(self, point: TimedPoint) -> List[BrushStamp]:
        """Consume one sample and return the stamps it produced, in order.

        Samples fed after the stroke is DONE are ignored (empty result).
        """
        out: List[BrushStamp] = []

        if self.state is StrokeState.DONE:
            logger.warning(f"Ignoring sample ({point.x:.1f}, {point.y:.1f}) fed after stroke end")
            return out

        if self.state is StrokeState.PRIMING:
            self._prime(point, out)
            return out

        if not point.last and distance(self.window[3], point) <= self.movement_min:
            self.rejected += 1
            return out

        self._advance(point, out)
        if point.last:
            for _ in range(TAIL_DRAIN_STEPS):
                self._advance(point, out)
            self._finish()
        return out

    def feed_many(self, points: Iterable[TimedPoint]) -> List[BrushStamp]:
        """Feed samples in order; returns all stamps produced."""
        out: List[BrushStamp] = []
        for point in points:
            out.extend(self.feed(point))
        return out

    def _prime(self, point: TimedPoint, out: List[BrushStamp]) -> None:
        self.window.append(Dot(point.x, point.y, self.velocity.radius()))
        self._prev_input = point
        self.accepted += 1

        if point.last:
            self._finish_early(out)
        elif len(self.window) == 4:
            self.state = StrokeState.ACTIVE
            logger.debug("Stroke window primed, state=ACTIVE")

    def _finish_early(self, out: List[BrushStamp]) -> None:
        """Handle a terminal sample that arrives before the window is full."""
        first = self.window[0]
        if all(distance(first, p) == 0.0 for p in self.window):
            # Tap: nothing to interpolate, draw a single dot
            self._emit_filtered([first], out)
        else:
            while len(self.window) < 4:
                self.window.insert(0, first)
            self._emit_segment(out)
            tail = self._prev_input
            for _ in range(TAIL_DRAIN_STEPS):
                self._advance(tail, out)
        self._finish()

    def _advance(self, point: TimedPoint, out: List[BrushStamp]) -> None:
        self.velocity.update(self._prev_input, point)
        if point is not self._prev_input:
            self.accepted += 1
        self._prev_input = point

        dot = Dot(point.x, point.y, self.velocity.radius())
        self.window = self.window[1:] + [dot]
        self._emit_segment(out)

    def _candidate_count(self) -> float:
        span = distance(self.window[0], self.window[3])
        if span <= 0.0:
            return 0.0
        return span / self.spacing * OVERSAMPLE

    def _emit_segment(self, out: List[BrushStamp]) -> None:
        bezier = catmull_rom_to_bezier(self.window)
        self._emit_filtered(eval_bezier(bezier, self._candidate_count()), out)
        if self.params.debug:
            self._emit_debug_markers(bezier, out)

    def _emit_filtered(self, candidates: Iterable[Dot], out: List[BrushStamp]) -> None:
        for pt in self.distance_filter.filter(candidates):
            self._emit(BrushStamp(as_point(pt), pt.r, self.blur, self.final_color), out)

    def _emit_debug_markers(self, bezier: BezierSegment, out: List[BrushStamp]) -> None:
        for control, color in zip(bezier[:3], DEBUG_MARKER_COLORS):
            self._emit(BrushStamp(as_point(control), DEBUG_MARKER_RADIUS, 0.0, color), out)

    def _emit(self, stamp: BrushStamp, out: List[BrushStamp]) -> None:
        out.append(stamp)
        self.emitted += 1
        if self.paint_context is not None:
            self.paint_context.draw_stamp(stamp)

    def _finish(self) -> None:
        self.state = StrokeState.DONE
        logger.debug(
            f"Stroke done: accepted={self.accepted}, rejected={self.rejected}, "
            f"stamps={self.emitted}"
        )
