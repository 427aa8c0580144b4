"""Speed estimate and speed → radius mapping.

The estimate is an exponential moving average of the instantaneous speed
between consecutive accepted samples (px/ms). The radius grows with speed
and saturates at ``max_radius``:

    radius = min_radius + (max_radius - min_radius) * 2s / (1 + 2s)

so a resting pen draws at ``min_radius`` and a fast flick approaches the
full brush radius.
"""

import logging
from typing import Optional

from ..utils.vector2 import TimedPoint, distance

logger = logging.getLogger(__name__)


class VelocityRadiusModel:
    """Smoothed speed tracker with a saturating radius response.

    Parameters
    ----------
    min_radius : float
        Radius at zero speed (px)
    max_radius : float
        Asymptotic radius as speed → ∞ (px), must be >= min_radius
    smoothing : float
        EMA weight ``vk`` of the previous estimate, in [0, 1)

    Attributes
    ----------
    speed : float or None
        Current estimate; None until the first valid sample pair.
    """

    def __init__(self, min_radius: float, max_radius: float, smoothing: float = 0.5):
        if max_radius < min_radius:
            raise ValueError(f"max_radius ({max_radius}) must be >= min_radius ({min_radius})")
        if not 0.0 <= smoothing < 1.0:
            raise ValueError(f"smoothing must be in [0, 1), got {smoothing}")
        self.min_radius = min_radius
        self.max_radius = max_radius
        self.smoothing = smoothing
        self.speed: Optional[float] = None

    def push_speed(self, instant: float) -> float:
        """Fold one instantaneous speed into the estimate and return it.

        The first value seeds the average directly.
        """
        if self.speed is None:
            self.speed = instant
        else:
            vk = self.smoothing
            self.speed = vk * self.speed + (1.0 - vk) * instant
        return self.speed

    def update(self, prev: TimedPoint, cur: TimedPoint) -> Optional[float]:
        """Update from two consecutive accepted samples.

        Returns
        -------
        float or None
            New estimate, or the unchanged one when ``cur.t - prev.t <= 0``
            (speed undefined for that pair).
        """
        dt = cur.t - prev.t
        if dt <= 0:
            logger.debug(f"Skipping speed update: dt={dt} ms")
            return self.speed
        return self.push_speed(distance(prev, cur) / dt)

    def radius(self, speed: Optional[float] = None) -> float:
        """Radius for ``speed`` (defaults to the current estimate)."""
        if speed is None:
            speed = self.speed
        if speed is None or speed <= 0.0:
            return self.min_radius
        vr = 2.0 * speed
        return self.min_radius + (self.max_radius - self.min_radius) * (vr / (1.0 + vr))
