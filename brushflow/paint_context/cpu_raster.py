"""CPU reference rasterizer for brush stamps.

Deterministic numpy implementation of the stamp shader:

    alpha(d) = 1 - smoothstep(1 - blur, 1, d / radius)
    src      = alpha * color                    (color is premultiplied)
    dst      = src + dst * (1 - src.a)          (ONE, ONE_MINUS_SRC_ALPHA)

Architecture:
    - Canvas: (H, W, 4) float32, premultiplied RGBA, pixel centers at +0.5
    - Each stamp touches only the ROI covering its bounding square
    - The soft edge is widened to at least ``min_edge_px`` so hard brushes
      stay anti-aliased

Invariants:
    - Stamps are composited in call order (no reordering)
    - Off-canvas stamps are clipped; non-finite or non-positive radii are
      skipped, never raised

Usage:
    from brushflow.paint_context import CPUPaintContext
    ctx = CPUPaintContext(800, 600)
    ctx.draw_brush(Point2D(10, 10), 4.0, 0.2, (0, 0, 0, 1))
    ctx.save_png("outputs/stamp.png")
"""

import logging
import math
from pathlib import Path
from typing import Sequence, Union

import numpy as np

from ..utils import fs
from ..utils.validators import RendererCPUV1
from ..utils.vector2 import Point2D
from .base import WHITE, PaintContext

logger = logging.getLogger(__name__)


def smoothstep(edge0: float, edge1: float, x: np.ndarray) -> np.ndarray:
    """Hermite step between ``edge0`` and ``edge1`` (GLSL semantics)."""
    t = np.clip((x - edge0) / max(edge1 - edge0, 1e-12), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


class CPUPaintContext(PaintContext):
    """Software paint context with a premultiplied RGBA float canvas.

    Parameters
    ----------
    width_px, height_px : int
        Canvas size
    background : sequence of 4 floats
        Initial clear color, default opaque white
    min_edge_px : float
        Minimum soft-edge width in px, default 1.0
    """

    def __init__(
        self,
        width_px: int,
        height_px: int,
        background: Sequence[float] = WHITE,
        min_edge_px: float = 1.0
    ):
        if width_px <= 0 or height_px <= 0:
            raise ValueError(f"Canvas size must be positive, got {width_px}x{height_px}")
        self.width_px = int(width_px)
        self.height_px = int(height_px)
        self.min_edge_px = float(min_edge_px)
        self.canvas = np.zeros((self.height_px, self.width_px, 4), dtype=np.float32)
        self.stamp_count = 0
        self.clear(background)

        logger.info(
            f"CPUPaintContext initialized: canvas={self.width_px}x{self.height_px}, "
            f"min_edge={self.min_edge_px:.2f}px"
        )

    @classmethod
    def from_config(cls, cfg: RendererCPUV1) -> "CPUPaintContext":
        """Build from a validated renderer_cpu.v1 config."""
        return cls(cfg.width_px, cfg.height_px, cfg.background_rgba, cfg.min_edge_px)

    def clear(self, color: Sequence[float] = WHITE) -> None:
        if len(color) != 4:
            raise ValueError(f"Clear color must have 4 channels, got {len(color)}")
        self.canvas[...] = np.asarray(color, dtype=np.float32)
        self.stamp_count = 0

    def draw_brush(
        self,
        position: Point2D,
        radius: float,
        blur: float,
        color: Sequence[float]
    ) -> None:
        cx, cy = float(position.x), float(position.y)
        if not (math.isfinite(cx) and math.isfinite(cy) and math.isfinite(radius)) or radius <= 0.0:
            logger.debug(f"Skipping stamp at ({cx}, {cy}) with radius {radius}")
            return

        x_min = max(0, int(math.floor(cx - radius)))
        x_max = min(self.width_px, int(math.ceil(cx + radius)) + 1)
        y_min = max(0, int(math.floor(cy - radius)))
        y_max = min(self.height_px, int(math.ceil(cy + radius)) + 1)
        if x_max <= x_min or y_max <= y_min:
            return

        ys, xs = np.meshgrid(
            np.arange(y_min, y_max, dtype=np.float32) + 0.5,
            np.arange(x_min, x_max, dtype=np.float32) + 0.5,
            indexing='ij'
        )
        dist = np.hypot(xs - cx, ys - cy) / radius

        soft = min(max(float(blur), self.min_edge_px / radius, 0.0), 1.0)
        alpha = 1.0 - smoothstep(1.0 - soft, 1.0, dist)

        src = alpha[:, :, np.newaxis] * np.asarray(color, dtype=np.float32)[np.newaxis, np.newaxis, :]
        roi = self.canvas[y_min:y_max, x_min:x_max, :]
        self.canvas[y_min:y_max, x_min:x_max, :] = src + roi * (1.0 - src[:, :, 3:4])
        self.stamp_count += 1

    def pixel(self, x: int, y: int) -> np.ndarray:
        """RGBA value of one pixel (copy)."""
        return self.canvas[y, x].copy()

    def to_image(self) -> np.ndarray:
        """RGB float image in [0, 1], shape (H, W, 3)."""
        return np.clip(self.canvas[:, :, :3], 0.0, 1.0)

    def save_png(self, path: Union[str, Path]) -> Path:
        """Write the RGB canvas to ``path`` atomically."""
        path = Path(path)
        fs.atomic_save_image(self.to_image(), path)
        logger.info(f"Saved canvas ({self.stamp_count} stamps) to {path}")
        return path
