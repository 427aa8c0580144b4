"""brushflow: stroke resampling into evenly spaced, speed-aware brush stamps.

Layers (lower never imports upper):
    utils          -- vector math, geometry, validation, I/O, logging
    paint_context  -- rendering sinks (recording, CPU rasterizer)
    stroke_engine  -- PointProcessor state machine
    replay         -- CLI: stroke file → PNG
"""

__version__ = "0.1.0"
