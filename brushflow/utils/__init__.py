"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - 2D points and vector math (vector2)
    - Catmull-Rom / Bézier geometry (geometry)
    - Hex color parsing and premultiplication (color)
    - Parameter and file validation (validators)
    - Stroke sample helpers and stroke files (strokes)
    - Atomic I/O (fs)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (stroke_engine, paint_context, replay).

Convenience imports:
    from brushflow.utils import fs, geometry, validators
    from brushflow.utils.logging_config import setup_logging, push_context
"""

# Re-export commonly used modules for convenience
from . import color
from . import fs
from . import geometry
from . import logging_config
from . import strokes
from . import validators
from . import vector2

__all__ = [
    'color',
    'fs',
    'geometry',
    'logging_config',
    'strokes',
    'validators',
    'vector2',
]
