"""Color parsing and premultiplication.

Provides:
    - parse_hex / color_to_hex: "#rrggbb" ↔ RGBA float tuple
    - premultiply: color * opacity on every channel (stamp color)

Used by:
    - validators: color parameter sanitization (hex strings accepted)
    - PointProcessor: final stamp color, computed once per stroke
    - CPUPaintContext: background color for clear()

Invariants:
    - RGBA channels are floats in [0, 1]
    - Stamp colors are premultiplied (alpha already applied to RGB)
"""

import re
from typing import Sequence, Tuple

FloatColor = Tuple[float, float, float, float]

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{6})([0-9a-fA-F]{2})?$")


def parse_hex(text: str) -> FloatColor:
    """Parse ``#rrggbb`` (or ``#rrggbbaa``) into an RGBA float tuple.

    Parameters
    ----------
    text : str
        Hex color string

    Returns
    -------
    FloatColor
        (r, g, b, a) in [0, 1]; alpha is 1.0 when not given

    Raises
    ------
    ValueError
        If the string is not a hex color
    """
    match = _HEX_RE.match(text.strip()) if isinstance(text, str) else None
    if match is None:
        raise ValueError(f"Not a hex color: {text!r}")

    rgb_hex, alpha_hex = match.groups()
    r, g, b = (int(rgb_hex[i:i + 2], 16) / 255.0 for i in (0, 2, 4))
    a = int(alpha_hex, 16) / 255.0 if alpha_hex else 1.0
    return (r, g, b, a)


def color_to_hex(color: Sequence[float]) -> str:
    """Format the RGB part of a float color as ``#rrggbb``.

    Channels are clamped to [0, 1] and rounded to 8 bits.
    """
    def to_hex(v: float) -> str:
        d = int(round(min(max(v, 0.0), 1.0) * 255))
        return f"{d:02x}"

    r, g, b = color[:3]
    return "#" + "".join(to_hex(v) for v in (r, g, b))


def premultiply(color: Sequence[float], opacity: float) -> FloatColor:
    """Scale all four channels by ``opacity``.

    Parameters
    ----------
    color : sequence of 4 floats
        RGBA color
    opacity : float
        Flow / opacity in [0, 1]

    Returns
    -------
    FloatColor
        ``(r*o, g*o, b*o, a*o)``
    """
    r, g, b, a = color
    return (r * opacity, g * opacity, b * opacity, a * opacity)
