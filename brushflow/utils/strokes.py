"""Stroke IDs, point construction, serialization and synthetic strokes.

Provides:
    - make_timed_point(): TimedPoint with integer-rounded milliseconds
    - make_stroke_id(idx) → "00012-ab12cd34"
    - Record conversion: stroke_to_records() ↔ records_to_stroke()
    - File I/O: save_stroke() (atomic JSON/YAML) / load_stroke() (validated)
    - mark_last(): flag the final point so the pipeline drains its tail
    - stroke_bbox(), stroke_length(): extent and path length of raw samples
    - Synthetic gestures: line_stroke(), wave_stroke() for demos and tests

Persisted format (stroke_points.v1):
    {"schema": "stroke_points.v1", "id": "...", "points": [{"x": .., "y": .., "t": ..}, ...]}
A bare list of {x, y, t} records is accepted on load. The ``last`` flag is
never stored; it is re-derived from position in the list on replay.
"""

import math
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from . import fs
from .geometry import polyline_bbox, polyline_length
from .vector2 import TimedPoint


def make_timed_point(x: float, y: float, t: float, last: bool = False) -> TimedPoint:
    """Build an input sample, rounding ``t`` to whole milliseconds."""
    return TimedPoint(float(x), float(y), int(round(t)), bool(last))


def make_stroke_id(idx: int) -> str:
    """Generate a unique stroke ID.

    Parameters
    ----------
    idx : int
        Stroke index within a session

    Returns
    -------
    str
        "IIIII-HHHHHHHH": index (5 digits) and uuid4 suffix (8 hex chars)
    """
    return f"{idx:05d}-{uuid.uuid4().hex[:8]}"


def mark_last(points: Sequence[TimedPoint]) -> List[TimedPoint]:
    """Return a copy of ``points`` where only the final point has ``last=True``."""
    out = [TimedPoint(p.x, p.y, p.t, False) for p in points]
    if out:
        tail = out[-1]
        out[-1] = TimedPoint(tail.x, tail.y, tail.t, True)
    return out


def stroke_to_records(points: Sequence[TimedPoint]) -> List[Dict[str, float]]:
    """Convert samples to JSON-serializable ``{x, y, t}`` records."""
    return [{'x': p.x, 'y': p.y, 't': p.t} for p in points]


def records_to_stroke(records: Sequence[Dict[str, float]]) -> List[TimedPoint]:
    """Convert ``{x, y, t}`` records back to samples (no ``last`` flag).

    Raises
    ------
    KeyError
        If a record misses x, y or t
    """
    try:
        return [make_timed_point(r['x'], r['y'], r['t']) for r in records]
    except KeyError as e:
        raise KeyError(f"Missing required stroke point field: {e}") from e


def save_stroke(
    points: Sequence[TimedPoint],
    path: Union[str, Path],
    stroke_id: Optional[str] = None
) -> Path:
    """Write a stroke atomically; ``.json`` → JSON, anything else → YAML."""
    path = Path(path)
    payload = {
        'schema': 'stroke_points.v1',
        'id': stroke_id or make_stroke_id(0),
        'points': stroke_to_records(points),
    }
    if path.suffix.lower() == '.json':
        fs.atomic_json_dump(payload, path)
    else:
        fs.atomic_yaml_dump(payload, path)
    return path


def load_stroke(path: Union[str, Path]) -> Tuple[Optional[str], List[TimedPoint]]:
    """Load and validate a stored stroke.

    Returns
    -------
    (stroke_id, points)
        ``stroke_id`` is None when the file is a bare list

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If the file fails stroke_points.v1 validation
    """
    from .validators import validate_stroke_points_file

    stroke_file = validate_stroke_points_file(path)
    points = [make_timed_point(p.x, p.y, p.t) for p in stroke_file.points]
    return stroke_file.id, points


def stroke_bbox(points: Sequence[TimedPoint]) -> Tuple[float, float, float, float]:
    """(xmin, ymin, xmax, ymax) of the raw samples; zeros when empty."""
    return polyline_bbox(points)


def stroke_length(points: Sequence[TimedPoint]) -> float:
    """Polyline length of the raw samples in px."""
    return polyline_length(points)


def line_stroke(
    start: Tuple[float, float],
    end: Tuple[float, float],
    n: int,
    duration_ms: float = 500.0
) -> List[TimedPoint]:
    """Evenly spaced, evenly timed samples from ``start`` to ``end``.

    The final sample is flagged ``last``.
    """
    if n < 1:
        raise ValueError(f"line_stroke needs n >= 1, got {n}")
    if n == 1:
        return [make_timed_point(start[0], start[1], 0.0, last=True)]

    points = []
    for i in range(n):
        k = i / (n - 1)
        points.append(make_timed_point(
            start[0] + (end[0] - start[0]) * k,
            start[1] + (end[1] - start[1]) * k,
            duration_ms * k,
        ))
    return mark_last(points)


def wave_stroke(
    origin: Tuple[float, float],
    width: float,
    amplitude: float,
    n: int,
    cycles: float = 1.5,
    duration_ms: float = 800.0
) -> List[TimedPoint]:
    """Sine-shaped gesture with ease-in/ease-out timing.

    The timing makes the middle of the stroke fast and both ends slow,
    which exercises the speed-dependent radius. The final sample is
    flagged ``last``.
    """
    if n < 2:
        raise ValueError(f"wave_stroke needs n >= 2, got {n}")

    points = []
    for i in range(n):
        k = i / (n - 1)
        # Smoothstep in time: position advances slowly near both ends
        s = k * k * (3.0 - 2.0 * k)
        x = origin[0] + width * s
        y = origin[1] + amplitude * math.sin(2.0 * math.pi * cycles * s)
        points.append(make_timed_point(x, y, duration_ms * k))
    return mark_last(points)
