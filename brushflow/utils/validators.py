"""Brush parameter schema, sanitization and config file validation.

Provides centralized validation using pydantic:
    - Parameters (params.v1): brush size, spacing, flow, color, movement gate,
      sharpness, debug overlay; immutable snapshot consumed by PointProcessor
    - sanitize_parameters(): untrusted partial record → valid Parameters
    - migrate_legacy_parameters(): params.v0 (absolute stepSize, blur 0-100)
      → params.v1 record
    - Persisted stroke points (stroke_points.v1): ordered {x, y, t} records
    - CPU renderer config (renderer_cpu.v1): canvas size, background, edge AA

The parameter table (PARAMETER_DEFINITIONS) is the single source of truth
for keys, labels, ranges and defaults; the pydantic model mirrors it and
rejects anything the sanitizer would not produce.

Units:
    - brushSize: diameter in px
    - stepSize: fraction of brushSize (stamp spacing = stepSize * brushSize)
    - movementMin: px
    - color: RGBA floats in [0, 1]

Usage:
    from brushflow.utils import validators

    params = validators.sanitize_parameters({"brushSize": "24", "color": "#ff0000"})
    params = validators.load_parameters("configs/params.v1.yaml")
    stroke_file = validators.validate_stroke_points_file("strokes/zigzag.json")
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .color import FloatColor, color_to_hex, parse_hex

logger = logging.getLogger(__name__)


# ============================================================================
# PARAMETER DEFINITIONS (params.v1)
# ============================================================================

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


@dataclass(frozen=True)
class RangeParameter:
    """Numeric slider parameter.

    ``positive`` marks fields the curve math divides by: a value <= 0 is
    replaced by the default rather than clamped.
    """

    key: str
    attr: str
    label: str
    min: float
    max: float
    default: float
    positive: bool = False
    type: str = "range"

    def sanitize(self, value: Any) -> float:
        if value is None or isinstance(value, bool):
            return self.default
        try:
            v = float(value)
        except (TypeError, ValueError, OverflowError):
            return self.default
        if not math.isfinite(v):
            return self.default
        if self.positive and v <= 0.0:
            return self.default
        return min(max(v, self.min), self.max)


@dataclass(frozen=True)
class CheckboxParameter:
    """Boolean toggle parameter."""

    key: str
    attr: str
    label: str
    default: bool
    type: str = "checkbox"

    def sanitize(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return bool(value)
        if isinstance(value, float):
            return bool(value) if math.isfinite(value) else self.default
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        return self.default


@dataclass(frozen=True)
class ColorParameter:
    """RGBA color parameter; default stored as a hex string."""

    key: str
    attr: str
    label: str
    default: str
    type: str = "color"

    @property
    def default_rgba(self) -> FloatColor:
        return parse_hex(self.default)

    def sanitize(self, value: Any) -> FloatColor:
        if isinstance(value, str):
            try:
                return parse_hex(value)
            except ValueError:
                return self.default_rgba
        if isinstance(value, (list, tuple)) and len(value) == 4:
            channels = []
            for c in value:
                if isinstance(c, bool) or not isinstance(c, (int, float)):
                    return self.default_rgba
                try:
                    c = float(c)
                except OverflowError:
                    return self.default_rgba
                if not math.isfinite(c):
                    return self.default_rgba
                channels.append(min(max(c, 0.0), 1.0))
            return tuple(channels)
        return self.default_rgba


PARAMETER_DEFINITIONS = (
    RangeParameter("brushSize", "brush_size", "Size", 1.0, 128.0, 16.0, positive=True),
    RangeParameter("stepSize", "step_size", "Spacing", 0.01, 0.25, 0.1, positive=True),
    RangeParameter("opacity", "opacity", "Flow", 0.0, 1.0, 1.0),
    RangeParameter("movementMin", "movement_min", "Movement Min", 0.0, 20.0, 1.0, positive=True),
    RangeParameter("sharpness", "sharpness", "Sharpness", 0.0, 1.0, 0.8),
    ColorParameter("color", "color", "Color", "#333333"),
    CheckboxParameter("debug", "debug", "Debug", False),
)

_DEFAULTS = {d.key: d.default for d in PARAMETER_DEFINITIONS}


class Parameters(BaseModel):
    """Immutable brush configuration snapshot (params.v1).

    Accepts the camelCase keys used in stored configs (``brushSize``) as
    well as the attribute names (``brush_size``). Construct through
    ``sanitize_parameters`` for untrusted input; direct construction
    raises ``pydantic.ValidationError`` on invalid values.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='ignore')

    brush_size: float = Field(
        _DEFAULTS["brushSize"], alias="brushSize", gt=0.0, le=128.0,
        description="Brush diameter (px)"
    )
    step_size: float = Field(
        _DEFAULTS["stepSize"], alias="stepSize", gt=0.0, le=0.25,
        description="Stamp spacing as a fraction of brush_size"
    )
    opacity: float = Field(_DEFAULTS["opacity"], ge=0.0, le=1.0, description="Flow, premultiplied into color")
    color: Tuple[float, float, float, float] = Field(
        default_factory=lambda: parse_hex(_DEFAULTS["color"]),
        description="RGBA in [0, 1]"
    )
    movement_min: float = Field(
        _DEFAULTS["movementMin"], alias="movementMin", gt=0.0, le=20.0,
        description="Minimum input spacing to accept a sample (px)"
    )
    sharpness: float = Field(_DEFAULTS["sharpness"], ge=0.0, le=1.0, description="Edge hardness")
    debug: bool = Field(_DEFAULTS["debug"], description="Draw control-point markers")

    @field_validator('color', mode='before')
    @classmethod
    def parse_color(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_hex(v)
        return v

    @field_validator('color')
    @classmethod
    def validate_color(cls, v: Tuple[float, float, float, float]) -> Tuple[float, float, float, float]:
        for i, c in enumerate(v):
            if not math.isfinite(c) or not (0.0 <= c <= 1.0):
                raise ValueError(f"Color channel {i}={c} must be finite and within [0, 1]")
        return v

    @property
    def spacing(self) -> float:
        """Absolute stamp spacing in px."""
        return self.step_size * self.brush_size

    @property
    def blur(self) -> float:
        """Soft-edge width as a fraction of the stamp radius."""
        return 1.0 - self.sharpness

    def to_record(self) -> Dict[str, Any]:
        """Plain dict with camelCase keys, YAML/JSON serializable."""
        record = self.model_dump(by_alias=True)
        record['color'] = list(self.color)
        return record


def _lookup(raw: Mapping, definition) -> Any:
    if definition.key in raw:
        return raw[definition.key]
    return raw.get(definition.attr)


def sanitize_parameters(raw: Union[Mapping, Parameters, None] = None) -> Parameters:
    """Map an untrusted, possibly partial record to valid Parameters.

    Parameters
    ----------
    raw : Mapping, Parameters or None
        Record keyed by camelCase keys or attribute names. Unknown keys
        are ignored. Anything that is not a mapping is treated as empty.

    Returns
    -------
    Parameters
        Fully populated snapshot

    Notes
    -----
    Per field:
        - range: parsed as float; unparseable/non-finite → default;
          positive-only fields <= 0 → default; otherwise clamped
        - checkbox: coerced to bool ("true"/"false"/"on"/"off"/numbers)
        - color: 4 finite numbers (clamped to [0, 1]) or "#rrggbb"
    Idempotent: sanitize_parameters(sanitize_parameters(p)) == sanitize_parameters(p).
    """
    if isinstance(raw, Parameters):
        raw = raw.to_record()
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        logger.warning(f"Parameters must be a mapping, got {type(raw).__name__}; using defaults")
        raw = {}

    clean = {}
    for definition in PARAMETER_DEFINITIONS:
        value = _lookup(raw, definition)
        clean[definition.key] = definition.sanitize(value)
        if value is not None and clean[definition.key] != value:
            logger.debug(f"Parameter {definition.key}={value!r} sanitized to {clean[definition.key]!r}")

    return Parameters(**clean)


def migrate_legacy_parameters(raw: Mapping) -> Dict[str, Any]:
    """Convert a params.v0 record into a params.v1 record.

    Parameters
    ----------
    raw : Mapping
        Legacy record: ``stepSize`` is an absolute spacing in px and edge
        softness is ``blur`` in [0, 100].

    Returns
    -------
    dict
        Record in the canonical schema (still unsanitized)

    Notes
    -----
    - stepSize_v1 = stepSize_v0 / brushSize
    - sharpness = 1 - blur / 100
    The two schemas overlap in key names, so the
    caller states which one a record is in.
    """
    migrated = {k: v for k, v in raw.items() if k not in ("blur", "schema")}

    brush_size = _DEFAULTS["brushSize"]
    try:
        candidate = float(raw.get("brushSize", brush_size))
        if math.isfinite(candidate) and candidate > 0:
            brush_size = candidate
    except (TypeError, ValueError, OverflowError):
        pass

    if "stepSize" in raw:
        try:
            migrated["stepSize"] = float(raw["stepSize"]) / brush_size
        except (TypeError, ValueError, OverflowError):
            migrated.pop("stepSize")

    if "blur" in raw and "sharpness" not in raw:
        try:
            migrated["sharpness"] = 1.0 - float(raw["blur"]) / 100.0
        except (TypeError, ValueError, OverflowError):
            pass

    migrated["schema"] = "params.v1"
    logger.info("Migrated legacy params.v0 record to params.v1")
    return migrated


def load_parameters(path: Union[str, Path]) -> Parameters:
    """Load a parameters YAML file and sanitize it.

    ``schema: params.v0`` files are migrated first; files without a schema
    key are read as params.v1.

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If the file is not a mapping or names an unknown schema
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Parameters file not found: {path}")

    data = fs.load_yaml(path)
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Parameters file {path} must contain a mapping, got {type(data).__name__}")

    schema = data.get("schema", "params.v1")
    if schema == "params.v0":
        data = migrate_legacy_parameters(data)
    elif schema != "params.v1":
        raise ValueError(f"Expected schema 'params.v1' or 'params.v0' in {path}, got '{schema}'")

    return sanitize_parameters(data)


# ============================================================================
# STROKE POINTS SCHEMA V1
# ============================================================================

class StrokePointRecord(BaseModel):
    """One stored input sample."""
    x: float = Field(..., description="Canvas x (px)")
    y: float = Field(..., description="Canvas y (px)")
    t: float = Field(..., ge=0.0, description="Milliseconds since stroke start")

    @model_validator(mode='after')
    def validate_finite(self) -> 'StrokePointRecord':
        for name in ('x', 'y', 't'):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"Stroke point {name}={value} must be finite")
        return self


class StrokePointsFileV1(BaseModel):
    """Persisted stroke: ordered samples with non-decreasing time."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field("stroke_points.v1", alias="schema", description="Schema version")
    id: Optional[str] = Field(None, description="Stroke identifier")
    points: List[StrokePointRecord] = Field(..., description="Samples in capture order")

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "stroke_points.v1":
            raise ValueError(f"Expected schema 'stroke_points.v1', got '{v}'")
        return v

    @field_validator('points')
    @classmethod
    def validate_time_order(cls, v: List[StrokePointRecord]) -> List[StrokePointRecord]:
        for i in range(1, len(v)):
            if v[i].t < v[i - 1].t:
                raise ValueError(
                    f"Point {i} has t={v[i].t} earlier than point {i - 1} (t={v[i - 1].t})"
                )
        return v


def validate_stroke_points(data: Any) -> StrokePointsFileV1:
    """Validate an in-memory stroke record.

    Accepts either a bare list of ``{x, y, t}`` records or the wrapped
    ``{"schema": ..., "id": ..., "points": [...]}`` form.

    Raises
    ------
    ValueError
        If validation fails
    """
    if isinstance(data, list):
        data = {"points": data}
    if not isinstance(data, Mapping):
        raise ValueError(f"Stroke data must be a list or mapping, got {type(data).__name__}")
    try:
        return StrokePointsFileV1(**data)
    except Exception as e:
        raise ValueError(f"Stroke points validation failed: {e}") from e


def validate_stroke_points_file(path: Union[str, Path]) -> StrokePointsFileV1:
    """Load (JSON or YAML) and validate a persisted stroke file.

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (message names the file)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Stroke file not found: {path}")

    data = fs.load_structured(path)
    try:
        return validate_stroke_points(data)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e


# ============================================================================
# CPU RENDERER SCHEMA V1
# ============================================================================

class RendererCPUV1(BaseModel):
    """CPU paint context configuration."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field("renderer_cpu.v1", alias="schema", description="Schema version")
    width_px: int = Field(800, gt=0, le=16384, description="Canvas width (px)")
    height_px: int = Field(600, gt=0, le=16384, description="Canvas height (px)")
    background: str = Field("#ffffff", description="Clear color (hex)")
    min_edge_px: float = Field(1.0, ge=0.0, le=8.0, description="Minimum soft edge for anti-aliasing (px)")

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "renderer_cpu.v1":
            raise ValueError(f"Expected schema 'renderer_cpu.v1', got '{v}'")
        return v

    @field_validator('background')
    @classmethod
    def validate_background(cls, v: str) -> str:
        return color_to_hex(parse_hex(v))

    @property
    def background_rgba(self) -> FloatColor:
        return parse_hex(self.background)


def load_renderer_cpu_config(path: Union[str, Path]) -> RendererCPUV1:
    """Load and validate CPU renderer config from YAML.

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (with actionable error message)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Renderer config not found: {path}")

    data = fs.load_yaml(path) or {}
    try:
        return RendererCPUV1(**data)
    except Exception as e:
        raise ValueError(f"Renderer config validation failed at {path}: {e}") from e
