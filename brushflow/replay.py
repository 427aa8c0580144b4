"""Replay a stored (or synthetic) stroke through the pipeline and save a PNG.

Usage:
    # Stored stroke with custom brush parameters
    brushflow-replay --stroke_file strokes/s1.json --params configs/params.v1.yaml \
        --output outputs/s1.png

    # Synthetic gesture, debug markers on
    brushflow-replay --synthetic wave --set brushSize=24 --set debug=true \
        --output outputs/wave.png

Outputs:
    - <output>.png: rendered canvas (8-bit RGB)
    - <output>.yaml: replay metadata (parameters, path length, stamp count, timing)
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .paint_context.base import BrushStamp, PaintContext
from .paint_context.cpu_raster import CPUPaintContext
from .stroke_engine.point_processor import PointProcessor
from .utils import fs, logging_config
from .utils.strokes import (
    line_stroke,
    load_stroke,
    make_stroke_id,
    mark_last,
    stroke_length,
    wave_stroke,
)
from .utils.validators import (
    Parameters,
    RendererCPUV1,
    load_parameters,
    load_renderer_cpu_config,
    sanitize_parameters,
)
from .utils.vector2 import TimedPoint

logger = logging.getLogger(__name__)

SYNTHETIC_STROKES = ('line', 'wave')


def replay_stroke(
    points: Sequence[TimedPoint],
    params: Parameters,
    paint_context: Optional[PaintContext] = None
) -> List[BrushStamp]:
    """Feed a whole stroke through a fresh PointProcessor.

    The final sample is re-flagged ``last`` so the tail is drained even
    when the stored stroke carries no flag.
    """
    processor = PointProcessor(params, paint_context)
    return processor.feed_many(mark_last(points))


def synthetic_stroke(kind: str, renderer_cfg: RendererCPUV1) -> List[TimedPoint]:
    """Demo gesture fitted to the canvas."""
    w, h = renderer_cfg.width_px, renderer_cfg.height_px
    if kind == 'line':
        return line_stroke((0.1 * w, 0.5 * h), (0.9 * w, 0.5 * h), n=40)
    if kind == 'wave':
        return wave_stroke((0.1 * w, 0.5 * h), 0.8 * w, 0.25 * h, n=60)
    raise ValueError(f"Unknown synthetic stroke '{kind}', expected one of {SYNTHETIC_STROKES}")


def parse_overrides(items: Sequence[str]) -> Dict[str, Any]:
    """Parse ``KEY=VALUE`` overrides; values are read as YAML scalars.

    Hex colors (``color=#ff0000``) are kept as strings.

    Raises
    ------
    ValueError
        If an item has no ``=``
    """
    overrides = {}
    for item in items:
        key, sep, value = item.partition('=')
        if not sep or not key.strip():
            raise ValueError(f"Override must look like KEY=VALUE, got '{item}'")
        value = value.strip()
        # '#' starts a YAML comment
        overrides[key.strip()] = value if value.startswith('#') else yaml.safe_load(value)
    return overrides


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='brushflow-replay',
        description="Replay a stroke through the brush pipeline and save a PNG",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument(
        '--stroke_file',
        type=str,
        help='Stroke file (stroke_points.v1, JSON or YAML)'
    )
    input_group.add_argument(
        '--synthetic',
        choices=SYNTHETIC_STROKES,
        help='Use a generated demo gesture instead of a file'
    )

    parser.add_argument(
        '--params',
        type=str,
        default=None,
        help='Brush parameters YAML (params.v1 or legacy params.v0)'
    )
    parser.add_argument(
        '--set',
        dest='overrides',
        action='append',
        default=[],
        metavar='KEY=VALUE',
        help='Override one parameter, e.g. --set brushSize=24 (repeatable)'
    )
    parser.add_argument(
        '--renderer_config',
        type=str,
        default=None,
        help='CPU renderer config YAML (renderer_cpu.v1), default: built-in'
    )
    parser.add_argument(
        '--output',
        type=str,
        default='outputs/replay.png',
        help='Output PNG path, default: outputs/replay.png'
    )
    parser.add_argument(
        '--no_metadata',
        action='store_true',
        help='Skip writing the metadata YAML next to the PNG'
    )

    parser.add_argument(
        '--log_level',
        type=str,
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level, default: INFO'
    )
    parser.add_argument(
        '--log_file',
        type=str,
        default=None,
        help='Also write logs (JSON lines) to this file'
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging_config.setup_logging(
        log_level=args.log_level,
        log_file=args.log_file,
        json=bool(args.log_file),
        context={'app': 'replay'}
    )

    renderer_cfg = (
        load_renderer_cpu_config(args.renderer_config)
        if args.renderer_config else RendererCPUV1()
    )

    raw_params: Dict[str, Any] = {}
    if args.params:
        raw_params = load_parameters(args.params).to_record()
    raw_params.update(parse_overrides(args.overrides))
    params = sanitize_parameters(raw_params)
    logger.info(
        f"Brush: size={params.brush_size:.1f}px, spacing={params.spacing:.2f}px, "
        f"opacity={params.opacity:.2f}, sharpness={params.sharpness:.2f}"
    )

    if args.stroke_file:
        logger.info(f"Loading stroke from: {args.stroke_file}")
        stroke_id, points = load_stroke(args.stroke_file)
        stroke_id = stroke_id or Path(args.stroke_file).stem
    else:
        points = synthetic_stroke(args.synthetic, renderer_cfg)
        stroke_id = make_stroke_id(0)

    ctx = CPUPaintContext.from_config(renderer_cfg)

    logging_config.push_context(stroke=stroke_id)
    try:
        start_time = time.time()
        stamps = replay_stroke(points, params, ctx)
        replay_time = time.time() - start_time
        logger.info(f"Replayed {len(points)} samples → {len(stamps)} stamps in {replay_time:.3f}s")
    finally:
        logging_config.pop_context(['stroke'])

    output = ctx.save_png(args.output)

    if not args.no_metadata:
        metadata = {
            'stroke_id': stroke_id,
            'num_samples': len(points),
            'path_length_px': round(stroke_length(points), 3),
            'num_stamps': len(stamps),
            'canvas_size_px': [renderer_cfg.width_px, renderer_cfg.height_px],
            'replay_time_s': float(replay_time),
            'params': params.to_record(),
        }
        metadata_path = output.with_suffix('.yaml')
        fs.atomic_yaml_dump(metadata, metadata_path)
        logger.info(f"Saved metadata: {metadata_path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
