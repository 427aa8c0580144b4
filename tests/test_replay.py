"""End-to-end replay: stroke file / synthetic gesture → PNG + metadata."""

import numpy as np
import pytest
import yaml
from PIL import Image

from brushflow import replay
from brushflow.paint_context import RecordingPaintContext
from brushflow.utils import strokes
from brushflow.utils.validators import sanitize_parameters
from brushflow.utils.vector2 import TimedPoint


@pytest.fixture
def renderer_config(tmp_path):
    path = tmp_path / "renderer.yaml"
    path.write_text(
        yaml.safe_dump({"schema": "renderer_cpu.v1", "width_px": 120, "height_px": 80}),
        encoding="utf-8",
    )
    return path


class TestParseOverrides:
    def test_scalars(self):
        overrides = replay.parse_overrides(["brushSize=24", "debug=true", "color=#ff0000", " opacity = 0.5 "])
        assert overrides == {"brushSize": 24, "debug": True, "color": "#ff0000", "opacity": 0.5}

    def test_list_value(self):
        assert replay.parse_overrides(["color=[1, 0, 0, 1]"]) == {"color": [1, 0, 0, 1]}

    @pytest.mark.parametrize("item", ["brushSize", "=3"])
    def test_malformed(self, item):
        with pytest.raises(ValueError, match="KEY=VALUE"):
            replay.parse_overrides([item])


def test_replay_stroke_drains_unflagged_points():
    points = [TimedPoint(5.0 * i, 0.0, 20 * i) for i in range(10)]
    ctx = RecordingPaintContext()
    stamps = replay.replay_stroke(points, sanitize_parameters({}), ctx)
    assert stamps == ctx.stamps
    assert max(p.x for p in ctx.positions) > 40.0


def test_synthetic_stroke_unknown():
    from brushflow.utils.validators import RendererCPUV1

    with pytest.raises(ValueError, match="Unknown synthetic stroke"):
        replay.synthetic_stroke("spiral", RendererCPUV1())


@pytest.mark.slow
def test_main_synthetic(tmp_path, renderer_config, restore_logging):
    output = tmp_path / "out" / "line.png"
    code = replay.main([
        "--synthetic", "line",
        "--renderer_config", str(renderer_config),
        "--set", "brushSize=8",
        "--output", str(output),
        "--log_level", "WARNING",
    ])
    assert code == 0

    with Image.open(output) as im:
        assert im.size == (120, 80)
        arr = np.asarray(im.convert("RGB"))
    # Line runs along y=40 from x=12 to x=108
    assert arr[40, 60].max() < 200
    assert tuple(arr[5, 5]) == (255, 255, 255)

    metadata = yaml.safe_load(output.with_suffix(".yaml").read_text(encoding="utf-8"))
    assert metadata["num_samples"] == 40
    assert metadata["path_length_px"] == pytest.approx(96.0)
    assert metadata["num_stamps"] > 0
    assert metadata["params"]["brushSize"] == 8.0
    assert metadata["canvas_size_px"] == [120, 80]


@pytest.mark.slow
def test_main_stroke_file(tmp_path, renderer_config, restore_logging):
    stroke_path = strokes.save_stroke(
        strokes.line_stroke((10.0, 10.0), (110.0, 70.0), n=25), tmp_path / "diag.json", stroke_id="00007-0badf00d"
    )
    params_path = tmp_path / "params.yaml"
    params_path.write_text(
        yaml.safe_dump({"schema": "params.v0", "brushSize": 10, "stepSize": 1.0, "blur": 20, "color": "#0000ff"}),
        encoding="utf-8",
    )
    output = tmp_path / "diag.png"
    code = replay.main([
        "--stroke_file", str(stroke_path),
        "--params", str(params_path),
        "--renderer_config", str(renderer_config),
        "--output", str(output),
        "--no_metadata",
        "--log_level", "WARNING",
    ])
    assert code == 0
    assert output.exists()
    assert not output.with_suffix(".yaml").exists()

    with Image.open(output) as im:
        arr = np.asarray(im.convert("RGB")).astype(int)
    # Blue stroke through the middle of the diagonal
    r, g, b = arr[40, 60]
    assert b > r + 50


def test_main_requires_input(capsys):
    with pytest.raises(SystemExit):
        replay.main(["--output", "x.png"])
