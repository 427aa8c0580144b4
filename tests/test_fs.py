"""Test atomic filesystem operations.

Tests for brushflow.utils.fs:
    - atomic writes leave no tmp files and create parents
    - YAML / JSON roundtrip, load_structured dispatch on suffix
    - parse errors surface as yaml.YAMLError / ValueError
    - atomic_save_image quantization (float → uint8) and PNG readback

Run:
    pytest tests/test_fs.py -v
"""

import numpy as np
import pytest
import yaml
from PIL import Image

from brushflow.utils import fs


def test_ensure_dir(tmp_path):
    target = tmp_path / "a" / "b" / "c"
    assert fs.ensure_dir(target) == target
    assert target.is_dir()
    # Idempotent
    fs.ensure_dir(target)


def test_atomic_write_bytes(tmp_path):
    path = tmp_path / "nested" / "blob.bin"
    fs.atomic_write_bytes(path, b"\x00\x01brush")
    assert path.read_bytes() == b"\x00\x01brush"
    assert list(path.parent.iterdir()) == [path]


def test_atomic_write_replaces(tmp_path):
    path = tmp_path / "note.txt"
    fs.atomic_write_text(path, "first")
    fs.atomic_write_text(path, "second")
    assert path.read_text(encoding="utf-8") == "second"


def test_atomic_write_failure_raises_runtime_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    # Parent is a regular file → cannot create the tmp file
    with pytest.raises((RuntimeError, OSError)):
        fs.atomic_write_bytes(blocker / "child.bin", b"data")


def test_yaml_roundtrip(tmp_path):
    data = {"brushSize": 16.0, "color": [0.2, 0.2, 0.2, 1.0], "debug": False, "name": "ünï"}
    path = tmp_path / "params.yaml"
    fs.atomic_yaml_dump(data, path)
    assert fs.load_yaml(path) == data
    # Insertion order kept
    assert list(yaml.safe_load(path.read_text(encoding="utf-8"))) == list(data)


def test_json_roundtrip(tmp_path):
    data = [{"x": 1.5, "y": 2.0, "t": 0}]
    path = tmp_path / "s.json"
    fs.atomic_json_dump(data, path)
    assert fs.load_json(path) == data
    assert fs.load_structured(path) == data


def test_load_structured_yaml(tmp_path):
    path = tmp_path / "s.yml"
    path.write_text("- {x: 1, y: 2, t: 3}\n", encoding="utf-8")
    assert fs.load_structured(path) == [{"x": 1, "y": 2, "t": 3}]


def test_load_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        fs.load_yaml(tmp_path / "missing.yaml")
    with pytest.raises(FileNotFoundError):
        fs.load_json(tmp_path / "missing.json")

    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="bad.json"):
        fs.load_json(bad_json)

    bad_yaml = tmp_path / "bad.yaml"
    bad_yaml.write_text("a: [1, 2\n", encoding="utf-8")
    with pytest.raises(yaml.YAMLError):
        fs.load_yaml(bad_yaml)


def test_atomic_save_image_float(tmp_path):
    img = np.zeros((4, 5, 3), dtype=np.float32)
    img[0, 0] = (1.0, 0.5, 0.0)
    img[1, 1] = (2.0, -1.0, 0.2)
    path = tmp_path / "out" / "img.png"
    fs.atomic_save_image(img, path)

    with Image.open(path) as im:
        arr = np.asarray(im)
    assert arr.shape == (4, 5, 3)
    assert tuple(arr[0, 0]) == (255, 128, 0)
    assert tuple(arr[1, 1]) == (255, 0, 51)
    assert sorted(p.name for p in path.parent.iterdir()) == ["img.png"]


def test_atomic_save_image_uint8_gray(tmp_path):
    img = np.full((3, 3, 1), 77, dtype=np.uint8)
    path = tmp_path / "gray.png"
    fs.atomic_save_image(img, path)
    with Image.open(path) as im:
        assert im.mode == "L"
        assert np.asarray(im)[2, 2] == 77
