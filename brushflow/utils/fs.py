"""Atomic file writes and YAML/JSON loading.

Provides:
    - Atomic writes: tmp file → fsync → rename (readers never see partial files)
    - YAML load/dump (PyYAML safe_load / safe_dump)
    - JSON load/dump for persisted strokes
    - Atomic PNG/JPEG save from numpy arrays (Pillow)

All paths go through pathlib.Path.

Usage:
    from brushflow.utils import fs
    fs.atomic_save_image(ctx.to_image(), "outputs/replay/stroke.png")
    fs.atomic_yaml_dump(params.to_record(), "outputs/replay/params.yaml")
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
import yaml
from PIL import Image


def ensure_dir(p: Union[str, Path]) -> Path:
    """Create directory (and parents) if missing, return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(
    path: Union[str, Path],
    data: bytes,
    tmp_suffix: str = ".tmp"
) -> None:
    """Write bytes to file atomically (tmp → fsync → rename).

    Parameters
    ----------
    path : Union[str, Path]
        Target file path
    data : bytes
        Data to write
    tmp_suffix : str
        Temporary file suffix, default ".tmp"

    Raises
    ------
    RuntimeError
        If the write or the rename fails; the tmp file is removed
    """
    path = Path(path)
    ensure_dir(path.parent)
    tmp_path = path.with_suffix(path.suffix + tmp_suffix)

    try:
        with open(tmp_path, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except OSError as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to write {path} atomically: {e}") from e


def atomic_write_text(
    path: Union[str, Path],
    text: str,
    encoding: str = "utf-8"
) -> None:
    """Write text to file atomically."""
    atomic_write_bytes(path, text.encode(encoding))


def atomic_yaml_dump(obj: Any, path: Union[str, Path]) -> None:
    """Save object as YAML atomically (safe_dump, insertion order kept)."""
    yaml_str = yaml.safe_dump(
        obj,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True
    )
    atomic_write_text(path, yaml_str)


def atomic_json_dump(obj: Any, path: Union[str, Path], indent: Optional[int] = 2) -> None:
    """Save object as JSON atomically."""
    atomic_write_text(path, json.dumps(obj, indent=indent) + "\n")


def load_yaml(path: Union[str, Path]) -> Any:
    """Load YAML file safely.

    Parameters
    ----------
    path : Union[str, Path]
        YAML file path

    Returns
    -------
    Any
        Parsed content (usually a dict or list)

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    yaml.YAMLError
        If YAML parsing fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e


def load_json(path: Union[str, Path]) -> Any:
    """Load JSON file.

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    ValueError
        If JSON parsing fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"JSON file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse JSON file {path}: {e}") from e


def load_structured(path: Union[str, Path]) -> Any:
    """Load ``.json`` with the JSON parser, anything else as YAML."""
    path = Path(path)
    if path.suffix.lower() == ".json":
        return load_json(path)
    return load_yaml(path)


def atomic_save_image(
    img: np.ndarray,
    path: Union[str, Path],
    pil_kwargs: Optional[Dict[str, Any]] = None
) -> None:
    """Save image atomically.

    Parameters
    ----------
    img : np.ndarray
        (H, W, 3|4) or (H, W); uint8, or float in [0, 1]
    path : Union[str, Path]
        Target file path (extension determines format)
    pil_kwargs : dict, optional
        Extra kwargs for PIL.Image.save

    Raises
    ------
    RuntimeError
        If saving fails; the tmp file is removed
    """
    path = Path(path)
    ensure_dir(path.parent)
    pil_kwargs = pil_kwargs or {}

    img = np.asarray(img)
    if img.dtype != np.uint8:
        if np.issubdtype(img.dtype, np.floating):
            img = np.floor(np.clip(img, 0.0, 1.0) * 255.0 + 0.5)
        img = np.clip(img, 0, 255).astype(np.uint8)
    if img.ndim == 3 and img.shape[2] == 1:
        img = img.squeeze(2)

    # Keep the real extension last so PIL can infer the format
    tmp_path = path.with_name(path.stem + ".tmp" + path.suffix)
    try:
        Image.fromarray(img).save(tmp_path, **pil_kwargs)
        tmp_path.replace(path)
    except (OSError, ValueError) as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to save image {path} atomically: {e}") from e
