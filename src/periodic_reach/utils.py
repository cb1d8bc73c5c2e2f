# src/periodic_reach/utils.py
from __future__ import annotations

import json
import os
import time
import tomllib
from pathlib import Path
from typing import Any, Dict

import numpy as np

from .distance import DistanceField
from .lattice import Lattice, Window, parse_grid


def now_str() -> str:
    return time.strftime("%Y%m%d-%H%M%S")


def read_grid(path: str | os.PathLike[str]) -> Lattice:
    """Parse a grid file into a Lattice."""
    return parse_grid(Path(path).read_text(encoding="utf-8"))


def save_field(
    path: str | os.PathLike[str], field: DistanceField, *, overwrite: bool = True
) -> None:
    """Serialize a DistanceField to a compressed .npz."""
    out_dir = Path(path).parent
    out_dir.mkdir(parents=True, exist_ok=True)
    if not overwrite and Path(path).exists():
        raise FileExistsError(f"{path} already exists")
    w = field.window
    np.savez_compressed(
        path,
        distances=field.distances,
        window=np.array([w.top, w.left, w.height, w.width], dtype=np.int64),
        source=np.array(field.source, dtype=np.int64),
        toroidal=np.array(field.toroidal),
    )


def load_field(path: str | os.PathLike[str]) -> DistanceField:
    """Load a DistanceField written by save_field."""
    with np.load(path) as data:
        top, left, height, width = (int(v) for v in data["window"])
        source = tuple(int(v) for v in data["source"])
        return DistanceField(
            distances=data["distances"].astype(np.int64),
            window=Window(top, left, height, width),
            source=source,
            toroidal=bool(data["toroidal"]),
        )


def load_params(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """
    Load solver parameters from JSON or TOML.
    """
    path = str(path)
    with open(path, "rb") as fh:
        data = fh.read()
    suffix = Path(path).suffix.lower()
    if suffix in {".json", ""}:
        return json.loads(data.decode("utf-8"))
    if suffix in {".toml", ".tml"}:
        return tomllib.loads(data.decode("utf-8"))
    raise ValueError(f"Unsupported parameter file format: {suffix}")
