from __future__ import annotations

import json
from pathlib import Path

from .ndarray import ndarray


def save_ndarray(path: str | Path, arr: ndarray) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(arr.to_json(), fh)


def load_ndarray(path: str | Path) -> ndarray:
    with open(path, "r", encoding="utf-8") as fh:
        return ndarray.from_json(json.load(fh))
