"""Compatibility layer that always exposes real NumPy.

Typed element storage is backed by NumPy arrays, so importing this module
raises immediately if NumPy cannot be resolved.  Element values read out of
NumPy storage are NumPy scalars; ``to_python_scalar`` converts them back to
plain Python numbers for text and JSON output.
"""

from __future__ import annotations

from typing import Any

import numpy as np  # type: ignore


def to_python_scalar(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return value


__all__ = ["np", "to_python_scalar"]
