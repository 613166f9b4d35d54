"""Lookup tables for data types, memory orders and index modes.

The integer codes are part of the binary metadata protocol (see ``meta``) and
must stay stable.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .np_compat import np

DTYPES: Dict[str, int] = {
    "bool": 0,
    "int8": 1,
    "uint8": 2,
    "uint8c": 3,
    "int16": 4,
    "uint16": 5,
    "int32": 6,
    "uint32": 7,
    "int64": 8,
    "uint64": 9,
    "float32": 10,
    "float64": 11,
    "complex64": 12,
    "complex128": 13,
    "binary": 14,
    "generic": 15,
    "notype": 17,
    "userdefined_type": 256,
}

ORDERS: Dict[str, int] = {
    "row-major": 101,
    "column-major": 102,
}

INDEX_MODES: Dict[str, int] = {
    "throw": 1,
    "clamp": 2,
    "wrap": 3,
    "normalize": 4,
}

BYTES_PER_ELEMENT: Dict[str, Optional[int]] = {
    "binary": 1,
    "bool": 1,
    "complex64": 8,
    "complex128": 16,
    "float16": 2,
    "bfloat16": 2,
    "float32": 4,
    "float64": 8,
    "float128": 16,
    "generic": None,
    "int8": 1,
    "int16": 2,
    "int32": 4,
    "int64": 8,
    "int128": 16,
    "int256": 32,
    "uint8": 1,
    "uint8c": 1,
    "uint16": 2,
    "uint32": 4,
    "uint64": 8,
    "uint128": 16,
    "uint256": 32,
}

COMPLEX_DTYPES = frozenset({"complex64", "complex128"})

# Data types stored in plain NumPy arrays.  ``uint8c`` (clamped bytes) has no
# NumPy counterpart and is stored as ``uint8``.
_NUMPY_DTYPES: Dict[str, Any] = {
    "bool": np.bool_,
    "int8": np.int8,
    "uint8": np.uint8,
    "uint8c": np.uint8,
    "int16": np.int16,
    "uint16": np.uint16,
    "int32": np.int32,
    "uint32": np.uint32,
    "int64": np.int64,
    "uint64": np.uint64,
    "float16": np.float16,
    "float32": np.float32,
    "float64": np.float64,
}

_NUMPY_LITERAL = "numpy.array( [ {data} ], dtype='%s' )"

LITERAL_TEMPLATES: Dict[str, str] = {
    name: _NUMPY_LITERAL % np.dtype(kind).name for name, kind in _NUMPY_DTYPES.items()
}
LITERAL_TEMPLATES.update(
    {
        "generic": "[ {data} ]",
        "binary": "bytearray( [ {data} ] )",
        "complex64": "Complex64Array( [ {data} ] )",
        "complex128": "Complex128Array( [ {data} ] )",
    }
)


def bytes_per_element(dtype: str) -> Optional[int]:
    """Return the element size for ``dtype`` or ``None`` when it is variable or unknown."""

    return BYTES_PER_ELEMENT.get(dtype)


def is_complex(dtype: str) -> bool:
    return dtype in COMPLEX_DTYPES


def resolve_numpy_dtype(dtype: str) -> np.dtype[Any] | None:
    """NumPy storage dtype for ``dtype``, or ``None`` when storage is untyped.

    ``uint8c`` resolves to plain ``uint8``: NumPy assignment wraps on
    overflow, so only :func:`~.buffers.allocate` clamps values into range.
    """

    kind = _NUMPY_DTYPES.get(dtype)
    if kind is None:
        return None
    return np.dtype(kind)


def literal_template(dtype: str) -> str:
    return LITERAL_TEMPLATES.get(dtype, LITERAL_TEMPLATES["generic"])
