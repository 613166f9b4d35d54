"""Element storage helpers.

A view reads its buffer either through plain indexing (lists, ``bytearray``,
NumPy arrays) or through the accessor protocol: ``buffer.get(index)`` and
``buffer.set(index, value)``.  The accessor protocol covers storage whose
elements are not single slots of the underlying memory, such as the
interleaved complex arrays below.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Sequence

from .dtypes import is_complex, resolve_numpy_dtype
from .np_compat import np


def has_accessors(buffer: Any) -> bool:
    return callable(getattr(buffer, "get", None)) and callable(getattr(buffer, "set", None))


class _InterleavedComplexArray:
    """Complex elements stored as consecutive ``(real, imag)`` float pairs."""

    __slots__ = ("_array",)

    _float_dtype: Any = np.float64
    BYTES_PER_ELEMENT = 16

    def __init__(self, data: int | Iterable[Any] = 0):
        if isinstance(data, int):
            self._array = np.zeros(2 * data, dtype=self._float_dtype)
            return
        values = list(data)
        if values and isinstance(values[0], complex):
            flat: List[float] = []
            for value in values:
                flat.extend((value.real, value.imag))
            values = flat
        if len(values) % 2:
            raise ValueError(
                "%s expects an even number of interleaved components; got %d"
                % (type(self).__name__, len(values))
            )
        self._array = np.asarray(values, dtype=self._float_dtype)

    def __len__(self) -> int:
        return self._array.shape[0] // 2

    def get(self, index: int) -> complex:
        pos = 2 * index
        return complex(self._array[pos], self._array[pos + 1])

    def set(self, index: int, value: Any) -> None:
        pos = 2 * index
        value = complex(value)
        self._array[pos] = value.real
        self._array[pos + 1] = value.imag

    def to_list(self) -> List[float]:
        return self._array.tolist()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, _InterleavedComplexArray):
            return NotImplemented
        return type(self) is type(other) and bool(np.array_equal(self._array, other._array))

    def __repr__(self) -> str:
        return "%s( %r )" % (type(self).__name__, self.to_list())


class Complex64Array(_InterleavedComplexArray):
    __slots__ = ()

    _float_dtype = np.float32
    BYTES_PER_ELEMENT = 8


class Complex128Array(_InterleavedComplexArray):
    __slots__ = ()

    _float_dtype = np.float64
    BYTES_PER_ELEMENT = 16


_COMPLEX_ARRAYS = {
    "complex64": Complex64Array,
    "complex128": Complex128Array,
}


def empty(dtype: str, size: int) -> Any:
    """Zero-filled buffer of ``size`` elements (``None`` slots for generic storage)."""

    if is_complex(dtype):
        return _COMPLEX_ARRAYS[dtype](size)
    if dtype == "binary":
        return bytearray(size)
    resolved = resolve_numpy_dtype(dtype)
    if resolved is None:
        return [None] * size
    return np.zeros(size, dtype=resolved)


def allocate(dtype: str, data: Sequence[Any]) -> Any:
    """Build a buffer for ``dtype`` holding ``data``.

    Complex dtypes take ``data`` as interleaved real/imaginary components,
    matching the flattening used by ``to_json``.  ``uint8c`` values are
    rounded half to even and clamped to ``0..255``.
    """

    if is_complex(dtype):
        return _COMPLEX_ARRAYS[dtype](data)
    if dtype == "binary":
        return bytearray(data)
    if dtype == "uint8c":
        values = np.rint(np.nan_to_num(np.asarray(data, dtype=np.float64), nan=0.0))
        return np.clip(values, 0, 255).astype(np.uint8)
    resolved = resolve_numpy_dtype(dtype)
    if resolved is None:
        return list(data)
    return np.asarray(data, dtype=resolved)
