"""Strided N-dimensional view over a flat buffer.

A view never copies or resizes its buffer; it only maps subscripts and
linear indices onto buffer positions using ``shape``, ``strides`` and
``offset``.  Layout properties are classified once at construction.

Access methods perform no validation.  Passing the wrong number of
subscripts, out-of-range indices or values the buffer cannot hold is a
caller error and the result is whatever the buffer does with it.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from . import layout, meta, serialize
from .buffers import empty, has_accessors
from .dtypes import bytes_per_element, is_complex


class ndarray:
    """Strided view interpreting ``buffer`` as an N-dimensional array.

    Parameters
    ----------
    dtype:
        Element data type name (``"float64"``, ``"generic"``, ...).
    buffer:
        Indexable storage, or an object implementing ``get(index)`` and
        ``set(index, value)``.  Shared with the caller.
    shape, strides:
        Dimension sizes and per-dimension element steps.  Zero-dimensional
        views use ``shape=()`` with a single placeholder stride.
    offset:
        Buffer index of the element at subscripts ``(0, ..., 0)``.
    order:
        ``"row-major"`` or ``"column-major"``; decides how a linear index
        maps onto subscripts.
    """

    __slots__ = (
        "_dtype",
        "_buffer",
        "_shape",
        "_strides",
        "_offset",
        "_order",
        "_ndims",
        "_length",
        "_bytes_per_element",
        "_byte_length",
        "_iteration_order",
        "_row_major_contiguous",
        "_column_major_contiguous",
        "_linear_fast_path",
        "_readonly",
        "_accessors",
        "_mode",
        "_submode",
        "_meta",
    )

    def __init__(
        self,
        dtype: str,
        buffer: Any,
        shape: Sequence[int],
        strides: Sequence[int],
        offset: int,
        order: str,
        *,
        mode: str = "throw",
        submode: Optional[Sequence[str]] = None,
        readonly: bool = False,
    ):
        self._dtype = dtype
        self._buffer = buffer
        self._shape = tuple(shape)
        self._strides = tuple(strides)
        self._offset = offset
        self._order = order
        self._ndims = len(self._shape)
        self._length = layout.numel(self._shape)

        self._bytes_per_element = bytes_per_element(dtype)
        if self._bytes_per_element is None:
            self._byte_length = None
        else:
            self._byte_length = self._bytes_per_element * self._length

        self._iteration_order = layout.iteration_order(self._strides)
        row, column = layout.contiguity_flags(
            self._length, self._shape, self._strides, offset, self._iteration_order
        )
        self._row_major_contiguous = row
        self._column_major_contiguous = column
        # ``offset +/- idx`` only follows the declared nesting order when the
        # view is contiguous in that same order.
        if order == layout.COLUMN_MAJOR:
            self._linear_fast_path = column
        else:
            self._linear_fast_path = row

        self._readonly = bool(readonly)
        self._accessors = has_accessors(buffer)
        self._mode = mode
        self._submode = tuple(submode) if submode is not None else (mode,)
        self._meta: Optional[bytearray] = None

    # ------------------------------------------------------------------
    @property
    def byte_length(self) -> Optional[int]:
        return self._byte_length

    @property
    def bytes_per_element(self) -> Optional[int]:
        return self._bytes_per_element

    @property
    def data(self) -> Any:
        return self._buffer

    @property
    def dtype(self) -> str:
        return self._dtype

    @property
    def flags(self) -> Dict[str, bool]:
        return {
            "ROW_MAJOR_CONTIGUOUS": self._row_major_contiguous,
            "COLUMN_MAJOR_CONTIGUOUS": self._column_major_contiguous,
            "READONLY": self._readonly,
        }

    @property
    def length(self) -> int:
        return self._length

    @property
    def ndims(self) -> int:
        return self._ndims

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def order(self) -> str:
        return self._order

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(self._shape)

    @property
    def strides(self) -> Tuple[int, ...]:
        return tuple(self._strides)

    @property
    def iteration_order(self) -> int:
        return self._iteration_order

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def submode(self) -> Tuple[str, ...]:
        return self._submode

    @property
    def readonly(self) -> bool:
        return self._readonly

    @readonly.setter
    def readonly(self, value: bool) -> None:
        value = bool(value)
        if value != self._readonly:
            self._readonly = value
            self._meta = None

    # element access --------------------------------------------------
    def _read(self, idx: int) -> Any:
        if self._accessors:
            return self._buffer.get(idx)
        return self._buffer[idx]

    def _write(self, idx: int, value: Any) -> None:
        if self._accessors:
            self._buffer.set(idx, value)
        else:
            self._buffer[idx] = value

    def _linear_offset(self, idx: int) -> int:
        if self._ndims == 0:
            return self._offset
        if self._linear_fast_path:
            if self._iteration_order == 1:
                return self._offset + idx
            return self._offset - idx
        return layout.linear_to_offset(idx, self._shape, self._strides, self._offset, self._order)

    def get(self, *subscripts: int) -> Any:
        return self._read(layout.subscripts_to_offset(subscripts, self._strides, self._offset))

    def set(self, *args: Any) -> "ndarray":
        """``set(i0, ..., i_{n-1}, value)``; returns the view for chaining."""

        self._write(layout.subscripts_to_offset(args[:-1], self._strides, self._offset), args[-1])
        return self

    def iget(self, idx: int = 0) -> Any:
        return self._read(self._linear_offset(idx))

    def iset(self, *args: Any) -> "ndarray":
        """``iset(idx, value)``; zero-dimensional views also accept ``iset(value)``."""

        if len(args) == 1:
            idx, value = 0, args[0]
        else:
            idx, value = args
        self._write(self._linear_offset(idx), value)
        return self

    def value_of(self) -> Any:
        if self._ndims == 0:
            return self.iget()
        return self

    # serialization ---------------------------------------------------
    def to_string(self) -> str:
        return serialize.to_string(self)

    def __str__(self) -> str:
        return serialize.to_string(self)

    def __repr__(self) -> str:
        return serialize.to_string(self)

    def to_json(self) -> Dict[str, Any]:
        return serialize.to_json(self)

    def meta_buffer(self) -> bytearray:
        """Binary layout metadata, cached while its size still matches."""

        size = meta.required_size(self._ndims, len(self._submode))
        if self._meta is not None and len(self._meta) == size:
            return self._meta
        self._meta = meta.encode_meta(self)
        return self._meta

    @classmethod
    def from_json(cls, record: Mapping[str, Any]) -> "ndarray":
        """Rebuild a view from a :meth:`to_json` record.

        The new buffer holds the elements at the positions the recorded
        strides address, starting from offset zero.
        """

        if record.get("type") != "ndarray":
            raise ValueError("Expected an ndarray record; got type %r" % (record.get("type"),))
        try:
            dtype = record["dtype"]
            shape = [int(dim) for dim in record["shape"]]
            strides = [int(stride) for stride in record["strides"]]
            order = record["order"]
            data = list(record["data"])
        except KeyError as exc:
            raise ValueError("ndarray record is missing field %s" % (exc,)) from None
        if is_complex(dtype):
            data = [complex(re, im) for re, im in zip(data[0::2], data[1::2])]
        length = layout.numel(shape)
        if len(data) != length:
            raise ValueError("ndarray record holds %d elements; shape %s needs %d" % (len(data), shape, length))

        lo, hi = layout.min_max_offsets(shape, strides, 0)
        size = hi - lo + 1 if length else 0
        arr = cls(dtype, empty(dtype, size), shape, strides, -lo, order)
        for i, value in enumerate(data):
            arr.iset(i, value)
        arr.readonly = bool(record.get("flags", {}).get("READONLY", False))
        return arr
