"""Memory layout analysis for strided views.

Everything here works on plain ``shape``/``strides`` sequences so the view
can classify its layout once at construction time.  The contiguity flags
select the O(1) linear-index path in :class:`~.ndarray.ndarray`; a false
positive would make that path resolve the wrong element.
"""

from __future__ import annotations

from typing import Sequence, Tuple

MIXED = 0
DESCENDING = 1
ASCENDING = 2
BOTH = DESCENDING | ASCENDING

ROW_MAJOR = "row-major"
COLUMN_MAJOR = "column-major"


def numel(shape: Sequence[int]) -> int:
    """Number of elements described by ``shape`` (``1`` for a zero-dimensional shape)."""

    n = 1
    for dim in shape:
        n *= dim
    return n


def stride_monotonicity(strides: Sequence[int]) -> int:
    """Classify absolute stride magnitudes in dimension order.

    Returns ``DESCENDING`` when the magnitudes never increase, ``ASCENDING``
    when they never decrease, ``BOTH`` when they are constant (this includes
    empty and single-entry sequences) and ``MIXED`` otherwise.
    """

    if not strides:
        return BOTH
    non_decreasing = True
    non_increasing = True
    prev = abs(strides[0])
    for stride in strides[1:]:
        cur = abs(stride)
        if cur < prev:
            non_decreasing = False
        elif cur > prev:
            non_increasing = False
        if not (non_decreasing or non_increasing):
            return MIXED
        prev = cur
    if non_decreasing and non_increasing:
        return BOTH
    if non_increasing:
        return DESCENDING
    return ASCENDING


def min_max_offsets(shape: Sequence[int], strides: Sequence[int], offset: int) -> Tuple[int, int]:
    """Smallest and largest buffer indices reachable from ``offset``."""

    lo = offset
    hi = offset
    for dim, stride in zip(shape, strides):
        if dim == 0:
            return offset, offset
        if stride > 0:
            hi += stride * (dim - 1)
        elif stride < 0:
            lo += stride * (dim - 1)
    return lo, hi


def iteration_order(strides: Sequence[int]) -> int:
    """``1`` when no stride is negative, ``-1`` when all are, ``0`` for mixed signs."""

    negatives = sum(1 for stride in strides if stride < 0)
    if negatives == 0:
        return 1
    if negatives == len(strides):
        return -1
    return 0


def is_contiguous(length: int, shape: Sequence[int], strides: Sequence[int], offset: int, order: int) -> bool:
    if length == 0 or order == 0:
        return False
    lo, hi = min_max_offsets(shape, strides, offset)
    return hi - lo + 1 == length


def contiguity_flags(
    length: int,
    shape: Sequence[int],
    strides: Sequence[int],
    offset: int,
    order: int,
) -> Tuple[bool, bool]:
    """Return ``(row_major_contiguous, column_major_contiguous)``."""

    if not is_contiguous(length, shape, strides, offset, order):
        return False, False
    monotonicity = stride_monotonicity(strides)
    return bool(monotonicity & DESCENDING), bool(monotonicity & ASCENDING)


def subscripts_to_offset(subscripts: Sequence[int], strides: Sequence[int], offset: int) -> int:
    idx = offset
    for sub, stride in zip(subscripts, strides):
        idx += stride * sub
    return idx


def linear_to_offset(
    idx: int,
    shape: Sequence[int],
    strides: Sequence[int],
    offset: int,
    order: str,
) -> int:
    """Resolve a linear index through per-dimension decomposition.

    Row-major views peel coordinates off the last dimension first, column-major
    views off the first, so the linear index follows the declared nesting
    order regardless of the physical stride layout.
    """

    pos = offset
    ndims = len(shape)
    dims = range(ndims) if order == COLUMN_MAJOR else range(ndims - 1, -1, -1)
    for dim in dims:
        idx, coord = divmod(idx, shape[dim])
        pos += coord * strides[dim]
    return pos
