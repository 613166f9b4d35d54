from __future__ import annotations

import itertools

import numpy as np
import pytest

from spiralreality_ndarray.strided import Complex64Array, layout, ndarray


def contiguous_strides(shape, order):
    strides = [0] * len(shape)
    step = 1
    dims = range(len(shape) - 1, -1, -1) if order == "row-major" else range(len(shape))
    for dim in dims:
        strides[dim] = step
        step *= shape[dim]
    return strides


def test_get_resolves_negative_strides():
    arr = ndarray("generic", [1, 2, 3, 4], [2, 2], [2, -1], 1, "row-major")

    assert arr.get(0, 0) == 2
    assert arr.get(0, 1) == 1
    assert arr.get(1, 0) == 4
    assert arr.get(1, 1) == 3


def test_get_column_major_subscripts():
    arr = ndarray("generic", [1.0, 2.0, 3.0, 4.0], [2, 2], [1, 2], 0, "column-major")

    assert arr.get(0, 0) == 1.0
    assert arr.get(1, 0) == 2.0
    assert arr.get(0, 1) == 3.0
    assert arr.get(1, 1) == 4.0


def test_set_writes_through_and_chains():
    buffer = [1.0, 2.0, 3.0, 4.0]
    arr = ndarray("generic", buffer, [2, 2], [2, 1], 0, "row-major")

    result = arr.set(0, 1, 20.0).set(1, 0, 30.0)

    assert result is arr
    assert buffer == [1.0, 20.0, 30.0, 4.0]


@pytest.mark.parametrize(
    "strides, offset, expected",
    [
        ([1, 2], 0, [5.0, 6.0, 7.0, 8.0]),
        ([-1, 2], 1, [6.0, 5.0, 8.0, 7.0]),
        ([1, -2], 2, [7.0, 8.0, 5.0, 6.0]),
        ([-1, -2], 3, [8.0, 7.0, 6.0, 5.0]),
    ],
)
def test_iset_column_major_sign_combinations(strides, offset, expected):
    buffer = [1.0, 2.0, 3.0, 4.0]
    arr = ndarray("generic", buffer, [2, 2], strides, offset, "column-major")

    for idx, value in enumerate((5.0, 6.0, 7.0, 8.0)):
        assert arr.iset(idx, value) is arr

    assert [arr.iget(i) for i in range(4)] == [5.0, 6.0, 7.0, 8.0]
    assert buffer == expected


def test_iset_noncontiguous_column_major():
    buffer = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0]
    arr = ndarray("generic", buffer, [2, 2, 1], [1, 4, 8], 0, "column-major")

    for idx, value in enumerate((-5.0, -6.0, -7.0, -8.0)):
        arr.iset(idx, value)

    assert [arr.iget(i) for i in range(4)] == [-5.0, -6.0, -7.0, -8.0]
    assert buffer == [-5.0, -6.0, 3.0, 4.0, -7.0, -8.0, 7.0, 8.0]


def test_iget_row_major_noncontiguous():
    buffer = list(range(12))
    arr = ndarray("generic", buffer, [2, 3], [6, 2], 0, "row-major")

    assert arr.flags["ROW_MAJOR_CONTIGUOUS"] is False
    assert [arr.iget(i) for i in range(6)] == [0, 2, 4, 6, 8, 10]


def _sign_variants(shape, order):
    base = contiguous_strides(shape, order)
    for signs in itertools.product((1, -1), repeat=len(shape)):
        strides = [s * b for s, b in zip(signs, base)]
        offset = sum(-stride * (dim - 1) for stride, dim in zip(strides, shape) if stride < 0)
        yield strides, offset


@pytest.mark.parametrize("order", ["row-major", "column-major"])
@pytest.mark.parametrize("shape", [[4], [2, 3], [3, 2, 2], [1, 3], [2, 1, 2]])
def test_fast_and_general_paths_agree(shape, order):
    length = layout.numel(shape)
    for strides, offset in _sign_variants(shape, order):
        buffer = list(range(length))
        arr = ndarray("generic", buffer, shape, strides, offset, order)
        for idx in range(length):
            expected = buffer[layout.linear_to_offset(idx, shape, strides, offset, order)]
            assert arr.iget(idx) == expected


@pytest.mark.parametrize("order", ["row-major", "column-major"])
def test_fast_and_general_paths_agree_when_order_differs_from_layout(order):
    shape = [2, 3]
    other = "column-major" if order == "row-major" else "row-major"
    strides = contiguous_strides(shape, other)
    buffer = list(range(6))
    arr = ndarray("generic", buffer, shape, strides, 0, order)

    for idx in range(6):
        assert arr.iget(idx) == buffer[layout.linear_to_offset(idx, shape, strides, 0, order)]


@pytest.mark.parametrize(
    "strides, offset, order",
    [([3, 1], 0, "row-major"), ([-3, -1], 5, "row-major"), ([1, 2], 0, "column-major"), ([-1, -2], 5, "column-major")],
)
def test_contiguous_views_skip_general_path(monkeypatch: pytest.MonkeyPatch, strides, offset, order):
    buffer = list(range(6))
    arr = ndarray("generic", buffer, [2, 3], strides, offset, order)
    expected = [arr.iget(i) for i in range(6)]

    def _boom(*_args, **_kwargs):
        raise AssertionError("general path used")

    monkeypatch.setattr(layout, "linear_to_offset", _boom)

    assert [arr.iget(i) for i in range(6)] == expected
    arr.iset(1, 99)
    assert 99 in buffer


def test_zero_dimensional_view_reads_and_writes_offset():
    buffer = [1.0, 2.0, 3.0, 4.0]
    arr = ndarray("generic", buffer, [], [0], 2, "row-major")

    assert arr.ndims == 0
    assert arr.length == 1
    assert arr.get() == 3.0
    assert arr.iget() == 3.0
    assert arr.iget(3) == 3.0
    assert arr.value_of() == 3.0
    assert arr.flags["ROW_MAJOR_CONTIGUOUS"] is True
    assert arr.flags["COLUMN_MAJOR_CONTIGUOUS"] is True

    arr.set(10.0)
    assert buffer[2] == 10.0
    arr.iset(11.0)
    assert buffer[2] == 11.0
    arr.iset(0, 12.0)
    assert buffer == [1.0, 2.0, 12.0, 4.0]


def test_value_of_returns_view_for_ranked_arrays():
    arr = ndarray("generic", [1.0, 2.0], [2], [1], 0, "row-major")
    assert arr.value_of() is arr


def test_byte_lengths_follow_dtype():
    typed = ndarray("float64", np.zeros(4), [4], [1], 0, "row-major")
    generic = ndarray("generic", [0.0] * 4, [4], [1], 0, "row-major")
    unknown = ndarray("mystery", [0.0] * 4, [4], [1], 0, "row-major")
    scalar = ndarray("float64", np.zeros(4), [], [0], 1, "row-major")

    assert typed.byte_length == 32
    assert typed.bytes_per_element == 8
    assert generic.byte_length is None
    assert generic.bytes_per_element is None
    assert unknown.byte_length is None
    assert unknown.bytes_per_element is None
    assert scalar.byte_length == 8


def test_properties_are_defensive_copies():
    buffer = [1, 2, 3, 4]
    arr = ndarray("generic", buffer, [2, 2], [2, -1], 1, "row-major")

    flags = arr.flags
    flags["READONLY"] = True
    shape = list(arr.shape)
    shape[0] = 99

    assert arr.flags["READONLY"] is False
    assert arr.shape == (2, 2)
    assert arr.strides == (2, -1)
    assert arr.data is buffer
    assert arr.offset == 1
    assert arr.order == "row-major"
    assert arr.dtype == "generic"
    assert arr.iteration_order == 0


def test_empty_view_is_not_contiguous():
    arr = ndarray("float32", np.zeros(0, dtype=np.float32), [2, 0], [1, 1], 0, "row-major")

    assert arr.length == 0
    assert arr.byte_length == 0
    assert arr.flags["ROW_MAJOR_CONTIGUOUS"] is False
    assert arr.flags["COLUMN_MAJOR_CONTIGUOUS"] is False


def test_accessor_buffers_are_dispatched_through_get_and_set():
    class RecordingBuffer:
        def __init__(self, values):
            self.values = list(values)
            self.calls = []

        def get(self, index):
            self.calls.append(("get", index))
            return self.values[index]

        def set(self, index, value):
            self.calls.append(("set", index))
            self.values[index] = value

    buffer = RecordingBuffer([1, 2, 3, 4])
    arr = ndarray("generic", buffer, [2, 2], [2, 1], 0, "row-major")

    assert arr.get(1, 1) == 4
    arr.iset(0, 10)
    assert buffer.values == [10, 2, 3, 4]
    assert buffer.calls == [("get", 3), ("set", 0)]


def test_complex_views_over_interleaved_storage():
    buffer = Complex64Array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0])
    arr = ndarray("complex64", buffer, [2, 2], [2, 1], 0, "row-major")

    assert arr.bytes_per_element == 8
    assert arr.byte_length == 32
    assert arr.get(1, 0) == complex(5.0, 6.0)
    assert arr.iget(3) == complex(7.0, 8.0)

    arr.iset(1, complex(-3.0, -4.0))
    assert buffer.to_list() == [1.0, 2.0, -3.0, -4.0, 5.0, 6.0, 7.0, 8.0]


def test_complex_views_over_numpy_storage():
    buffer = np.array([1 + 2j, 3 + 4j], dtype=np.complex128)
    arr = ndarray("complex128", buffer, [2], [-1], 1, "row-major")

    assert arr.iget(0) == 3 + 4j
    assert arr.iget(1) == 1 + 2j


def test_readonly_is_settable_but_not_enforced():
    buffer = [1, 2]
    arr = ndarray("generic", buffer, [2], [1], 0, "row-major", readonly=True)

    assert arr.flags["READONLY"] is True
    arr.readonly = False
    assert arr.flags["READONLY"] is False
    arr.iset(0, 5)
    assert buffer == [5, 2]
