"""Text and JSON renderings of strided views.

Both renderings describe the logical contents in linear order starting at
offset zero, so the emitted strides are always non-negative and the original
offset is dropped.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from .dtypes import is_complex, literal_template
from .np_compat import to_python_scalar

PRINT_THRESHOLD = 100
EDGE_ITEMS = 3


def _format_scalar(value: Any) -> str:
    return repr(to_python_scalar(value))


def _format_element(value: Any, complex_kind: bool) -> str:
    if complex_kind:
        return "%s, %s" % (_format_scalar(value.real), _format_scalar(value.imag))
    return _format_scalar(value)


def _format_dims(values: Any) -> str:
    return "[ %s ]" % ", ".join(str(int(v)) for v in values)


def format_data(arr: Any) -> str:
    """Comma separated elements, truncated to the edges for long views."""

    complex_kind = is_complex(arr.dtype)
    n = arr.length
    if n <= PRINT_THRESHOLD:
        items = [_format_element(arr.iget(i), complex_kind) for i in range(n)]
        return ", ".join(items)
    head = [_format_element(arr.iget(i), complex_kind) for i in range(EDGE_ITEMS)]
    tail = [_format_element(arr.iget(n - EDGE_ITEMS + i), complex_kind) for i in range(EDGE_ITEMS)]
    return ", ".join(head) + ", ..., " + ", ".join(tail)


def to_string(arr: Any) -> str:
    """Constructor-call style reconstruction of ``arr``.

    ``ndarray( 'float64', numpy.array( [ 1.0, 2.0 ], dtype='float64' ), [ 2 ], [ 1 ], 0, 'row-major' )``
    """

    shape = arr.shape
    data = literal_template(arr.dtype).format(data=format_data(arr))
    if shape:
        shape_text = _format_dims(shape)
        strides_text = _format_dims(abs(s) for s in arr.strides)
    else:
        shape_text = "[]"
        strides_text = "[ 0 ]"
    return "ndarray( '%s', %s, %s, %s, 0, '%s' )" % (arr.dtype, data, shape_text, strides_text, arr.order)


def to_json(arr: Any) -> Dict[str, Any]:
    data: List[Any] = []
    if is_complex(arr.dtype):
        for i in range(arr.length):
            value = arr.iget(i)
            data.append(float(value.real))
            data.append(float(value.imag))
    else:
        for i in range(arr.length):
            data.append(to_python_scalar(arr.iget(i)))
    return {
        "type": "ndarray",
        "dtype": arr.dtype,
        "flags": {"READONLY": arr.readonly},
        "order": arr.order,
        "shape": list(arr.shape),
        "strides": [abs(s) for s in arr.strides],
        "data": data,
    }


def dumps(arr: Any, **kwargs: Any) -> str:
    return json.dumps(to_json(arr), **kwargs)


def loads(text: str) -> Any:
    from .ndarray import ndarray

    return ndarray.from_json(json.loads(text))
