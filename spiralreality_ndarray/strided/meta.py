"""Binary metadata protocol for strided views.

The encoding describes a view (never its elements) so another component can
operate on the same buffer without copying.  All multi-byte fields use the
host byte order; the leading flag byte tells a reader which order that was.

Layout (``33 + 16*ndims + nsubmodes`` bytes)::

    endianness   int8       1 on little-endian hosts, else 0
    dtype        int16      ``DTYPES`` code
    ndims        int64
    shape        int64 x ndims
    strides      int64 x ndims   (bytes, signed)
    offset       int64           (bytes)
    order        int8       ``ORDERS`` code
    mode         int8       ``INDEX_MODES`` code
    nsubmodes    int64
    submodes     int8 x nsubmodes
    flags        int32      bit value 4 set when read-only

Two interchangeable int64 writers exist: ``wide`` writes a single native
64-bit integer, ``halves`` writes two native 32-bit halves ordered by host
endianness.  Both produce identical bytes.  The writer is chosen once at
import time from host support and ``SPIRAL_NDARRAY_META_WRITER``
(``auto``, ``wide`` or ``halves``).
"""

from __future__ import annotations

import logging
import os
import struct
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from .dtypes import DTYPES, INDEX_MODES, ORDERS

LOGGER = logging.getLogger(__name__)

IS_LITTLE_ENDIAN = sys.byteorder == "little"

READONLY_FLAG = 4
_FIXED_SIZE = 1 + 2 + 8 + 8 + 1 + 1 + 8 + 4
_UINT32_MASK = 0xFFFFFFFF

Int64Writer = Callable[[bytearray, int, int], None]


class MetaEncodingError(RuntimeError):
    """Raised when the host offers no usable 64-bit integer writer."""


def _write_int64_wide(buf: bytearray, pos: int, value: int) -> None:
    struct.pack_into("=q", buf, pos, value)


def _write_int64_halves(buf: bytearray, pos: int, value: int) -> None:
    low = value & _UINT32_MASK
    high = (value >> 32) & _UINT32_MASK
    if IS_LITTLE_ENDIAN:
        first, second = low, high
    else:
        first, second = high, low
    struct.pack_into("=I", buf, pos, first)
    struct.pack_into("=I", buf, pos + 4, second)


def _has_wide_support() -> bool:
    try:
        return struct.calcsize("=q") == 8
    except struct.error:  # pragma: no cover - platform without 64-bit codes
        return False


def _has_halves_support() -> bool:
    try:
        return struct.calcsize("=I") == 4
    except struct.error:  # pragma: no cover - platform without 32-bit codes
        return False


_WRITERS: Dict[str, Tuple[Callable[[], bool], Int64Writer]] = {
    "wide": (_has_wide_support, _write_int64_wide),
    "halves": (_has_halves_support, _write_int64_halves),
}


def _select_writer(preference: str) -> Tuple[Optional[str], Optional[Int64Writer]]:
    preference = (preference or "auto").strip().lower()
    if preference in {"", "auto"}:
        order: Tuple[str, ...] = ("wide", "halves")
    elif preference in _WRITERS:
        order = (preference,) + tuple(name for name in _WRITERS if name != preference)
    else:
        LOGGER.warning("Unknown metadata writer preference %r; using auto-detection", preference)
        order = ("wide", "halves")

    for name in order:
        probe, writer = _WRITERS[name]
        if probe():
            if name != order[0]:
                LOGGER.info("Metadata writer %s unavailable; using %s", order[0], name)
            return name, writer
    return None, None


_WRITER_PREF = os.getenv("SPIRAL_NDARRAY_META_WRITER", "auto")
META_WRITER, _WRITE_INT64 = _select_writer(_WRITER_PREF)


def _resolve_writer(name: str | None) -> Int64Writer:
    if name is None:
        if _WRITE_INT64 is None:
            LOGGER.error("No 64-bit integer writer is available on this host")
            raise MetaEncodingError(
                "Cannot encode ndarray metadata: host supports neither 64-bit nor 32-bit integer writes"
            )
        return _WRITE_INT64
    try:
        probe, writer = _WRITERS[name]
    except KeyError:
        raise ValueError("Unknown metadata writer %r; expected one of %s" % (name, sorted(_WRITERS))) from None
    if not probe():
        LOGGER.error("Metadata writer %s is not supported on this host", name)
        raise MetaEncodingError("Metadata writer %r is not supported on this host" % (name,))
    return writer


def required_size(ndims: int, nsubmodes: int) -> int:
    return _FIXED_SIZE + 16 * ndims + nsubmodes


def encode_meta(arr: Any, writer: str | None = None) -> bytearray:
    """Encode the layout of ``arr`` into a new buffer.

    ``writer`` forces a specific int64 strategy; by default the one picked at
    import time is used.
    """

    write_int64 = _resolve_writer(writer)
    # Views without a fixed element size (``generic``) carry zero byte strides
    # and a zero byte offset.
    bpe = arr.bytes_per_element or 0
    dtype_code = DTYPES.get(arr.dtype)
    if dtype_code is None:
        raise ValueError("dtype %r has no metadata protocol code" % (arr.dtype,))

    shape = arr.shape
    strides = arr.strides
    ndims = arr.ndims
    mode = arr.mode
    submodes = arr.submode

    buf = bytearray(required_size(ndims, len(submodes)))
    struct.pack_into("=b", buf, 0, 1 if IS_LITTLE_ENDIAN else 0)
    struct.pack_into("=h", buf, 1, dtype_code)
    write_int64(buf, 3, ndims)
    pos = 11
    span = 8 * ndims
    for dim, stride in zip(shape, strides):
        write_int64(buf, pos, dim)
        write_int64(buf, pos + span, stride * bpe)
        pos += 8
    pos += span
    write_int64(buf, pos, arr.offset * bpe)
    pos += 8
    struct.pack_into("=b", buf, pos, ORDERS[arr.order])
    struct.pack_into("=b", buf, pos + 1, INDEX_MODES[mode])
    pos += 2
    write_int64(buf, pos, len(submodes))
    pos += 8
    for submode in submodes:
        struct.pack_into("=b", buf, pos, INDEX_MODES[submode])
        pos += 1
    flags = READONLY_FLAG if arr.readonly else 0
    struct.pack_into("=i", buf, pos, flags)
    return buf


@dataclass(frozen=True)
class MetaRecord:
    """Decoded view metadata; strides and offset are in bytes."""

    little_endian: bool
    dtype: int
    shape: Tuple[int, ...]
    strides: Tuple[int, ...]
    offset: int
    order: int
    mode: int
    submodes: Tuple[int, ...]
    flags: int

    @property
    def ndims(self) -> int:
        return len(self.shape)

    @property
    def readonly(self) -> bool:
        return bool(self.flags & READONLY_FLAG)


def decode_meta(buf: bytes | bytearray | memoryview) -> MetaRecord:
    """Read a metadata buffer written by :func:`encode_meta` on any host."""

    little = buf[0] == 1
    prefix = "<" if little else ">"
    (dtype_code,) = struct.unpack_from(prefix + "h", buf, 1)
    (ndims,) = struct.unpack_from(prefix + "q", buf, 3)
    shape = struct.unpack_from(prefix + "%dq" % ndims, buf, 11)
    strides = struct.unpack_from(prefix + "%dq" % ndims, buf, 11 + 8 * ndims)
    pos = 11 + 16 * ndims
    (offset,) = struct.unpack_from(prefix + "q", buf, pos)
    order, mode = struct.unpack_from(prefix + "bb", buf, pos + 8)
    (nsubmodes,) = struct.unpack_from(prefix + "q", buf, pos + 10)
    pos += 18
    submodes = struct.unpack_from(prefix + "%db" % nsubmodes, buf, pos)
    (flags,) = struct.unpack_from(prefix + "i", buf, pos + nsubmodes)
    return MetaRecord(
        little_endian=little,
        dtype=dtype_code,
        shape=tuple(shape),
        strides=tuple(strides),
        offset=offset,
        order=order,
        mode=mode,
        submodes=tuple(submodes),
        flags=flags,
    )
