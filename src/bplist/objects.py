"""``bplist.objects``: Object fragments
===================================

Encode one slot of a flattened value (see :mod:`bplist.graph`) as a binary
plist object.

Every object starts with a marker byte: the high nibble is the type of the
object and, for types that have a length, the low nibble holds the length. If
the length doesn't fit in the low nibble, the nibble is set to ``0xF`` and the
length follows as an integer object::

    >>> encode_object("plist").hex()
    '55706c697374'
    >>> encode_object("a" * 15).hex()
    '5f100f616161616161616161616161616161'

Values of a type that has no representation in a binary plist are pickled and
stored as data. Values that cannot be pickled are stored as their ``repr``.
"""
from __future__ import annotations

import datetime
import functools
import io
import logging
import pickle
import struct
from typing import Any, Final

from bplist import tree
from bplist._ints import (
    MAX_UINT,
    IntegerRangeError,
    Width,
    pack_uint,
    select_width,
)

__all__ = ("encode_object",)

logger = logging.getLogger(__name__)

MARKER_FALSE: Final = 0x08
MARKER_TRUE: Final = 0x09
MARKER_INT: Final = 0x10
MARKER_REAL: Final = 0x20
MARKER_DATE: Final = 0x33
MARKER_DATA: Final = 0x40
MARKER_ASCII_STRING: Final = 0x50
MARKER_UNICODE16_STRING: Final = 0x60
MARKER_ARRAY: Final = 0xA0
MARKER_SET: Final = 0xC0
MARKER_DICT: Final = 0xD0

#: Size of the object references in arrays, sets and dictionaries
REFERENCE_WIDTH: Final = Width.INT

#: Seconds between the POSIX epoch and Cocoa's reference date (2001-01-01)
EPOCH_OFFSET: Final = 978307200.0

#: Protocol used to dump values that have no plist representation
PICKLE_PROTOCOL: Final = 4

#: Negative integers from this value up are stored on 8 bytes, below on 16
MIN_LONG: Final = -(2**63)

_DOUBLE: Final = struct.Struct(">d")


def _header(marker: int, length: int) -> bytes:
    if length < 15:
        return bytes((marker | length,))
    return bytes((marker | 0xF,)) + _encode_int(length)


def _encode_refs(refs: tuple[int, ...]) -> bytes:
    return b"".join(pack_uint(ref, REFERENCE_WIDTH) for ref in refs)


def _encode_data(data: bytes) -> bytes:
    return _header(MARKER_DATA, len(data)) + data


@functools.singledispatch
def encode_object(obj: Any) -> bytes:
    """Return the binary plist fragment for *obj*

    *obj* is a slot as returned by :func:`bplist.graph.flatten`: either a
    scalar or a :class:`~bplist.tree.Node`.

    >>> encode_object(True).hex()
    '09'
    >>> encode_object(256).hex()
    '110100'
    """
    logger.debug("Pickling value of type %s", type(obj).__name__)
    try:
        data = pickle.dumps(obj, protocol=PICKLE_PROTOCOL)
    except (pickle.PicklingError, TypeError, AttributeError) as e:
        # Lambdas, locks, generators...
        logger.debug(
            "Cannot pickle %s (%s), storing its repr", type(obj).__name__, e
        )
        data = repr(obj).encode("utf-8", "surrogatepass")
    return _encode_data(data)


@encode_object.register
def _encode_bool(b: bool) -> bytes:
    return bytes((MARKER_TRUE if b else MARKER_FALSE,))


@encode_object.register(int)
def _encode_int(i: int) -> bytes:
    if i < 0:
        # Two's complement, truncated by `pack_uint`
        if -i > MAX_UINT:
            raise IntegerRangeError("integer too small - exceeds 128 bits")
        width = Width.LONG if i >= MIN_LONG else Width.HUGE
    else:
        width = select_width(i)
    return bytes((MARKER_INT | width.code,)) + pack_uint(i, width)


@encode_object.register
def _encode_float(f: float) -> bytes:
    return bytes((MARKER_REAL | Width.LONG.code,)) + _DOUBLE.pack(f)


@encode_object.register
def _encode_date(d: datetime.datetime) -> bytes:
    if d.tzinfo is None:
        d = d.replace(tzinfo=datetime.timezone.utc)
    return bytes((MARKER_DATE,)) + _DOUBLE.pack(d.timestamp() - EPOCH_OFFSET)


@encode_object.register
def _encode_str(s: str) -> bytes:
    if s.isascii():
        return _header(MARKER_ASCII_STRING, len(s)) + s.encode("ascii")
    # Code points outside of the BMP are written as surrogate pairs and lone
    # surrogates are passed through.
    data = s.encode("utf-16-be", "surrogatepass")
    return _header(MARKER_UNICODE16_STRING, len(data) // 2) + data


@encode_object.register(bytes)
@encode_object.register(bytearray)
@encode_object.register(memoryview)
def _encode_bytes(data: bytes | bytearray | memoryview) -> bytes:
    return _encode_data(bytes(data))


@encode_object.register
def _encode_stream(stream: io.IOBase) -> bytes:
    if not stream.seekable():
        return _encode_data(_as_bytes(stream.read()))
    position = stream.tell()
    stream.seek(0)
    try:
        content = stream.read()
    finally:
        stream.seek(position)
    return _encode_data(_as_bytes(content))


def _as_bytes(content: str | bytes) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return bytes(content)


@encode_object.register
def _encode_array(array: tree.Array) -> bytes:
    return _header(MARKER_ARRAY, len(array)) + _encode_refs(array.refs)


@encode_object.register
def _encode_set(set_: tree.Set) -> bytes:
    return _header(MARKER_SET, len(set_)) + _encode_refs(set_.refs)


@encode_object.register
def _encode_dict(dict_: tree.Dict) -> bytes:
    return (
        _header(MARKER_DICT, len(dict_))
        + _encode_refs(dict_.keys)
        + _encode_refs(dict_.values)
    )
