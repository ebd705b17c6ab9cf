"""``bplist.writer``: Binary plist assembly
========================================

Put the encoded objects together with the header, offset table and trailer.

    >>> dump_bplist([1, 2, 3])[:8]
    b'bplist00'
"""
from __future__ import annotations

import logging
import struct
from typing import Any, Final

from bplist._ints import pack_uint, select_width
from bplist.graph import flatten
from bplist.objects import REFERENCE_WIDTH, encode_object

__all__ = ("dump_bplist", "encode", "HEADER")

logger = logging.getLogger(__name__)

HEADER: Final = b"bplist00"

#: Index of the root object, the flattener always puts it first
ROOT_INDEX: Final = 0

# Six unused bytes, offset width, reference width, number of objects, root
# object, offset table address
TRAILER: Final = struct.Struct(">6xBBQQQ")


def dump_bplist(obj: Any) -> bytes:
    """Serialise *obj* to a binary plist

    Containers (``list``, ``tuple``, ``set``, ``frozenset`` and ``dict``) are
    written with their contents. Shared and recursive values are supported:
    every distinct object is written once.

    Raises:
      IntegerRangeError: if an integer in *obj* doesn't fit in the format
    """
    buf = bytearray(HEADER)
    offsets: list[int] = []
    for slot in flatten(obj):
        offsets.append(len(buf))
        buf += encode_object(slot)

    table_addr = len(buf)
    offset_width = select_width(max(*offsets, table_addr))
    for offset in offsets:
        buf += pack_uint(offset, offset_width)

    buf += TRAILER.pack(
        offset_width,
        REFERENCE_WIDTH,
        len(offsets),
        ROOT_INDEX,
        table_addr,
    )
    logger.debug(
        "Wrote %d objects in %d bytes (offset width: %d)",
        len(offsets),
        len(buf),
        offset_width,
    )
    return bytes(buf)


encode = dump_bplist
