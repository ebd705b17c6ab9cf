"""
Integer packing helpers
=======================

Every integer that ends up in a binary plist (integer objects, lengths,
object references, offsets) is written big-endian in one of a closed set of
widths. This module owns that set.
"""
from __future__ import annotations

import enum
from typing import Final

__all__ = (
    "Width",
    "IntegerRangeError",
    "InvalidWidthError",
    "select_width",
    "pack_uint",
)

MAX_UINT: Final = 2**128 - 1


class IntegerRangeError(OverflowError, ValueError):
    """An integer cannot be represented in a binary plist."""


class InvalidWidthError(AssertionError):
    """Internal error: a value was packed at an unsupported width."""


@enum.unique
class Width(enum.IntEnum):
    """The byte widths integers can be stored at.

    >>> Width.LONG.code
    3
    """

    BYTE = 1
    SHORT = 2
    INT = 4
    LONG = 8
    HUGE = 16

    @property
    def code(self) -> int:
        "The value stored in the low bits of an integer marker"
        return self.bit_length() - 1


WIDTHS: Final = frozenset(Width)


def select_width(value: int) -> Width:
    """Return the narrowest :class:`Width` that can hold *value* (unsigned)

    >>> select_width(255)
    <Width.BYTE: 1>
    >>> select_width(256)
    <Width.SHORT: 2>
    """
    if value < 0:
        raise IntegerRangeError(f"negative value {value} has no unsigned width")
    if value > MAX_UINT:
        raise IntegerRangeError("integer too big - exceeds 128 bits")
    return next(width for width in Width if value < 1 << (8 * width))


def pack_uint(value: int, width: int) -> bytes:
    """Write *value* big-endian on *width* bytes.

    The value is truncated to the width, negative values therefore come out in
    two's complement:

    >>> pack_uint(256, Width.SHORT).hex()
    '0100'
    >>> pack_uint(-1, Width.LONG).hex()
    'ffffffffffffffff'
    """
    if width not in WIDTHS:
        raise InvalidWidthError(f"width must be 1, 2, 4, 8, or 16: {width}")
    mask = (1 << (8 * width)) - 1
    return (value & mask).to_bytes(width, "big")
