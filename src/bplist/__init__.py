"""Write Apple binary property lists (``bplist00``)

:mod:`bplist` serialises python values to the binary plist format:

    >>> dump_bplist({"answer": 42})[:8]
    b'bplist00'

Supported types
---------------

+ :class:`str`, :class:`int`, :class:`float`, :class:`bool`: Basic python
    primitives
+ :class:`bytes`, :class:`bytearray`, :class:`memoryview` and file objects:
    stored as data
+ :class:`datetime.datetime`: naive values are taken to be UTC
+ :class:`list`, :class:`tuple`: stored as arrays
+ :class:`set`, :class:`frozenset`: stored as sets
+ :class:`dict`: stored as dictionaries
+ **shared references**: including recursive values

Anything else is pickled (or, failing that, converted with :func:`repr`) and
stored as data.

"""
from __future__ import annotations

from importlib import metadata

from ._ints import IntegerRangeError
from .graph import flatten
from .objects import encode_object
from .writer import HEADER, dump_bplist, encode

# https://packaging.python.org/en/latest/guides/single-sourcing-package-version/
__version__ = metadata.version(__name__)

__all__ = (
    "HEADER",
    "IntegerRangeError",
    "dump_bplist",
    "encode",
    "encode_object",
    "flatten",
)
