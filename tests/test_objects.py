from __future__ import annotations

import datetime
import enum
import io
import logging
import pickle
import threading

import pytest

from bplist import objects, tree
from bplist._ints import IntegerRangeError
from bplist.objects import encode_object

from .bplist_utils import Point

UTC = datetime.timezone.utc


class Color(enum.IntEnum):
    RED = 1
    BLUE = 300


class Name(str):
    pass


@pytest.mark.parametrize(
    ("value", "expected"),
    (
        (False, "08"),
        (True, "09"),
        (0, "1000"),
        (255, "10ff"),
        (256, "110100"),
        (0xFFFF, "11ffff"),
        (65536, "1200010000"),
        (2**32, "130000000100000000"),
        (2**64 - 1, "13ffffffffffffffff"),
        (2**64, "14" + "0000000000000001" + "0000000000000000"),
        (2**128 - 1, "14" + "ff" * 16),
        (-1, "13ffffffffffffffff"),
        (-(2**63), "138000000000000000"),
        (-(2**63) - 1, "14" + "ff" * 8 + "7f" + "ff" * 7),
        (-(2**64), "14" + "ff" * 8 + "00" * 8),
        (-(2**128 - 1), "14" + "00" * 15 + "01"),
        (Color.BLUE, "11012c"),
        (1.0, "233ff0000000000000"),
        (-2.5, "23c004000000000000"),
        ("", "50"),
        ("plist", "55706c697374"),
        (Name("ab"), "526162"),
        ("é", "6100e9"),
        ("日本", "6265e5672c"),
        ("\U0001f600", "62d83dde00"),
        ("\ud800", "61d800"),
        (b"", "40"),
        (b"\x00\xff", "4200ff"),
        (bytearray(b"ab"), "426162"),
        (memoryview(b"ab"), "426162"),
    ),
)
def test_scalars(value, expected):
    assert encode_object(value).hex() == expected


@pytest.mark.parametrize("value", (2**128, -(2**128), 2**1000, -(2**1000)))
def test_int_out_of_range(value):
    with pytest.raises(IntegerRangeError):
        encode_object(value)


def test_long_lengths():
    assert encode_object("a" * 14).hex() == "5e" + "61" * 14
    assert encode_object("a" * 15).hex() == "5f100f" + "61" * 15
    assert encode_object("a" * 300).hex() == "5f11012c" + "61" * 300
    assert encode_object("é" * 15).hex() == "6f100f" + "00e9" * 15
    assert encode_object(b"x" * 14).hex() == "4e" + "78" * 14
    assert encode_object(b"x" * 15).hex() == "4f100f" + "78" * 15
    assert encode_object(b"x" * 16).hex() == "4f1010" + "78" * 16


def test_surrogate_pairs_count_as_two_units():
    encoded = encode_object("\U0001f600" * 8)
    assert encoded[:3].hex() == "6f1010"
    assert encoded[3:] == ("\U0001f600" * 8).encode("utf-16-be")


def test_dates():
    reference = datetime.datetime(2001, 1, 1, tzinfo=UTC)
    assert encode_object(reference).hex() == "33" + "00" * 8
    # Naive dates are UTC
    naive = datetime.datetime(2001, 1, 1)
    assert encode_object(naive).hex() == "33" + "00" * 8
    paris = datetime.timezone(datetime.timedelta(hours=1))
    assert encode_object(datetime.datetime(2001, 1, 1, 1, tzinfo=paris)) == (
        encode_object(reference)
    )
    # One day later
    assert encode_object(datetime.datetime(2001, 1, 2)).hex() == (
        "33" + "40f5180000000000"
    )
    assert encode_object(datetime.datetime(1970, 1, 1, tzinfo=UTC)) == (
        b"\x33" + objects._DOUBLE.pack(-objects.EPOCH_OFFSET)
    )


def test_containers():
    assert encode_object(tree.Array(())).hex() == "a0"
    assert encode_object(tree.Array((1, 2, 3))).hex() == (
        "a3" + "00000001" + "00000002" + "00000003"
    )
    assert encode_object(tree.Array((70000,))).hex() == "a100011170"
    assert encode_object(tree.Set((4, 5))).hex() == (
        "c2" + "00000004" + "00000005"
    )
    assert encode_object(tree.Dict((1, 3), (2, 4))).hex() == (
        "d2" + "00000001" + "00000003" + "00000002" + "00000004"
    )


def test_long_containers():
    refs = tuple(range(15))
    encoded = encode_object(tree.Array(refs))
    assert encoded[:3].hex() == "af100f"
    assert len(encoded) == 3 + 4 * 15

    encoded = encode_object(tree.Dict(refs, refs))
    assert encoded[:3].hex() == "df100f"
    assert len(encoded) == 3 + 8 * 15


def test_streams():
    stream = io.BytesIO(b"hello")
    stream.read()
    assert encode_object(stream).hex() == "4568656c6c6f"
    # The position of the stream is preserved
    assert stream.tell() == 5

    text = io.StringIO("é")
    assert encode_object(text).hex() == "42c3a9"


def test_pickle_fallback():
    point = Point(1, "two")
    encoded = encode_object(point)
    payload = pickle.dumps(point, protocol=objects.PICKLE_PROTOCOL)
    assert encoded[0] & 0xF0 == objects.MARKER_DATA
    assert encoded.endswith(payload)
    assert pickle.loads(encoded[-len(payload) :]) == point


@pytest.mark.parametrize(
    "value",
    (None, datetime.date(2020, 1, 1), complex(1, 2), [1, 2]),
)
def test_everything_is_encodable(value):
    encoded = encode_object(value)
    payload = pickle.dumps(value, protocol=objects.PICKLE_PROTOCOL)
    assert encoded[0] & 0xF0 == objects.MARKER_DATA
    assert pickle.loads(encoded[-len(payload) :]) == value


def test_pickle_fallback_is_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="bplist.objects"):
        encode_object(Point(0, 0))
    assert "Pickling value of type Point" in caplog.text


def _unpicklable():
    return lambda: 0


@pytest.mark.parametrize(
    "value", (_unpicklable(), threading.Lock(), (x for x in ()), io)
)
def test_unpicklable_values_are_stored_as_repr(value):
    expected = repr(value).encode("utf-8")
    encoded = encode_object(value)
    assert encoded[0] & 0xF0 == objects.MARKER_DATA
    assert encoded.endswith(expected)
    assert len(encoded) == len(expected) + (1 if len(expected) < 15 else 3)


def test_repr_fallback_is_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="bplist.objects"):
        encode_object(threading.Lock())
    assert "Cannot pickle lock" in caplog.text
