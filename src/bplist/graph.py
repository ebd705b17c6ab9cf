"""``bplist.graph``: Object graph flattening
========================================

A binary plist stores every object in a flat table and containers refer to
their elements by index in that table. :func:`flatten` computes that table.

Objects are deduplicated on identity, not on equality::

    >>> e = []
    >>> flatten([e, e, []])
    [Array(refs=(1, 1, 2)), Array(refs=()), Array(refs=())]

Recursive values are supported::

    >>> r = []
    >>> r.append(r)
    >>> flatten(r)
    [Array(refs=(0,))]

Note that CPython shares some immutable values (small integers, some strings,
``True``...) so those end up in the same slot even when written separately::

    >>> flatten([1, 2, 1])
    [Array(refs=(1, 2, 1)), 1, 2]

"""
from __future__ import annotations

from typing import Any, Iterable, Iterator

from bplist import tree

__all__ = ("flatten",)

MISSING = object()


def flatten(obj: Any) -> list[tree.Slot]:
    """Flatten *obj* into a list of slots, *obj* itself being in slot ``0``.

    Scalars are stored as is, ``list`` and ``tuple`` become
    :class:`~bplist.tree.Array`, ``set`` and ``frozenset`` become
    :class:`~bplist.tree.Set` and ``dict`` become
    :class:`~bplist.tree.Dict`. *obj* is not modified.
    """
    slots: list[tree.Slot] = []
    # id -> slot index
    memo: dict[int, int] = {}
    # Since we rely on `id` to detect duplicates we have to hold on to all the
    # values we register: containers may hand out transient elements.
    keep_alive: list[Any] = []

    def _register(v: Any, slot: tree.Slot) -> int:
        index = len(slots)
        memo[id(v)] = index
        keep_alive.append(v)
        slots.append(slot)
        return index

    def _reduce_all(values: Iterable[Any]) -> tuple[int, ...]:
        return tuple(reduce(v) for v in values)

    def _reduce_items(items: Iterable[tuple[Any, Any]]) -> Iterator[int]:
        for key, value in items:
            # Keys get their slot before their value
            yield reduce(key)
            yield reduce(value)

    def reduce(v: Any) -> int:
        index = memo.get(id(v), MISSING)
        if isinstance(index, int):
            return index
        match v:
            case list() | tuple():
                index = _register(v, MISSING)
                slots[index] = tree.Array(_reduce_all(v))
            case set() | frozenset():
                index = _register(v, MISSING)
                slots[index] = tree.Set(_reduce_all(v))
            case dict():
                index = _register(v, MISSING)
                refs = tuple(_reduce_items(v.items()))
                slots[index] = tree.Dict(refs[0::2], refs[1::2])
            case _:
                index = _register(v, v)
        return index

    reduce(obj)
    return slots
