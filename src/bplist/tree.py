"""``bplist.tree``: Flattened containers
=====================================

Once a value has been flattened, containers no longer hold their elements:
they hold the indices of the slots their elements were assigned. These are the
nodes used for that.

    >>> from bplist.graph import flatten
    >>> flatten({"key": ["value"]})
    [Dict(keys=(1,), values=(2,)), 'key', Array(refs=(3,)), 'value']

"""
from __future__ import annotations

import dataclasses
from typing import Any, TypeAlias

__all__ = ("Array", "Set", "Dict", "Node", "Slot")


@dataclasses.dataclass(slots=True, frozen=True)
class Array:
    """An ordered sequence of slot indices.

    Parameters:
      refs(tuple[int, ...]):
    """

    refs: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.refs)


@dataclasses.dataclass(slots=True, frozen=True)
class Set:
    """An unordered collection of slot indices.

    The order of *refs* is the order in which the set was iterated when it was
    flattened.

    Parameters:
      refs(tuple[int, ...]):
    """

    refs: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.refs)


@dataclasses.dataclass(slots=True, frozen=True)
class Dict:
    """A mapping stored as two parallel sequences of slot indices.

    Parameters:
      keys(tuple[int, ...]):
      values(tuple[int, ...]):
    """

    keys: tuple[int, ...]
    values: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.keys) != len(self.values):
            raise ValueError("keys and values must have the same length")

    def __len__(self) -> int:
        return len(self.keys)


Node: TypeAlias = Array | Set | Dict

# Either a node or the scalar value itself
Slot: TypeAlias = Any
