"""
Enumeration of in-memory containers into ``(key, element)`` pairs.

Key rules, by shape:

- ``ItemsView`` (``dict.items()`` and friends): the pairs themselves
- ``Mapping``: native key, native order
- dataclass instances: field name, declaration order
- any other iterable (sequences, sets, generators): 0-based position
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from collections.abc import ItemsView, Iterable, Iterator, Mapping
from typing import Any

from coreduce.errors import NotEnumerableError

Pair = tuple[Any, Any]


class _Exhausted:
    __slots__ = ()

    def __repr__(self) -> str:
        return "EXHAUSTED"


EXHAUSTED = _Exhausted()


def _enumerate_items(items: Iterable[Any]) -> Iterator[Pair]:
    for key, elem in items:
        yield key, elem


def _enumerate_mapping(mapping: Mapping[Any, Any]) -> Iterator[Pair]:
    for key, elem in mapping.items():
        yield key, elem


def _enumerate_dataclass(instance: Any) -> Iterator[Pair]:
    for f in dataclasses.fields(instance):
        yield f.name, getattr(instance, f.name)


def _enumerate_iterable(iterable: Iterable[Any]) -> Iterator[Pair]:
    index = 0
    for elem in iterable:
        yield index, elem
        index += 1


def enumerate_source(source: Any) -> Iterator[Pair]:
    """Return a lazy iterator of ``(key, element)`` pairs over ``source``.

    Raises ``NotEnumerableError`` immediately, not on first iteration, when
    ``source`` has no enumerable shape.
    """
    if isinstance(source, ItemsView):
        return _enumerate_items(source)
    if isinstance(source, Mapping):
        return _enumerate_mapping(source)
    if dataclasses.is_dataclass(source) and not isinstance(source, type):
        return _enumerate_dataclass(source)
    if isinstance(source, Iterable):
        return _enumerate_iterable(source)
    raise NotEnumerableError(source)


class PairSource(ABC):
    """Where a driver gets its next pair from.

    ``pull`` returns the next pair or ``EXHAUSTED``; push sources return an
    awaitable of either. ``pause`` and ``resume`` bracket the time the engine
    is busy with a pair. They are no-ops for synchronous sources.
    """

    @abstractmethod
    def pull(self) -> Any: ...

    def pause(self) -> None:
        return None

    def resume(self) -> None:
        return None


class PullSource(PairSource):
    def __init__(self, pairs: Iterator[Pair]) -> None:
        self._pairs = pairs
        self._exhausted = False

    def pull(self) -> Pair | _Exhausted:
        if self._exhausted:
            return EXHAUSTED
        try:
            return next(self._pairs)
        except StopIteration:
            self._exhausted = True
            return EXHAUSTED


__all__ = [
    "EXHAUSTED",
    "Pair",
    "PairSource",
    "PullSource",
    "enumerate_source",
]
