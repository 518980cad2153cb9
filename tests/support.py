"""
Reducers, sources and producers shared by the coreduce tests.
"""

import time
from collections.abc import Iterable, Iterator
from typing import Any

from coreduce import Producer


class Boom(Exception):
    """Error raised on purpose by test reducers and futures."""


def list_iterations(next):
    """Collect ``(key, value)`` pairs, awaiting values that are futures."""
    result = []
    while pair := (yield next):
        key, value = pair
        result.append((key, (yield value)))
    return result


def upper_chunks(next):
    result = []
    while pair := (yield next):
        _index, chunk = pair
        result.append(chunk.upper())
    return result


class GuardedIterable:
    """Iterable that fails the test when read past ``limit`` items."""

    def __init__(self, items: Iterable[Any], limit: int) -> None:
        self.items = list(items)
        self.limit = limit
        self.visited: list[int] = []

    def __iter__(self) -> Iterator[Any]:
        for position, item in enumerate(self.items):
            assert position < self.limit, f"source read past position {self.limit - 1}"
            self.visited.append(position)
            yield item


class ManualProducer(Producer):
    """Producer pushed by hand from the test, recording every interaction."""

    def __init__(self) -> None:
        super().__init__()
        self.log: list[Any] = []

    def pause(self) -> Producer:
        self.log.append("pause")
        return super().pause()

    def resume(self) -> Producer:
        self.log.append("resume")
        return super().resume()

    def push(self, chunk: Any) -> None:
        self.log.append(("data", chunk))
        self.emit("data", chunk)

    def end(self) -> None:
        self.log.append("end")
        self.emit("end")

    def fail(self, error: BaseException) -> None:
        self.log.append("error")
        self.emit("error", error)


def slow_upper(text: str) -> str:
    """Thread-pool work that finishes well after the caller moved on."""
    time.sleep(0.05)
    return text.upper()


def counting(items: Iterable[Any], drawn: list[Any]) -> Iterator[Any]:
    for item in items:
        drawn.append(item)
        yield item

