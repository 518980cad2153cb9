"""
Entry points of the reduction engine.

``reduce_any`` picks a driver from the shape of the source and returns what
the driver returns: a plain value when no step ever waited on a future and the
source is not a stream, a deferred value otherwise.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any, TypeVar

from coreduce.computation import Computation, Next
from coreduce.drivers import PullDriver, StreamDriver
from coreduce.futures import resolved
from coreduce.sources import PullSource, enumerate_source
from coreduce.streams import as_stream

T = TypeVar("T")

ReducerFactory = Callable[[Next], Generator[Any, Any, T]]


def reduce_any(source: Any, reducer: ReducerFactory[T]) -> Any:
    """Reduce ``source`` with the generator returned by ``reducer(next)``.

    The reducer yields ``next`` to receive the following ``(key, element)``
    pair, or ``None`` once the source is exhausted. Yielding a future (or a
    coroutine) suspends the reducer until it settles and sends back its result,
    or throws its exception in. Yielding anything else sends it straight back.
    The generator's return value is the result of the reduction.

    Example:
        >>> def total(next):
        ...     acc = 0
        ...     while pair := (yield next):
        ...         key, elem = pair
        ...         acc += elem
        ...     return acc
        >>> reduce_any([1, 2, 3], total)
        6

    Returns the result directly for in-memory sources whose reducer never
    awaited anything. Returns a deferred value (``asyncio.Future`` or
    ``concurrent.futures.Future``) once a future was awaited, and always for
    streams and async iterables.

    Raises:
        NotEnumerableError: ``source`` has no enumerable shape. Raised before
            ``reducer`` is called.
        NotAReducerError: ``reducer`` did not return a generator.
    """
    marker = Next()
    stream = as_stream(source)
    if stream is not None:
        computation = Computation.from_factory(reducer, marker)
        return StreamDriver(stream, computation, marker).run()

    pairs = enumerate_source(source)
    computation = Computation.from_factory(reducer, marker)
    return PullDriver(PullSource(pairs), computation, marker).run()


async def reduce_any_async(source: Any, reducer: ReducerFactory[T]) -> T:
    """Coroutine form of ``reduce_any`` that always yields the final value."""
    return await resolved(reduce_any(source, reducer))


__all__ = ["ReducerFactory", "reduce_any", "reduce_any_async"]
