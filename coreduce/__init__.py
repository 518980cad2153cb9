"""
coreduce - reduce anything with a generator, synchronously when possible.

Drives a reducer generator over sequences, mappings, pair views, dataclass
instances, iterables, async iterables and push streams. The reducer yields
``next`` to receive ``(key, element)`` pairs and yields futures to await
them, co-routine style. No future awaited and no stream involved means the
result comes back as a plain value; otherwise it comes back as a future.

Example:
    >>> from coreduce import reduce_any
    >>>
    >>> def list_pairs(next):
    ...     result = []
    ...     while pair := (yield next):
    ...         key, value = pair
    ...         result.append((key, (yield value)))
    ...     return result
    >>>
    >>> reduce_any(["one", "two"], list_pairs)
    [(0, 'one'), (1, 'two')]
"""

from coreduce.computation import Computation, Next, Suspended, Terminated
from coreduce.errors import CoreduceError, NotAReducerError, NotEnumerableError
from coreduce.protocol import NEEDS_PAIR, Done, NeedsPair, step
from coreduce.reduce import ReducerFactory, reduce_any, reduce_any_async
from coreduce.sources import enumerate_source
from coreduce.streams import AsyncIteratorProducer, IterableProducer, Producer, Stream

__version__ = "0.1.0"

__all__ = [  # noqa: RUF022
    # Entry points
    "reduce_any",
    "reduce_any_async",
    "enumerate_source",
    "ReducerFactory",
    # Streams
    "Stream",
    "Producer",
    "IterableProducer",
    "AsyncIteratorProducer",
    # Step protocol
    "step",
    "Done",
    "NeedsPair",
    "NEEDS_PAIR",
    "Computation",
    "Next",
    "Suspended",
    "Terminated",
    # Errors
    "CoreduceError",
    "NotAReducerError",
    "NotEnumerableError",
]
