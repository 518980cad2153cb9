"""Reducing the same logic over a list, a dict and a stream.

This example shows the three faces of ``reduce_any``:
- in-memory sources come back synchronously
- awaiting anything inside the reducer turns the result into a future
- streams are consumed one chunk at a time with backpressure

Run with: uv run python examples/word_lengths.py
"""

import asyncio

from coreduce import IterableProducer, reduce_any


# ============================================================================
# Reducers
# ============================================================================


def word_lengths(next):
    lengths = {}
    while pair := (yield next):
        key, word = pair
        lengths[key] = len(word)
    return lengths


def slow_word_lengths(next):
    lengths = {}
    while pair := (yield next):
        key, word = pair
        # Any future or coroutine can be awaited with a plain yield.
        word = yield asyncio.sleep(0.01, result=word)
        lengths[key] = len(word)
    return lengths


def first_long_word(next):
    while pair := (yield next):
        _index, word = pair
        if len(word) > 4:
            return word
    return None


# ============================================================================
# Runs
# ============================================================================


async def main() -> None:
    words = ["alpha", "beta", "gamma"]

    print("list  ->", reduce_any(words, word_lengths))
    print("dict  ->", reduce_any({"a": "alpha", "b": "beta"}, word_lengths))
    print("async ->", await reduce_any(words, slow_word_lengths))

    stream = IterableProducer(["one", "three", "fifteen", "two"])
    print("first long word in stream ->", await reduce_any(stream, first_long_word))
    print("stream left paused:", stream.paused)


if __name__ == "__main__":
    asyncio.run(main())
