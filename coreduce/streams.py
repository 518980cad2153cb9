"""
Push-based sources.

A stream is anything with ``on(event, listener)``, ``pause()`` and
``resume()``, emitting ``"data"`` (one chunk per call), ``"error"`` (one
exception) and ``"end"`` (no arguments). ``Producer`` is a small event
emitter implementing that contract. ``IterableProducer`` and
``AsyncIteratorProducer`` are ready-made producers over iterables and async
iterables.

``StreamSource`` is the engine side: it applies backpressure by pausing the
producer on every chunk and hands chunks out one ``pull`` at a time.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterable, Callable, Iterable
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from coreduce import config
from coreduce.sources import EXHAUSTED, PairSource

log = logger.bind(component="streams")

Listener = Callable[..., Any]


@runtime_checkable
class Stream(Protocol):
    def on(self, event: str, listener: Listener) -> Any: ...

    def pause(self) -> Any: ...

    def resume(self) -> Any: ...


class Producer:
    """Minimal event emitter with a paused flag."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._paused = False

    @property
    def paused(self) -> bool:
        return self._paused

    def on(self, event: str, listener: Listener) -> Producer:
        self._listeners[event].append(listener)
        return self

    def remove_listener(self, event: str, listener: Listener) -> Producer:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)
        return self

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str, *args: Any) -> bool:
        listeners = list(self._listeners.get(event, ()))
        for listener in listeners:
            listener(*args)
        return bool(listeners)

    def pause(self) -> Producer:
        self._paused = True
        return self

    def resume(self) -> Producer:
        self._paused = False
        return self


class IterableProducer(Producer):
    """Push the items of an iterable, one per event-loop iteration.

    Flowing starts when the first ``"data"`` listener is attached. While
    paused nothing is pushed. ``"end"`` follows the last item.
    """

    def __init__(self, items: Iterable[Any]) -> None:
        super().__init__()
        self._items = iter(items)
        self._scheduled = False
        self._ended = False

    def on(self, event: str, listener: Listener) -> Producer:
        super().on(event, listener)
        if event == "data":
            self._schedule()
        return self

    def resume(self) -> Producer:
        super().resume()
        self._schedule()
        return self

    def _schedule(self) -> None:
        if self._scheduled or self._ended or self._paused:
            return
        self._scheduled = True
        asyncio.get_running_loop().call_soon(self._push)

    def _push(self) -> None:
        self._scheduled = False
        if self._ended or self._paused:
            return
        try:
            item = next(self._items)
        except StopIteration:
            self._ended = True
            self.emit("end")
            return
        except Exception as error:
            self._ended = True
            self.emit("error", error)
            return
        self.emit("data", item)
        self._schedule()


class AsyncIteratorProducer(Producer):
    """Adapt an async iterable to the stream contract.

    The iterator is only advanced while the producer is flowing. When the
    last ``"data"`` listener is removed the pumping task is cancelled; the
    iterator itself is left as is.
    """

    def __init__(self, aiterable: AsyncIterable[Any]) -> None:
        super().__init__()
        self._aiterable = aiterable
        self._flowing = asyncio.Event()
        self._flowing.set()
        self._task: asyncio.Task[None] | None = None

    def on(self, event: str, listener: Listener) -> Producer:
        super().on(event, listener)
        if event == "data" and self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self

    def remove_listener(self, event: str, listener: Listener) -> Producer:
        super().remove_listener(event, listener)
        if event == "data" and self.listener_count("data") == 0 and self._task is not None:
            self._task.cancel()
        return self

    def pause(self) -> Producer:
        super().pause()
        self._flowing.clear()
        return self

    def resume(self) -> Producer:
        super().resume()
        self._flowing.set()
        return self

    async def _run(self) -> None:
        iterator = aiter(self._aiterable)
        while True:
            await self._flowing.wait()
            try:
                chunk = await anext(iterator)
            except StopAsyncIteration:
                self.emit("end")
                return
            except Exception as error:
                self.emit("error", error)
                return
            self.emit("data", chunk)


def as_stream(source: Any) -> Any | None:
    """Return ``source`` as a stream, or ``None`` if it is not push-based."""
    if isinstance(source, Stream):
        return source
    if isinstance(source, AsyncIterable):
        return AsyncIteratorProducer(source)
    return None


class StreamSource(PairSource):
    """Pair source over a stream, delivering ``(index, chunk)`` pairs.

    Every ``"data"`` event pauses the stream before the chunk is queued. The
    stream is resumed only once the reducer has asked for the next pair and
    no chunk is already waiting. ``index`` counts consumed chunks
    from 0.
    """

    def __init__(self, stream: Any, on_error: Callable[[BaseException], Any]) -> None:
        self._stream = stream
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._index = 0
        self._ended = False
        self._detached = False
        self._listeners: dict[str, Listener] = {
            "data": self._on_data,
            "error": self._on_error,
            "end": self._on_end,
        }
        self._error_callback = on_error

    @property
    def index(self) -> int:
        return self._index

    def attach(self) -> None:
        for event, listener in self._listeners.items():
            self._stream.on(event, listener)

    def detach(self) -> None:
        """Stop listening. Later events are ignored and the stream stays paused."""
        self._detached = True
        remove = getattr(self._stream, "remove_listener", None)
        if not callable(remove):
            return
        for event, listener in self._listeners.items():
            remove(event, listener)

    def pause(self) -> None:
        if config.DEBUG_STEPS:
            log.debug("pause at index {}", self._index)
        self._stream.pause()

    def resume(self) -> None:
        # A chunk already waiting is delivered first.
        if self._ended or not self._queue.empty():
            return
        if config.DEBUG_STEPS:
            log.debug("resume at index {}", self._index)
        self._stream.resume()

    async def pull(self) -> Any:
        if self._ended:
            return EXHAUSTED
        chunk = await self._queue.get()
        if chunk is EXHAUSTED:
            self._ended = True
            return EXHAUSTED
        pair = (self._index, chunk)
        self._index += 1
        return pair

    def _on_data(self, chunk: Any) -> None:
        if self._detached:
            return
        self.pause()
        self._queue.put_nowait(chunk)

    def _on_end(self) -> None:
        if self._detached:
            return
        self._queue.put_nowait(EXHAUSTED)

    def _on_error(self, error: BaseException) -> None:
        if self._detached:
            return
        self._error_callback(error)


__all__ = [
    "AsyncIteratorProducer",
    "IterableProducer",
    "Producer",
    "Stream",
    "StreamSource",
    "as_stream",
]
