"""
Drivers pumping the step protocol against a pair source.

``PullDriver`` works on synchronous sources and stays synchronous until the
reducer first yields a future. From then on the driver hands back a deferred
value. Steps that settle immediately are still consumed in its loop, and only
a pending step moves the rest of the reduction into a completion callback.

``StreamDriver`` works on push sources. It always returns an
``asyncio.Future`` and serializes every step through a single pump task.
"""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from coreduce import config
from coreduce.computation import Computation, Next
from coreduce.futures import (
    Deferred,
    is_future,
    is_settled,
    new_deferred_like,
    outcome_of,
    resolved,
    settle,
)
from coreduce.protocol import Done, step
from coreduce.sources import EXHAUSTED, PairSource
from coreduce.streams import StreamSource

log = logger.bind(component="drivers")

# Exhaustion is reported with None at most this many times: once when the
# source runs dry, then one final step.
EXHAUSTION_STEPS = 2


class _Driver:
    def __init__(self, source: PairSource, computation: Computation, marker: Next) -> None:
        self.source = source
        self.computation = computation
        self.marker = marker
        self._exhaustion_steps = 0

    def _request(self) -> Any:
        """The reducer asked for a pair: let the source deliver one."""
        self.source.resume()
        return self.source.pull()

    def _step_after(self, pair: Any) -> Any:
        """Resume the reducer with ``pair``, or with ``None`` once exhausted.

        A reducer still asking for pairs after the final exhaustion step ends
        the reduction with ``None``.
        """
        if pair is not EXHAUSTED:
            return step(self.computation, self.marker, pair)

        if self._exhaustion_steps >= EXHAUSTION_STEPS:
            log.warning(
                "{} kept requesting pairs after the source was exhausted; "
                "reduction result is None",
                self.marker,
            )
            return Done(None)
        self._exhaustion_steps += 1
        if config.DEBUG_STEPS:
            log.debug("{} source exhausted (step {})", self.marker, self._exhaustion_steps)
        return step(self.computation, self.marker, None)


class PullDriver(_Driver):
    def __init__(self, source: PairSource, computation: Computation, marker: Next) -> None:
        super().__init__(source, computation, marker)
        self._deferred: Deferred | None = None

    def run(self) -> Any:
        return self._advance(step(self.computation, self.marker))

    def _advance(self, outcome: Any) -> Any:
        try:
            while True:
                if is_future(outcome):
                    # One deferred value per run, created by the first future.
                    if self._deferred is None:
                        self._deferred = new_deferred_like(outcome)
                    if not is_settled(outcome):
                        outcome.add_done_callback(self._advance)
                        return self._deferred
                    outcome, error = outcome_of(outcome)
                    if error is not None:
                        return self._finish(error=error)
                elif isinstance(outcome, Done):
                    return self._finish(outcome.value)
                else:
                    outcome = self._step_after(self._request())
        except BaseException as error:
            if self._deferred is None:
                raise
            return self._finish(error=error)

    def _finish(self, value: Any = None, error: BaseException | None = None) -> Any:
        if self._deferred is None:
            return value
        settle(self._deferred, value, error)
        return self._deferred


class StreamDriver(_Driver):
    source: StreamSource

    def __init__(self, stream: Any, computation: Computation, marker: Next) -> None:
        super().__init__(StreamSource(stream, self._on_error), computation, marker)
        self._loop = asyncio.get_running_loop()
        self._result: asyncio.Future[Any] = self._loop.create_future()
        self._pump: asyncio.Task[Any] | None = None

    def run(self) -> asyncio.Future[Any]:
        self.source.attach()
        self._pump = self._loop.create_task(self._drive())
        self._pump.add_done_callback(self._on_pump_done)
        self._result.add_done_callback(self._on_result_done)
        return self._result

    async def _drive(self) -> Any:
        outcome = await resolved(step(self.computation, self.marker))
        while not isinstance(outcome, Done):
            pair = await self._request()
            outcome = await resolved(self._step_after(pair))
        return outcome.value

    def _on_pump_done(self, pump: asyncio.Task[Any]) -> None:
        if pump.cancelled():
            self._result.cancel()
            return
        error = pump.exception()
        if self._result.done():
            return
        if error is not None:
            self._result.set_exception(error)
        else:
            self._result.set_result(pump.result())

    def _on_error(self, error: BaseException) -> None:
        if config.DEBUG_STEPS:
            log.debug("{} producer error {!r}", self.marker, error)
        if not self._result.done():
            self._result.set_exception(error)

    def _on_result_done(self, _result: asyncio.Future[Any]) -> None:
        self.source.detach()
        if self._pump is not None and not self._pump.done():
            self._pump.cancel()


__all__ = ["EXHAUSTION_STEPS", "PullDriver", "StreamDriver"]
