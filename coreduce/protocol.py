"""
The step protocol: one resumption of a reducer and the decision that follows.

``step`` resumes a ``Computation`` and keeps resuming it for as long as the
reducer yields plain values, which are handed straight back. Futures that are
already settled are read in the same loop. It stops when the reducer
terminates (``Done``), asks for a pair (``NEEDS_PAIR``) or yields a pending
future. In the last case the remaining steps run from the future's completion
callback. Once any future was awaited, ``step`` returns a deferred value of
the outcome instead of the outcome itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Any

from loguru import logger

from coreduce import config
from coreduce.computation import Computation, Next, Terminated
from coreduce.futures import (
    Deferred,
    as_future,
    call_in_owner,
    is_future,
    is_settled,
    new_deferred_like,
    outcome_of,
    settle,
)

log = logger.bind(component="step")


@dataclass(frozen=True)
class Done:
    value: Any


class NeedsPair:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NEEDS_PAIR"


NEEDS_PAIR = NeedsPair()

StepOutcome = Done | NeedsPair


def step(
    computation: Computation,
    marker: Next,
    value: Any = None,
    error: BaseException | None = None,
) -> Any:
    """Resume ``computation`` once and run it to its next decision point.

    Returns a ``StepOutcome``, or a deferred value settling with one when the
    reducer yielded a future along the way. Exceptions raised by the reducer
    propagate to the caller until a future has been awaited, and reject the
    deferred value from then on.
    """
    return _step(computation, marker, value, error, None)


def _step(
    computation: Computation,
    marker: Next,
    value: Any,
    error: BaseException | None,
    deferred: Deferred | None,
) -> Any:
    while True:
        try:
            outcome = _resume_until_decision(computation, marker, value, error)
        except BaseException as exc:
            if deferred is None:
                raise
            settle(deferred, error=exc)
            return deferred

        if not is_future(outcome):
            if deferred is None:
                return outcome
            settle(deferred, outcome)
            return deferred

        # Consecutive awaits within one step share a single deferred value.
        if deferred is None:
            deferred = new_deferred_like(outcome)
        if not is_settled(outcome):
            outcome.add_done_callback(partial(_on_future_done, computation, marker, deferred))
            return deferred
        value, error = outcome_of(outcome)


def _resume_until_decision(
    computation: Computation,
    marker: Next,
    value: Any,
    error: BaseException | None,
) -> Any:
    """Resume until the reducer terminates, asks for a pair or yields a future."""
    while True:
        if error is not None:
            state = computation.resume_with_failure(error)
            error = None
        elif not computation.started:
            state = computation.start()
        else:
            state = computation.resume_with_value(value)

        if isinstance(state, Terminated):
            if config.DEBUG_STEPS:
                log.debug("{} terminated with {!r}", marker, state.value)
            return Done(state.value)

        yielded = state.yielded
        if yielded is marker:
            return NEEDS_PAIR

        future = as_future(yielded)
        if future is None:
            value = yielded
            continue

        if config.DEBUG_STEPS:
            log.debug("{} awaiting {!r}", marker, future)
        return future


def _on_future_done(computation: Computation, marker: Next, deferred: Deferred, done: Any) -> None:
    call_in_owner(deferred, _continue_after, computation, marker, deferred, done)


def _continue_after(computation: Computation, marker: Next, deferred: Deferred, done: Any) -> None:
    value, error = outcome_of(done)
    _step(computation, marker, value, error, deferred)


__all__ = ["Done", "NEEDS_PAIR", "NeedsPair", "StepOutcome", "step"]
