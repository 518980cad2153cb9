"""
Suspendable computations for the reduction engine.

A reducer is a generator. ``Computation`` turns it into an explicit state
machine with three operations (``start``, ``resume_with_value`` and
``resume_with_failure``), each reporting the new state as ``Suspended`` or
``Terminated``. Exceptions escaping the generator propagate to the caller.
"""

from __future__ import annotations

import inspect
import itertools
from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from typing import Any

from coreduce.errors import NotAReducerError

_run_id_counter = itertools.count(1)


def _next_run_id() -> int:
    return next(_run_id_counter)


class Next:
    """Marker a reducer yields to request the next ``(key, element)`` pair.

    A fresh instance is created for every reduction and compared by identity
    only, so no user value can ever be mistaken for it.
    """

    __slots__ = ("run_id",)

    def __init__(self) -> None:
        self.run_id = _next_run_id()

    def __repr__(self) -> str:
        return f"<next #{self.run_id}>"


@dataclass(frozen=True)
class Suspended:
    yielded: Any


@dataclass(frozen=True)
class Terminated:
    value: Any


ComputationState = Suspended | Terminated


@dataclass
class Computation:
    generator: Generator[Any, Any, Any]
    started: bool = field(default=False, init=False)
    finished: bool = field(default=False, init=False)

    @classmethod
    def from_factory(cls, factory: Callable[[Next], Any], marker: Next) -> Computation:
        gen = factory(marker)
        if not inspect.isgenerator(gen):
            raise NotAReducerError(gen)
        return cls(gen)

    def start(self) -> ComputationState:
        """Run the generator up to its first suspension point."""
        if self.started:
            raise RuntimeError("Computation already started")
        self.started = True
        return self._advance(self.generator.send, None)

    def resume_with_value(self, value: Any) -> ComputationState:
        if not self.started:
            raise RuntimeError("Computation not started")
        return self._advance(self.generator.send, value)

    def resume_with_failure(self, error: BaseException) -> ComputationState:
        # Throwing into an unstarted generator raises at its first line.
        self.started = True
        return self._advance(self.generator.throw, error)

    def _advance(self, resume: Callable[[Any], Any], arg: Any) -> ComputationState:
        if self.finished:
            raise RuntimeError("Computation already terminated")
        try:
            yielded = resume(arg)
        except StopIteration as stop:
            self.finished = True
            return Terminated(stop.value)
        except BaseException:
            self.finished = True
            raise
        return Suspended(yielded)


__all__ = [
    "Computation",
    "ComputationState",
    "Next",
    "Suspended",
    "Terminated",
]
