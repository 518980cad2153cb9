"""
Future detection and deferred-value plumbing.

A future is anything exposing a callable ``add_done_callback``: asyncio
futures and tasks, ``concurrent.futures.Future`` and look-alikes. Other
awaitables (coroutines) are scheduled as tasks on the running loop.

Deferred values created here are loop-bound whenever a loop is involved: an
``asyncio.Future`` on the awaited future's loop when it exposes
``get_loop()``, or on the running loop. Without either, a
``concurrent.futures.Future`` is used. Completion callbacks of a loop-bound
deferred value always run on its loop thread (see ``call_in_owner``).
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
from collections.abc import Callable
from typing import Any

Deferred = asyncio.Future | concurrent.futures.Future


def is_future(value: Any) -> bool:
    return callable(getattr(value, "add_done_callback", None))


def is_settled(future: Any) -> bool:
    """Whether ``future`` already has an outcome; look-alikes without ``done()`` never do."""
    done = getattr(future, "done", None)
    return callable(done) and bool(done())


def as_future(value: Any) -> Any | None:
    """Return ``value`` as a future, or ``None`` if it is an ordinary value."""
    if is_future(value):
        return value
    if inspect.isawaitable(value):
        loop = asyncio.get_running_loop()
        return asyncio.ensure_future(value, loop=loop)
    return None


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def new_deferred_like(future: Any) -> Deferred:
    get_loop = getattr(future, "get_loop", None)
    if callable(get_loop):
        return get_loop().create_future()
    loop = _running_loop()
    if loop is not None:
        return loop.create_future()
    return concurrent.futures.Future()


def call_in_owner(deferred: Deferred, callback: Callable[..., Any], *args: Any) -> None:
    """Run ``callback(*args)`` on the thread allowed to settle ``deferred``.

    ``concurrent.futures.Future`` runs done callbacks on whichever thread
    completes it. A loop-bound deferred value may only be touched from its
    loop, so the call is handed over with ``call_soon_threadsafe`` unless we
    are already running on that loop.
    """
    if isinstance(deferred, asyncio.Future):
        loop = deferred.get_loop()
        if _running_loop() is not loop:
            loop.call_soon_threadsafe(callback, *args)
            return
    callback(*args)


def outcome_of(future: Any) -> tuple[Any, BaseException | None]:
    """Read a completed future as a ``(value, error)`` pair."""
    try:
        return future.result(), None
    except BaseException as error:
        return None, error


def settle(deferred: Deferred, value: Any = None, error: BaseException | None = None) -> None:
    # The caller may have cancelled the deferred value already.
    if deferred.done():
        return
    if error is not None:
        deferred.set_exception(error)
    else:
        deferred.set_result(value)


async def resolved(value: Any) -> Any:
    """Await ``value`` when it is a deferred value, return it unchanged otherwise."""
    if not is_future(value):
        return value
    return await asyncio.wrap_future(value)


__all__ = [
    "Deferred",
    "as_future",
    "call_in_owner",
    "is_future",
    "is_settled",
    "new_deferred_like",
    "outcome_of",
    "resolved",
    "settle",
]
