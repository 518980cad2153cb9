from __future__ import annotations

from typing import Any


class CoreduceError(Exception):
    """Base class for errors raised by the reduction engine itself."""


class NotEnumerableError(CoreduceError, TypeError):
    """Raised when a source is neither an enumerable container nor a stream."""

    def __init__(self, source: Any) -> None:
        self.source = source
        super().__init__(
            f"Object of type {type(source).__name__} cannot be enumerated\n"
            "Hint: pass a sequence, mapping, iterable, dataclass instance, "
            "async iterable or Stream"
        )


class NotAReducerError(CoreduceError, TypeError):
    """Raised when a reducer factory does not return a generator."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(
            f"Reducer factory must return a generator, got {type(value).__name__}"
        )


__all__ = ["CoreduceError", "NotAReducerError", "NotEnumerableError"]
