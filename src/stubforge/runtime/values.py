"""Sentinel and deferred-result helpers used by generated code."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class Completed(Generic[T]):
    """An already-resolved awaitable. May be awaited any number of times."""

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    @property
    def result(self) -> T:
        return self._value

    def __await__(self) -> Generator[Any, None, T]:
        yield from ()
        return self._value

    def __repr__(self) -> str:
        return f"completed({self._value!r})"


def completed(value: T = None) -> Completed[T]:  # type: ignore[assignment]
    return Completed(value)
