"""Call-count expectations and callback sequencing."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from stubforge.runtime.errors import SequenceExhausted, VerificationFailed


@dataclass(frozen=True, slots=True)
class Times:
    """How many calls something covers (sequences) or must see (verification).

    ``maximum=None`` means unbounded.
    """

    minimum: int
    maximum: int | None

    def __post_init__(self) -> None:
        if self.minimum < 0:
            raise ValueError(f"Times cannot be negative, got {self.minimum}")
        if self.maximum is not None and self.maximum < self.minimum:
            raise ValueError(f"Upper bound {self.maximum} is below lower bound {self.minimum}")

    @classmethod
    def never(cls) -> Times:
        return cls(0, 0)

    @classmethod
    def once(cls) -> Times:
        return cls(1, 1)

    @classmethod
    def twice(cls) -> Times:
        return cls(2, 2)

    @classmethod
    def exactly(cls, count: int) -> Times:
        return cls(count, count)

    @classmethod
    def at_least(cls, count: int) -> Times:
        return cls(count, None)

    @classmethod
    def at_most(cls, count: int) -> Times:
        return cls(0, count)

    @classmethod
    def forever(cls) -> Times:
        return cls(0, None)

    @property
    def is_exact(self) -> bool:
        return self.maximum is not None and self.minimum == self.maximum

    @property
    def is_forever(self) -> bool:
        return self.minimum == 0 and self.maximum is None

    def matches(self, count: int) -> bool:
        if count < self.minimum:
            return False
        return self.maximum is None or count <= self.maximum

    def describe(self) -> str:
        if self.is_forever:
            return "any number of times"
        if self.is_exact:
            return "once" if self.minimum == 1 else f"exactly {self.minimum} time(s)"
        if self.maximum is None:
            return f"at least {self.minimum} time(s)"
        if self.minimum == 0:
            return f"at most {self.maximum} time(s)"
        return f"between {self.minimum} and {self.maximum} time(s)"


class _Step:
    __slots__ = ("callback", "times", "used")

    def __init__(self, callback: Callable[..., Any], times: Times) -> None:
        if not (times.is_exact or times.is_forever) or times.maximum == 0:
            raise ValueError(f"A sequence step must run an exact positive count or forever, got {times}")
        self.callback = callback
        self.times = times
        self.used = 0

    @property
    def remaining(self) -> int | None:
        if self.times.maximum is None:
            return None
        return self.times.maximum - self.used


class MethodSequence:
    """Ordered callbacks, each used for a fixed number of calls.

    Example::

        stub.spy.Next.on_call(lambda s: 1, Times.once()).then_call(lambda s: 2, Times.forever())
    """

    def __init__(self, member: str, callback: Callable[..., Any], times: Times) -> None:
        self._member = member
        self._steps = [_Step(callback, times)]
        self._index = 0

    def then_call(self, callback: Callable[..., Any], times: Times | None = None) -> MethodSequence:
        if self._steps[-1].times.is_forever:
            raise ValueError("Cannot add a step after one that runs forever")
        self._steps.append(_Step(callback, times or Times.once()))
        return self

    @property
    def total_call_count(self) -> int:
        return sum(step.used for step in self._steps)

    def next_callback(self) -> Callable[..., Any]:
        """Advance the sequence and return the callback for this call."""
        while self._index < len(self._steps):
            step = self._steps[self._index]
            remaining = step.remaining
            if remaining is None or remaining > 0:
                step.used += 1
                return step.callback
            self._index += 1
        raise SequenceExhausted.exhausted(self._member, self.total_call_count)

    def verify(self) -> None:
        """Every exact step must have been used to its full count."""
        for position, step in enumerate(self._steps, start=1):
            if step.times.is_exact and step.used != step.times.minimum:
                raise VerificationFailed.mismatch(
                    f"{self._member} (sequence step {position})", step.times.describe(), step.used
                )

    def reset(self) -> None:
        for step in self._steps:
            step.used = 0
        self._index = 0
