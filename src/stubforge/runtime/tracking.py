"""Interceptor base classes.

Generated interceptor classes subclass these and add the dispatch body for
their member. Bases own the tracking state, callback slots and reset
operations; author overrides are class attributes on the generated
subclass, so they are shared by every instance of the double.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, ClassVar

from stubforge.runtime.errors import UnconfiguredAccess, VerificationFailed
from stubforge.runtime.times import MethodSequence, Times
from stubforge.runtime.values import UNSET


class Interceptor:
    """Common state: the owning double and what member this tracks."""

    member: ClassVar[str] = ""
    surface: ClassVar[str] = ""
    override_slots: ClassVar[tuple[str, ...]] = ()

    def __init__(self, owner: Any) -> None:
        self.owner = owner

    @property
    def display_name(self) -> str:
        return f"{self.surface}.{self.member}" if self.surface else self.member

    def unconfigured(self, accessor: str | None = None) -> UnconfiguredAccess:
        return UnconfiguredAccess.not_configured(self.surface, self.member, accessor)

    def reset_tracking(self) -> None:
        raise NotImplementedError

    def reset_callback(self) -> None:
        raise NotImplementedError

    def reset(self) -> None:
        self.reset_tracking()
        self.reset_callback()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.display_name}>"


class MethodInterceptor(Interceptor):
    """Tracks calls to one method (or one overload, or one type-argument combination)."""

    override: ClassVar[Callable[..., Any] | None] = None
    override_slots = ("override",)

    def __init__(self, owner: Any, type_arguments: tuple[Any, ...] = ()) -> None:
        super().__init__(owner)
        self.type_arguments = type_arguments
        self.calls: list[Any] = []
        self._callback: Callable[..., Any] | None = None
        self._sequence: MethodSequence | None = None

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def was_called(self) -> bool:
        return bool(self.calls)

    @property
    def last_call_args(self) -> Any:
        """Last tracked argument, or the argument record when there are several."""
        return self.calls[-1] if self.calls else None

    @property
    def last_call_arg(self) -> Any:
        return self.last_call_args

    @property
    def on_call_set(self) -> bool:
        return self._callback is not None or self._sequence is not None

    def on_call(
        self, callback: Callable[..., Any], times: Times | None = None
    ) -> MethodSequence | None:
        """Set the runtime callback. With ``times``, start a callback sequence."""
        if times is None:
            self._callback = callback
            self._sequence = None
            return None
        self._callback = None
        self._sequence = MethodSequence(self.display_name, callback, times)
        return self._sequence

    def _record(self, arguments: Any) -> None:
        self.calls.append(arguments)

    def _next_callback(self) -> Callable[..., Any] | None:
        if self._sequence is not None:
            return self._sequence.next_callback()
        return self._callback

    def verify(self, times: Times | None = None) -> None:
        """Check the call count; with no argument, check the callback sequence."""
        if times is None:
            if self._sequence is not None:
                self._sequence.verify()
            return
        if not times.matches(self.call_count):
            raise VerificationFailed.mismatch(self.display_name, times.describe(), self.call_count)

    def reset_tracking(self) -> None:
        self.calls.clear()

    def reset_callback(self) -> None:
        self._callback = None
        self._sequence = None


class PropertyInterceptor(Interceptor):
    """Tracks a property's getter and setter around a backing value."""

    override_get: ClassVar[Callable[..., Any] | None] = None
    override_set: ClassVar[Callable[..., Any] | None] = None
    override_slots = ("override_get", "override_set")

    def __init__(self, owner: Any, value: Any = UNSET) -> None:
        super().__init__(owner)
        self.value = value
        self.get_count = 0
        self.set_count = 0
        self.last_set_value: Any = None
        self.on_get: Callable[..., Any] | None = None
        self.on_set: Callable[..., Any] | None = None

    @property
    def has_value(self) -> bool:
        return self.value is not UNSET

    def reset_tracking(self) -> None:
        self.get_count = 0
        self.set_count = 0
        self.last_set_value = None

    def reset_callback(self) -> None:
        self.on_get = None
        self.on_set = None


class IndexerInterceptor(Interceptor):
    """Tracks indexer access around a backing dictionary."""

    override_get: ClassVar[Callable[..., Any] | None] = None
    override_set: ClassVar[Callable[..., Any] | None] = None
    override_slots = ("override_get", "override_set")

    def __init__(self, owner: Any) -> None:
        super().__init__(owner)
        self.backing: dict[Any, Any] = {}
        self.get_count = 0
        self.set_count = 0
        self.last_get_key: Any = None
        self.last_set_entry: tuple[Any, Any] | None = None
        self.on_get: Callable[..., Any] | None = None
        self.on_set: Callable[..., Any] | None = None

    def reset_tracking(self) -> None:
        self.get_count = 0
        self.set_count = 0
        self.last_get_key = None
        self.last_set_entry = None

    def reset_callback(self) -> None:
        self.on_get = None
        self.on_set = None


class EventInterceptor(Interceptor):
    """Tracks subscriptions and raises the event to subscribers."""

    def __init__(self, owner: Any) -> None:
        super().__init__(owner)
        self.handlers: list[Callable[..., Any]] = []
        self.add_count = 0
        self.remove_count = 0
        self.raise_count = 0
        self.raises: list[tuple[Any, ...]] = []
        self.on_add: Callable[..., Any] | None = None
        self.on_remove: Callable[..., Any] | None = None

    @property
    def has_subscribers(self) -> bool:
        return bool(self.handlers)

    @property
    def subscriber_count(self) -> int:
        return len(self.handlers)

    def add(self, handler: Callable[..., Any]) -> None:
        self.add_count += 1
        if self.on_add is not None:
            self.on_add(self.owner, handler)
            return
        self.handlers.append(handler)

    def remove(self, handler: Callable[..., Any]) -> None:
        self.remove_count += 1
        if self.on_remove is not None:
            self.on_remove(self.owner, handler)
            return
        if handler in self.handlers:
            self.handlers.remove(handler)

    def raise_(self, *args: Any) -> None:
        """Invoke every subscriber, in subscription order."""
        self.raise_count += 1
        self.raises.append(args)
        for handler in list(self.handlers):
            handler(*args)

    def reset_tracking(self) -> None:
        self.add_count = 0
        self.remove_count = 0
        self.raise_count = 0
        self.raises.clear()

    def reset_callback(self) -> None:
        self.on_add = None
        self.on_remove = None

    def reset(self) -> None:
        super().reset()
        self.handlers.clear()


class GenericMethodInterceptor(Interceptor):
    """Per-type-argument interceptors for one generic method.

    Aggregates are computed from the combinations on every read. Author
    overrides live on the combination type.
    """

    def __init__(
        self, owner: Any, combination_type: type[MethodInterceptor], arity: int
    ) -> None:
        super().__init__(owner)
        self.combination_type = combination_type
        self.arity = arity
        self._combinations: dict[tuple[Any, ...], MethodInterceptor] = {}

    def of(self, *type_arguments: Any) -> MethodInterceptor:
        """Interceptor for one type-argument combination, created on first use."""
        if len(type_arguments) != self.arity:
            raise TypeError(
                f"{self.display_name} takes {self.arity} type argument(s), got {len(type_arguments)}"
            )
        interceptor = self._combinations.get(type_arguments)
        if interceptor is None:
            interceptor = self.combination_type(self.owner, type_arguments)
            self._combinations[type_arguments] = interceptor
        return interceptor

    def __iter__(self) -> Iterator[MethodInterceptor]:
        return iter(self._combinations.values())

    @property
    def total_call_count(self) -> int:
        return sum(c.call_count for c in self._combinations.values())

    @property
    def was_called(self) -> bool:
        return any(c.was_called for c in self._combinations.values())

    @property
    def called_type_arguments(self) -> list[tuple[Any, ...]]:
        """Type-argument combinations that saw at least one call, first use first."""
        return [key for key, c in self._combinations.items() if c.was_called]

    def verify(self, times: Times) -> None:
        if not times.matches(self.total_call_count):
            raise VerificationFailed.mismatch(
                self.display_name, times.describe(), self.total_call_count
            )

    def reset_tracking(self) -> None:
        for combination in self._combinations.values():
            combination.reset_tracking()

    def reset_callback(self) -> None:
        for combination in self._combinations.values():
            combination.reset_callback()
