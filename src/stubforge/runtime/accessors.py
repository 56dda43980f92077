"""Call-site helpers: overload resolution, event and generic-method accessors."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, NamedTuple

from stubforge.runtime.tracking import EventInterceptor, GenericMethodInterceptor


class Overload(NamedTuple):
    """One overload of a method, as seen by the call-site dispatcher."""

    interceptor: str
    parameters: tuple[str, ...]
    types: tuple[type | None, ...]  # None where the type cannot be checked at runtime


def _bind(overload: Overload, args: tuple[Any, ...], kwargs: dict[str, Any]) -> list[Any] | None:
    params = overload.parameters
    if len(args) > len(params):
        return None
    if any(name not in params[len(args):] for name in kwargs):
        return None
    if len(args) + len(kwargs) != len(params):
        return None
    return [*args, *(kwargs[name] for name in params[len(args):])]


def resolve_overload(
    member: str, overloads: tuple[Overload, ...], args: tuple[Any, ...], kwargs: dict[str, Any]
) -> str:
    """Pick the overload a call binds to.

    Arity and keyword names first; among the overloads that bind, those whose
    checkable parameter types accept the arguments; ties go to the overload
    with the most exact type matches, then to declaration order.
    """
    best: tuple[int, str] | None = None
    for overload in overloads:
        bound = _bind(overload, args, kwargs)
        if bound is None:
            continue
        exact = 0
        for value, expected in zip(bound, overload.types, strict=True):
            if expected is None:
                continue
            if not isinstance(value, expected):
                break
            if type(value) is expected:
                exact += 1
        else:
            if best is None or exact > best[0]:
                best = (exact, overload.interceptor)
    if best is None:
        shapes = "; ".join(
            f"({', '.join(o.parameters)})" for o in overloads
        )
        raise TypeError(f"{member}() has no overload matching the arguments; expected one of {shapes}")
    return best[1]


class EventAccessor:
    """Returned by an event attribute so callers can write ``stub.Changed += handler``."""

    __slots__ = ("_interceptor",)

    def __init__(self, interceptor: EventInterceptor) -> None:
        self._interceptor = interceptor

    def __iadd__(self, handler: Callable[..., Any]) -> EventAccessor:
        self._interceptor.add(handler)
        return self

    def __isub__(self, handler: Callable[..., Any]) -> EventAccessor:
        self._interceptor.remove(handler)
        return self

    @staticmethod
    def assign(interceptor: EventInterceptor, value: Any) -> None:
        """Accept the write-back of ``+=`` / ``-=``; reject plain assignment."""
        if not isinstance(value, EventAccessor) or value._interceptor is not interceptor:
            raise TypeError(f"Event {interceptor.member} supports only += and -=")

    def __repr__(self) -> str:
        return f"<EventAccessor {self._interceptor.display_name}>"


class GenericMethodAccessor:
    """Returned by a generic method attribute: ``stub.Convert[User]("json")``."""

    __slots__ = ("_interceptor",)

    def __init__(self, interceptor: GenericMethodInterceptor) -> None:
        self._interceptor = interceptor

    def __getitem__(self, type_arguments: Any) -> Callable[..., Any]:
        if not isinstance(type_arguments, tuple):
            type_arguments = (type_arguments,)
        combination = self._interceptor.of(*type_arguments)
        return combination.invoke  # type: ignore[attr-defined]

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        raise TypeError(
            f"{self._interceptor.member} is generic; supply type arguments, "
            f"e.g. {self._interceptor.member}[int](...)"
        )

    def __repr__(self) -> str:
        return f"<GenericMethodAccessor {self._interceptor.display_name}>"
