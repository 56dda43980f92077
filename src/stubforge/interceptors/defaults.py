"""Default value policy - type-directed fallback values.

``default_for`` is pure and recursive. Its outcome is carried into the
interceptor model; the renderer only turns it into an expression.
"""

from __future__ import annotations

from dataclasses import dataclass

from stubforge.contract.models import TypeDescriptor, TypeKind


@dataclass(frozen=True, slots=True)
class Value:
    """A concrete safe default, as Python expression text."""

    expr: str


@dataclass(frozen=True, slots=True)
class Deferred:
    """An already-completed awaitable carrying the inner outcome."""

    inner: Outcome


@dataclass(frozen=True, slots=True)
class NoSafeDefault:
    """The type cannot be defaulted. Strict doubles raise instead."""

    reason: str


Outcome = Value | Deferred | NoSafeDefault

VOID = Value("None")


def default_for(type_: TypeDescriptor | None) -> Outcome:
    """Resolve the fallback for a return or value type (``None`` means void).

    Rules, in priority order: value types give their zero literal; nullable
    wrappers give ``None``; deferred wrappers give ``Deferred(default_for(inner))``;
    containers, arrays and tuples give an empty instance; anything else has
    no safe default.
    """
    if type_ is None:
        return VOID
    kind = type_.kind
    if kind is TypeKind.VALUE:
        if type_.zero is None:
            return NoSafeDefault(f"value type {type_.name} declares no zero value")
        return Value(type_.zero)
    if kind is TypeKind.NULLABLE:
        return Value("None")
    if kind is TypeKind.DEFERRED:
        return Deferred(default_for(type_.inner))
    if kind is TypeKind.CONTAINER:
        return Value(f"{type_.factory or type_.name}()")
    if kind is TypeKind.ARRAY:
        return Value("[]")
    if kind is TypeKind.TUPLE:
        return _tuple_default(type_)
    if kind is TypeKind.TYPE_PARAMETER:
        return NoSafeDefault(f"type parameter {type_.name} is not known until the double is used")
    return NoSafeDefault(f"{type_.annotation} has no zero value or canonical empty instance")


def _tuple_default(type_: TypeDescriptor) -> Outcome:
    parts: list[str] = []
    for element in type_.args:
        outcome = default_for(element)
        if not isinstance(outcome, Value):
            return NoSafeDefault(f"tuple element {element.annotation} has no plain default")
        parts.append(outcome.expr)
    if len(parts) == 1:
        return Value(f"({parts[0]},)")
    return Value(f"({', '.join(parts)})")


def is_safe(outcome: Outcome) -> bool:
    """True when the outcome yields a usable value at every nesting level."""
    if isinstance(outcome, Value):
        return True
    if isinstance(outcome, Deferred):
        return is_safe(outcome.inner)
    return False
