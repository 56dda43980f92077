"""Interceptor models - what each generated member tracks and how it dispatches.

A closed set of variants, one per member kind. Built once per member and
never mutated; the renderer dispatches over them exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stubforge.contract.models import MemberContract, ParameterDescriptor, ParameterMode
from stubforge.interceptors.defaults import Deferred, Outcome, is_safe
from stubforge.naming.resolver import MemberNames


class Strategy(Enum):
    """Wrapping shape of a generation unit."""

    STANDALONE = "standalone"  # one module-level double
    NESTED = "nested"  # several doubles inside one host class
    OPEN_GENERIC = "open_generic"  # one double carrying unbound type parameters


@dataclass(frozen=True, slots=True)
class OutputSlot:
    """A by-reference parameter returned alongside the result."""

    parameter: ParameterDescriptor
    outcome: Outcome | None  # None: in-out value passes through unchanged

    @property
    def passthrough(self) -> bool:
        return self.parameter.mode is ParameterMode.IN_OUT


@dataclass(frozen=True, slots=True)
class ReturnPlan:
    result: Outcome | None  # None for void
    outputs: tuple[OutputSlot, ...] = ()

    @property
    def tupled(self) -> bool:
        return bool(self.outputs)

    @property
    def safe(self) -> bool:
        if self.result is not None and not is_safe(self.result):
            return False
        return all(o.outcome is None or is_safe(o.outcome) for o in self.outputs)

    @property
    def deferred(self) -> bool:
        return isinstance(self.result, Deferred)


@dataclass(frozen=True, slots=True)
class MethodModel:
    member: MemberContract
    names: MemberNames
    returns: ReturnPlan
    generic: bool = False  # a per-type-argument combination of a generic method

    @property
    def inputs(self) -> tuple[ParameterDescriptor, ...]:
        return self.member.input_parameters

    @property
    def tracked(self) -> tuple[ParameterDescriptor, ...]:
        return self.member.tracked_parameters

    @property
    def class_name(self) -> str:
        if self.generic and self.names.combination_class:
            return self.names.combination_class
        return self.names.interceptor_class


@dataclass(frozen=True, slots=True)
class PropertyModel:
    member: MemberContract
    names: MemberNames
    outcome: Outcome

    @property
    def readable(self) -> bool:
        return self.member.readable

    @property
    def writable(self) -> bool:
        return self.member.writable


@dataclass(frozen=True, slots=True)
class IndexerModel:
    member: MemberContract
    names: MemberNames
    outcome: Outcome

    @property
    def keys(self) -> tuple[ParameterDescriptor, ...]:
        return self.member.parameters

    @property
    def inputs(self) -> tuple[ParameterDescriptor, ...]:
        return self.member.parameters


@dataclass(frozen=True, slots=True)
class EventModel:
    member: MemberContract
    names: MemberNames


@dataclass(frozen=True, slots=True)
class GenericMethodModel:
    member: MemberContract
    names: MemberNames
    combination: MethodModel

    @property
    def arity(self) -> int:
        return len(self.member.type_parameters)


InterceptorModel = MethodModel | PropertyModel | IndexerModel | EventModel | GenericMethodModel


@dataclass(frozen=True, slots=True)
class OverloadGroup:
    """Several methods (or indexers) behind one Python name, resolved at the call site."""

    name: str
    table: str  # stub class attribute holding the Overload table
    members: tuple[MethodModel | IndexerModel, ...]

    @property
    def is_indexer(self) -> bool:
        return isinstance(self.members[0], IndexerModel)


@dataclass(frozen=True, slots=True)
class StubModel:
    class_name: str
    spy_class: str
    spy_attribute: str
    root: str
    interceptors: tuple[InterceptorModel, ...]
    overload_groups: tuple[OverloadGroup, ...] = ()
    callable_member: MethodModel | None = None
    strict: bool = False
    type_parameters: tuple[str, ...] = ()

    def of_type(self, cls: type) -> tuple[InterceptorModel, ...]:
        return tuple(i for i in self.interceptors if isinstance(i, cls))


@dataclass(frozen=True, slots=True)
class UnitModel:
    name: str
    strategy: Strategy
    stubs: tuple[StubModel, ...]
    imports: tuple[tuple[str, str], ...] = ()  # (module, name) of referenced types
    runtime_module: str = "stubforge.runtime"
    header: bool = True
    indent: int = 4
