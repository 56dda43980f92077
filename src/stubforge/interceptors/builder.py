"""Interceptor model builder - one model per flattened member."""

from __future__ import annotations

import structlog

from stubforge.contract.models import (
    ContractKind,
    MemberContract,
    MemberKind,
    ParameterMode,
)
from stubforge.core.errors import GenerationError, InternalError
from stubforge.interceptors.defaults import default_for
from stubforge.interceptors.generics import build_generic_method, check_type_parameters
from stubforge.interceptors.models import (
    EventModel,
    IndexerModel,
    InterceptorModel,
    MethodModel,
    OutputSlot,
    OverloadGroup,
    PropertyModel,
    ReturnPlan,
    StubModel,
)
from stubforge.naming.resolver import MemberNames, NameAssignment
from stubforge.surface.models import TypeSurface

log = structlog.get_logger()


def return_plan(member: MemberContract) -> ReturnPlan:
    """Default outcome for the result and every by-reference output."""
    result = None if member.is_void else default_for(member.return_type)
    outputs = tuple(
        OutputSlot(p, None if p.mode is ParameterMode.IN_OUT else default_for(p.type))
        for p in member.by_reference_parameters
    )
    return ReturnPlan(result=result, outputs=outputs)


def build_method(member: MemberContract, names: MemberNames, generic: bool = False) -> MethodModel:
    return MethodModel(member=member, names=names, returns=return_plan(member), generic=generic)


def build_interceptor(member: MemberContract, names: MemberNames) -> InterceptorModel:
    kind = member.kind
    if kind is MemberKind.METHOD:
        return build_method(member, names)
    if kind is MemberKind.PROPERTY:
        return PropertyModel(member=member, names=names, outcome=default_for(member.return_type))
    if kind is MemberKind.INDEXER:
        return IndexerModel(member=member, names=names, outcome=default_for(member.return_type))
    if kind is MemberKind.EVENT:
        return EventModel(member=member, names=names)
    if kind is MemberKind.GENERIC_METHOD:
        return build_generic_method(member, names, build_method)
    raise InternalError.unexpected(f"unhandled member kind {kind}", member=member.name)


def _overload_groups(
    stub_class: str, models: list[InterceptorModel], names: NameAssignment
) -> tuple[OverloadGroup, ...]:
    groups: list[OverloadGroup] = []
    for name, table in sorted(names.overload_tables.items()):
        members = sorted(
            (
                m
                for m in models
                if isinstance(m, (MethodModel, IndexerModel)) and m.member.name == name
            ),
            key=lambda m: m.member.parameter_key(),
        )
        _check_distinguishable(stub_class, name, members)
        groups.append(OverloadGroup(name=name, table=table, members=tuple(members)))
    return tuple(groups)


def _check_distinguishable(
    stub_class: str, name: str, members: list[MethodModel | IndexerModel]
) -> None:
    """Overloads must be told apart by arity or by a runtime-checkable parameter type."""
    for i, first in enumerate(members):
        for second in members[i + 1 :]:
            a, b = first.inputs, second.inputs
            if len(a) != len(b):
                continue
            if any(
                pa.type.runtime_name
                and pb.type.runtime_name
                and pa.type.runtime_name != pb.type.runtime_name
                for pa, pb in zip(a, b, strict=True)
            ):
                continue
            raise GenerationError.unsupported_construct(
                stub_class,
                f"overloads {first.member.describe()} and {second.member.describe()} "
                "cannot be told apart at call time",
                member=name,
            )


def build_stub(
    surface: TypeSurface,
    names: NameAssignment,
    *,
    strict: bool = False,
) -> StubModel:
    """Build the interceptor models of one double.

    Raises:
        GenerationError: UNSUPPORTED_CONSTRUCT for members generated code
            cannot express.
    """
    stub_class = names.stub_class
    type_parameters = check_type_parameters(surface, stub_class)

    models: list[InterceptorModel] = []
    for member in surface.members:
        models.append(build_interceptor(member.contract, names.of(member)))
    models.sort(key=lambda m: m.names.interceptor)

    callable_member = None
    if surface.kind is ContractKind.CALLABLE:
        callable_member = _callable_member(stub_class, models)

    stub = StubModel(
        class_name=stub_class,
        spy_class=names.spy_class,
        spy_attribute=names.spy_attribute,
        root=surface.root,
        interceptors=tuple(models),
        overload_groups=_overload_groups(stub_class, models, names),
        callable_member=callable_member,
        strict=strict,
        type_parameters=type_parameters,
    )
    log.debug(
        "interceptors_built",
        stub=stub_class,
        interceptors=len(models),
        overload_groups=len(stub.overload_groups),
        strict=strict,
    )
    return stub


def _callable_member(stub_class: str, models: list[InterceptorModel]) -> MethodModel:
    if len(models) != 1 or not isinstance(models[0], MethodModel):
        raise InternalError.unexpected("callable surface must hold exactly one method", stub=stub_class)
    model = models[0]
    if any(p.mode is ParameterMode.OUT for p in model.member.parameters):
        raise GenerationError.unsupported_construct(
            stub_class,
            "callable targets cannot have out parameters; the callback signature cannot express them",
            member=model.member.name,
        )
    return model
