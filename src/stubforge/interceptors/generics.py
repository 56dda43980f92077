"""Generic specialization - generic methods and open generic doubles.

A generic method gets one interceptor per type-argument combination, created
lazily at runtime; its aggregate counters are always computed from those
combinations. Open generic doubles thread their type parameters, unchanged,
through every generated interceptor type.
"""

from __future__ import annotations

from collections.abc import Callable

from stubforge.contract.models import MemberContract, MemberKind
from stubforge.core.errors import GenerationError
from stubforge.interceptors.models import GenericMethodModel, MethodModel
from stubforge.naming.resolver import MemberNames
from stubforge.surface.models import TypeSurface


def build_generic_method(
    member: MemberContract,
    names: MemberNames,
    build_method: Callable[[MemberContract, MemberNames, bool], MethodModel],
) -> GenericMethodModel:
    """Model a generic method as a keyed family of method interceptors."""
    if member.kind is not MemberKind.GENERIC_METHOD:
        raise ValueError(f"{member.name} is not a generic method")
    combination = build_method(member, names, True)
    return GenericMethodModel(member=member, names=names, combination=combination)


def check_type_parameters(surface: TypeSurface, stub_class: str) -> tuple[str, ...]:
    """Every type parameter a member mentions must be bound by the unit or the method.

    Returns the unit's type parameters, in declaration order, for propagation.
    """
    allowed = set(surface.type_parameters)
    for member in surface.members:
        unbound = member.contract.free_type_parameters() - allowed
        if unbound:
            raise GenerationError.unsupported_construct(
                stub_class,
                f"'{member.name}' refers to unbound type parameter(s) {', '.join(sorted(unbound))}",
                member=member.name,
            )
        clash = {tp.name for tp in member.contract.type_parameters} & allowed
        if clash:
            raise GenerationError.unsupported_construct(
                stub_class,
                f"generic method '{member.name}' redeclares type parameter(s) "
                f"{', '.join(sorted(clash))} of the double",
                member=member.name,
            )
    return surface.type_parameters
