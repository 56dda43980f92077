"""Naming resolver - stable identifiers for every generated artifact.

Every name is a pure function of the member it belongs to and of the other
members sharing its name, never of declaration order. Adding an unrelated
member therefore leaves existing names untouched. Adding a second overload to
a previously unique name renames the first (``Add`` becomes ``Add1``); that is
accepted and documented behavior.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from stubforge.contract.models import ContractType, MemberKind
from stubforge.core.errors import GenerationError
from stubforge.surface.models import SurfaceMember, TypeSurface

log = structlog.get_logger()

# Attributes every generated double defines itself.
STUB_RESERVED = frozenset({"strict", "make_strict", "override", "clear_override"})
# Methods of the interceptor container.
SPY_RESERVED = frozenset({"interceptors", "reset", "reset_tracking", "reset_callback"})


@dataclass(frozen=True, slots=True)
class MemberNames:
    """Identifiers generated for one (possibly shared) member."""

    interceptor: str  # attribute on the spy container
    interceptor_class: str
    record_class: str | None = None  # argument record, when several parameters are tracked
    combination_class: str | None = None  # per-type-argument class of a generic method
    aliases: tuple[str, ...] = ()  # surface-qualified accessors of a shared member


@dataclass(frozen=True)
class NameAssignment:
    stub_class: str
    spy_class: str
    spy_attribute: str
    members: dict[tuple[object, ...], MemberNames] = field(default_factory=dict)
    # Member name -> stub class attribute holding its overload table.
    overload_tables: dict[str, str] = field(default_factory=dict)

    def of(self, member: SurfaceMember) -> MemberNames:
        return self.members[member.contract.signature_key()]

    def class_names(self) -> frozenset[str]:
        """Every class this double defines, stub class included."""
        found = {self.stub_class, self.spy_class}
        for names in self.members.values():
            found.add(names.interceptor_class)
            if names.record_class:
                found.add(names.record_class)
            if names.combination_class:
                found.add(names.combination_class)
        return frozenset(found)


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _free_name(base: str, taken: set[str] | frozenset[str]) -> str:
    name = base
    while name in taken:
        name += "_"
    return name


def _indexer_base(member: SurfaceMember) -> str:
    return "IndexerOf" + "".join(p.type.suffix for p in member.contract.parameters)


def assign_names(
    surface: TypeSurface,
    stub_class: str,
    *,
    spy_attribute: str = "spy",
    taken: frozenset[str] = frozenset(),
) -> NameAssignment:
    """Assign names for one stub class.

    Generated class names are claimed in member order (name, then parameter
    key). A class name already claimed, or listed in ``taken`` by another
    double of the same unit, gets trailing underscores.

    Raises:
        GenerationError: UNSUPPORTED_CONSTRUCT when a member name is reserved
            by generated doubles.
    """
    declared = {m.name for m in surface.members if m.kind is not MemberKind.INDEXER}
    for name in sorted(declared):
        if name in STUB_RESERVED or _is_dunder(name):
            raise GenerationError.unsupported_construct(
                stub_class, f"member name '{name}' is reserved by generated doubles", member=name
            )

    qualify = len(surface.direct_surfaces) > 1
    classes = set(taken) | {stub_class}
    spy_class = _claim(f"{stub_class}Spy", classes)
    members: dict[tuple[object, ...], MemberNames] = {}
    overload_tables: dict[str, str] = {}

    for name, group in sorted(surface.by_name().items()):
        kind = group[0].kind
        ordered = sorted(group, key=lambda m: m.contract.parameter_key())
        if kind is MemberKind.INDEXER:
            bases = [_indexer_base(m) for m in ordered]
            labels = []
            for base, member in zip(bases, ordered, strict=True):
                same = [m for b, m in zip(bases, ordered, strict=True) if b == base]
                label = base if len(same) == 1 else f"{base}{same.index(member) + 1}"
                labels.append(label)
            if len(ordered) > 1:
                overload_tables[name] = _free_name(f"_{name}_overloads", declared)
        elif len(ordered) > 1:
            separator = "_" if any(f"{name}{i}" in declared for i in range(1, len(ordered) + 1)) else ""
            labels = [f"{name}{separator}{i}" for i in range(1, len(ordered) + 1)]
            overload_tables[name] = _free_name(f"_{name}_overloads", declared)
        else:
            labels = [name]

        for label, member in zip(labels, ordered, strict=True):
            if kind is MemberKind.INDEXER:
                label = _free_name(label, declared)
            interceptor = _free_name(label, SPY_RESERVED)
            members[member.contract.signature_key()] = _member_names(
                member, interceptor, stub_class, qualify, classes
            )

    spy_attr = _free_name(spy_attribute, declared)
    names = NameAssignment(
        stub_class=stub_class,
        spy_class=spy_class,
        spy_attribute=spy_attr,
        members=members,
        overload_tables=overload_tables,
    )
    log.debug(
        "names_assigned",
        stub=stub_class,
        interceptors=len(members),
        overloaded=sorted(overload_tables),
        spy_attribute=spy_attr,
    )
    return names


def _claim(base: str, classes: set[str]) -> str:
    name = _free_name(base, classes)
    classes.add(name)
    return name


def _member_names(
    member: SurfaceMember,
    interceptor: str,
    stub_class: str,
    qualify: bool,
    classes: set[str],
) -> MemberNames:
    contract = member.contract
    aliases: tuple[str, ...] = ()
    if qualify and member.shared:
        aliases = tuple(f"{ref.key}_{interceptor}" for ref in member.surfaces)
    if contract.kind is MemberKind.GENERIC_METHOD:
        interceptor_class = _claim(f"{stub_class}_{interceptor}GenericInterceptor", classes)
        combination = _claim(f"{stub_class}_{interceptor}Interceptor", classes)
    else:
        interceptor_class = _claim(f"{stub_class}_{interceptor}Interceptor", classes)
        combination = None
    record = None
    if contract.kind in (MemberKind.METHOD, MemberKind.GENERIC_METHOD):
        if len(contract.tracked_parameters) > 1:
            record = _claim(f"{stub_class}_{interceptor}Call", classes)
    return MemberNames(
        interceptor=interceptor,
        interceptor_class=interceptor_class,
        record_class=record,
        combination_class=combination,
        aliases=aliases,
    )


def stub_class_names(contracts: Sequence[ContractType]) -> list[str]:
    """Class names for the doubles hosted by one nested unit.

    The bare contract name, plus the canonical type-argument suffix when the
    same generic contract is instantiated with different type arguments.
    """
    instantiations: dict[str, set[str]] = {}
    for contract in contracts:
        instantiations.setdefault(contract.name, set()).add(contract.display_name)

    names: list[str] = []
    for contract in contracts:
        if len(instantiations[contract.name]) > 1:
            name = contract.name + contract.argument_suffix
        else:
            name = contract.name
        if name in names:
            raise GenerationError.unsupported_construct(
                contract.display_name, f"two targets would both generate class '{name}'"
            )
        names.append(name)
    return names
