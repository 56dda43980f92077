"""Surface flattening - walk the supertype graph into one TypeSurface.

Members are collected breadth-first with the surface that declares them.
Signature-equal members collapse into one shared member attributed to the
most derived surface. Same-named members that are not signature-equal and
are not legal overloads are a signature conflict, reported and never
silently widened.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence

import structlog

from stubforge.contract.models import (
    ContractKind,
    ContractType,
    MemberContract,
    MemberKind,
    TypeDescriptor,
)
from stubforge.core.errors import GenerationError
from stubforge.surface.models import SurfaceMember, SurfaceRef, TypeSurface

log = structlog.get_logger()


def flatten_surface(
    root: str,
    contracts: Sequence[ContractType],
    *,
    type_parameters: tuple[str, ...] = (),
) -> TypeSurface:
    """Flatten the contracts a generation target implements.

    Args:
        root: Name of the generation target.
        contracts: The contracts it implements directly, type arguments bound
            (open generic targets bind them to their own type parameters).
        type_parameters: Unbound type parameters carried by the target.

    Raises:
        GenerationError: SIGNATURE_CONFLICT, ARITY_MISMATCH or
            UNSUPPORTED_CONSTRUCT.
    """
    if not contracts:
        raise GenerationError.unsupported_construct(root, "no contract to implement")

    kind = ContractKind.INTERFACE
    if any(c.kind is ContractKind.CALLABLE for c in contracts):
        if len(contracts) > 1:
            raise GenerationError.unsupported_construct(
                root, "a callable contract cannot be combined with other contracts"
            )
        kind = ContractKind.CALLABLE

    collected, parents = _collect(root, contracts)
    members = _collapse(collected, _ancestors(parents))
    _check_conflicts(root, members)

    surfaces = sorted({ref for _, ref in collected}, key=lambda s: (s.depth, s.display))
    surface = TypeSurface(
        root=root,
        kind=kind,
        members=tuple(sorted(members, key=lambda m: m.sort_key)),
        surfaces=tuple(surfaces),
        type_parameters=type_parameters,
    )
    log.debug(
        "surface_flattened",
        root=root,
        members=len(surface.members),
        surfaces=len(surface.surfaces),
    )
    return surface


def _bind(contract: ContractType, outer: dict[str, TypeDescriptor]) -> ContractType:
    """Apply the enclosing bindings to a supertype's own type arguments."""
    if not contract.type_arguments or not outer:
        return contract
    return contract.instantiate(*(a.substitute(outer) for a in contract.type_arguments))


def _collect(
    root: str, contracts: Sequence[ContractType]
) -> tuple[list[tuple[MemberContract, SurfaceRef]], dict[str, tuple[str, ...]]]:
    """Breadth-first walk. Each surface is visited once, at its minimal depth.

    Returns the collected members and each surface's direct supertypes.
    """
    seen: dict[str, ContractType] = {}
    parents: dict[str, tuple[str, ...]] = {}
    collected: list[tuple[MemberContract, SurfaceRef]] = []
    queue: deque[tuple[ContractType, int]] = deque((c, 0) for c in contracts)

    while queue:
        contract, depth = queue.popleft()
        if contract.type_parameters and not contract.is_bound:
            raise GenerationError.arity_mismatch(
                contract.name, len(contract.type_parameters), len(contract.type_arguments)
            )
        display = contract.display_name
        previous = seen.get(display)
        if previous is not None:
            if previous != contract:
                raise GenerationError.unsupported_construct(
                    root, f"two different declarations are both named '{display}'"
                )
            continue
        seen[display] = contract

        ref = SurfaceRef(display=display, key=contract.name + contract.argument_suffix, depth=depth)
        bindings = contract.bindings()
        for member in contract.members:
            collected.append((member.substitute(bindings).with_surface(display), ref))
        supertypes = [_bind(supertype, bindings) for supertype in contract.supertypes]
        parents[display] = tuple(s.display_name for s in supertypes)
        for supertype in supertypes:
            queue.append((supertype, depth + 1))

    return collected, parents


def _ancestors(parents: dict[str, tuple[str, ...]]) -> dict[str, frozenset[str]]:
    """Transitive supertype closure of every surface."""
    closure: dict[str, frozenset[str]] = {}
    for display in parents:
        found: set[str] = set()
        stack = list(parents[display])
        while stack:
            current = stack.pop()
            if current in found:
                continue
            found.add(current)
            stack.extend(parents.get(current, ()))
        closure[display] = frozenset(found)
    return closure


def _most_derived(
    entries: list[tuple[MemberContract, SurfaceRef]], ancestors: dict[str, frozenset[str]]
) -> MemberContract:
    """First entry whose surface is not a supertype of another declaring surface.

    ``entries`` is ordered by depth, so a shallower surface wins among
    unrelated ones.
    """
    displays = {ref.display for _, ref in entries}
    for member, ref in entries:
        if not any(ref.display in ancestors.get(other, ()) for other in displays):
            return member
    return entries[0][0]


def _collapse(
    collected: list[tuple[MemberContract, SurfaceRef]], ancestors: dict[str, frozenset[str]]
) -> list[SurfaceMember]:
    groups: dict[tuple[object, ...], list[tuple[MemberContract, SurfaceRef]]] = {}
    for member, ref in collected:
        groups.setdefault(member.signature_key(), []).append((member, ref))

    result: list[SurfaceMember] = []
    for entries in groups.values():
        entries.sort(key=lambda e: (e[1].depth, e[1].display))
        primary = _most_derived(entries, ancestors)
        refs: list[SurfaceRef] = []
        for _, ref in entries:
            if ref not in refs:
                refs.append(ref)
        result.append(SurfaceMember(contract=primary, surfaces=tuple(refs)))
    return result


def _check_conflicts(root: str, members: list[SurfaceMember]) -> None:
    by_name: dict[str, list[SurfaceMember]] = {}
    for member in members:
        by_name.setdefault(member.name, []).append(member)

    for name in sorted(by_name):
        group = sorted(by_name[name], key=lambda m: m.sort_key)
        if len(group) < 2:
            continue
        kinds = {m.kind for m in group}
        if len(kinds) > 1:
            _raise_conflict(name, group)
        kind = group[0].kind
        if kind in (MemberKind.METHOD, MemberKind.GENERIC_METHOD, MemberKind.INDEXER):
            # Overloads must differ in their parameter list.
            by_params: dict[tuple[tuple[str, str], ...], list[SurfaceMember]] = {}
            for m in group:
                by_params.setdefault(m.contract.parameter_key(), []).append(m)
            for clashing in by_params.values():
                if len(clashing) > 1:
                    _raise_conflict(name, clashing)
            if kind is MemberKind.GENERIC_METHOD:
                raise GenerationError.unsupported_construct(
                    root, f"generic method '{name}' is overloaded", member=name
                )
            if kind is MemberKind.INDEXER:
                arities = {len(m.contract.parameters) for m in group}
                if len(arities) > 1:
                    raise GenerationError.unsupported_construct(
                        root, "indexers with different key counts cannot share one accessor"
                    )
            continue
        # Properties and events have exactly one shape per name.
        _raise_conflict(name, group)


def _raise_conflict(name: str, group: list[SurfaceMember]) -> None:
    signatures = [m.contract.describe() for m in group]
    surfaces: list[str] = []
    for m in group:
        for ref in m.surfaces:
            if ref.display not in surfaces:
                surfaces.append(ref.display)
    raise GenerationError.signature_conflict(name, signatures, surfaces)
