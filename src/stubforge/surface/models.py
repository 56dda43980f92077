"""Flattened, conflict-checked member surface of one generation target."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from stubforge.contract.models import ContractKind, MemberContract, MemberKind


@dataclass(frozen=True, slots=True)
class SurfaceRef:
    """A declaring surface reached during flattening."""

    display: str  # "IRepository[User]"
    key: str  # "IRepositoryUser", identifier-safe
    depth: int  # distance from the root (0 = root contract)


@dataclass(frozen=True, slots=True)
class SurfaceMember:
    """A member contract together with every surface that declares it.

    ``contract.declaring_surface`` names the most derived declaring surface;
    the rest of ``surfaces`` delegate to the same shared interceptor.
    """

    contract: MemberContract
    surfaces: tuple[SurfaceRef, ...]

    @property
    def name(self) -> str:
        return self.contract.name

    @property
    def kind(self) -> MemberKind:
        return self.contract.kind

    @property
    def shared(self) -> bool:
        return len(self.surfaces) > 1

    @property
    def sort_key(self) -> tuple[object, ...]:
        return (self.contract.name, self.contract.kind.value, self.contract.parameter_key())


@dataclass(frozen=True, slots=True)
class TypeSurface:
    """Immutable result of flattening. Consumed by every downstream stage."""

    root: str
    kind: ContractKind
    members: tuple[SurfaceMember, ...]
    surfaces: tuple[SurfaceRef, ...]
    type_parameters: tuple[str, ...] = ()  # unbound, for open generic targets

    def of_kind(self, kind: MemberKind) -> tuple[SurfaceMember, ...]:
        return tuple(m for m in self.members if m.kind is kind)

    def by_name(self) -> dict[str, list[SurfaceMember]]:
        groups: dict[str, list[SurfaceMember]] = {}
        for member in self.members:
            groups.setdefault(member.name, []).append(member)
        return groups

    @property
    def member_names(self) -> frozenset[str]:
        return frozenset(m.name for m in self.members)

    @property
    def direct_surfaces(self) -> tuple[SurfaceRef, ...]:
        """Surfaces at the shallowest depth (the contracts the unit names)."""
        if not self.surfaces:
            return ()
        shallowest = min(s.depth for s in self.surfaces)
        return tuple(s for s in self.surfaces if s.depth == shallowest)

    def canonical_lines(self) -> list[str]:
        lines = [f"root:{self.root}", f"kind:{self.kind.value}"]
        lines.append("tparams:" + ",".join(self.type_parameters))
        for member in self.members:
            surfaces = ",".join(f"{s.display}@{s.key}@{s.depth}" for s in member.surfaces)
            lines.append(f"member:{member.contract.structural_key()!r}|{surfaces}")
        return lines

    def fingerprint(self) -> str:
        """SHA-256 of the canonical form; equal surfaces give equal fingerprints."""
        return hashlib.sha256("\n".join(self.canonical_lines()).encode()).hexdigest()
