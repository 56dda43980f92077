"""Generation unit inputs and results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from stubforge.contract.models import ContractType
from stubforge.core.errors import StubforgeError
from stubforge.interceptors.models import Strategy


@dataclass(frozen=True, slots=True)
class GenerationUnit:
    """One artifact to emit: which contracts, in which wrapping shape.

    STANDALONE and OPEN_GENERIC units produce one double named ``name`` that
    implements every target. NESTED units produce a host class ``name``
    holding one double per target.
    """

    name: str
    targets: tuple[ContractType, ...]
    strategy: Strategy = Strategy.STANDALONE
    strict: bool | None = None  # None: use the configured default
    type_parameters: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.name.isidentifier():
            raise ValueError(f"Unit name must be a Python identifier, got {self.name!r}")
        if not self.targets:
            raise ValueError(f"Unit {self.name!r} has no targets")

    @classmethod
    def for_contract(
        cls,
        contract: ContractType,
        *,
        name: str | None = None,
        strategy: Strategy = Strategy.STANDALONE,
        strict: bool | None = None,
        type_parameters: tuple[str, ...] = (),
    ) -> GenerationUnit:
        """Unit for a single contract; the double is named ``<Contract>Stub`` by default."""
        return cls(
            name=name or f"{contract.name}Stub",
            targets=(contract,),
            strategy=strategy,
            strict=strict,
            type_parameters=type_parameters,
        )


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A generation failure, reported against the declaration that caused it."""

    code: str  # stable, e.g. "SF1001"
    error: str  # e.g. "SIGNATURE_CONFLICT"
    message: str
    unit: str
    member: str | None = None
    surfaces: tuple[str, ...] = ()

    @classmethod
    def from_error(cls, unit: str, error: StubforgeError) -> Diagnostic:
        details = error.details
        surfaces = details.get("surfaces") or ()
        target = details.get("target")
        if not surfaces and target:
            surfaces = (target,)
        return cls(
            code=f"SF{error.code.value}",
            error=error.error_name,
            message=error.message,
            unit=unit,
            member=details.get("member"),
            surfaces=tuple(surfaces),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "error": self.error,
            "message": self.message,
            "unit": self.unit,
            "member": self.member,
            "surfaces": list(self.surfaces),
        }

    def __str__(self) -> str:
        return f"{self.code} {self.unit}: {self.message}"


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """Either source text and no diagnostics, or diagnostics and no text."""

    unit: str
    text: str | None
    diagnostics: tuple[Diagnostic, ...] = ()
    fingerprint: str | None = None
    cached: bool = False

    def __post_init__(self) -> None:
        if (self.text is None) == (not self.diagnostics):
            raise ValueError("A result carries either text or diagnostics, not both or neither")

    @property
    def ok(self) -> bool:
        return self.text is not None
