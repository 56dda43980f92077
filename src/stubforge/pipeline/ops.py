"""Generation pipeline: flatten -> name -> build -> render.

``generate`` is a pure function of its unit and settings. Generation errors
never escape it; they come back as diagnostics, and a failed unit never
yields partial text.
"""

from __future__ import annotations

import hashlib

import structlog

from stubforge.config.models import GenerationConfig, StubforgeConfig
from stubforge.contract.models import ContractKind, ContractType, TypeDescriptor, TypeKind
from stubforge.core.errors import GenerationError
from stubforge.core.logging import clear_unit_id, set_unit_id
from stubforge.interceptors.builder import build_stub
from stubforge.interceptors.models import Strategy, StubModel, UnitModel
from stubforge.naming.resolver import assign_names, stub_class_names
from stubforge.pipeline.cache import GenerationCache
from stubforge.pipeline.models import Diagnostic, GenerationResult, GenerationUnit
from stubforge.render.renderer import render_unit
from stubforge.surface.flatten import flatten_surface
from stubforge.surface.models import TypeSurface

log = structlog.get_logger()


def _open_instantiation(unit: GenerationUnit, target: ContractType) -> ContractType:
    if target.kind is ContractKind.CALLABLE:
        raise GenerationError.unsupported_construct(
            target.name, "a callable target cannot be generated as an open generic double"
        )
    if target.type_arguments:
        return target
    parameters = [TypeDescriptor.type_parameter(tp) for tp in unit.type_parameters]
    return target.instantiate(*parameters)


def flatten_unit(unit: GenerationUnit) -> tuple[list[tuple[str, TypeSurface]], list[GenerationError]]:
    """Flatten every double of a unit. Returns (class name, surface) pairs and errors."""
    errors: list[GenerationError] = []
    if unit.strategy is not Strategy.OPEN_GENERIC and unit.type_parameters:
        errors.append(
            GenerationError.unsupported_construct(
                unit.name, "type parameters require the open generic strategy"
            )
        )
        return [], errors

    if unit.strategy is Strategy.NESTED:
        try:
            class_names = stub_class_names(unit.targets)
        except GenerationError as e:
            return [], [e]
        surfaces: list[tuple[str, TypeSurface]] = []
        for class_name, target in zip(class_names, unit.targets, strict=True):
            try:
                surfaces.append((class_name, flatten_surface(target.display_name, [target])))
            except GenerationError as e:
                errors.append(e)
        return surfaces, errors

    try:
        if unit.strategy is Strategy.OPEN_GENERIC:
            targets = [_open_instantiation(unit, t) for t in unit.targets]
        else:
            targets = list(unit.targets)
        root = targets[0].display_name if len(targets) == 1 else unit.name
        surface = flatten_surface(root, targets, type_parameters=unit.type_parameters)
    except GenerationError as e:
        return [], [e]
    return [(unit.name, surface)], errors


def unit_fingerprint(
    unit: GenerationUnit,
    surfaces: list[tuple[str, TypeSurface]],
    strict: bool,
    settings: GenerationConfig,
) -> str:
    """Structural identity of everything that determines the emitted text."""
    parts = [
        f"unit:{unit.name}",
        f"strategy:{unit.strategy.value}",
        f"strict:{strict}",
        f"settings:{settings.model_dump_json()}",
    ]
    for class_name, surface in surfaces:
        parts.append(f"stub:{class_name}:{surface.fingerprint()}")
    return hashlib.sha256("\n".join(parts).encode()).hexdigest()


def _type_imports(surfaces: list[tuple[str, TypeSurface]]) -> tuple[tuple[str, str], ...]:
    found: set[tuple[str, str]] = set()
    for _, surface in surfaces:
        for member in surface.members:
            contract = member.contract
            types = [p.type for p in contract.parameters]
            if contract.return_type is not None:
                types.append(contract.return_type)
            for root in types:
                for t in root.iter_types():
                    if t.module is None:
                        continue
                    found.add((t.module, t.name))
                    if t.kind is TypeKind.CONTAINER and t.factory and t.factory.isidentifier():
                        found.add((t.module, t.factory))
    return tuple(sorted(found))


def _failed(unit: GenerationUnit, errors: list[GenerationError]) -> GenerationResult:
    diagnostics = tuple(Diagnostic.from_error(unit.name, e) for e in errors)
    for diagnostic in diagnostics:
        log.warning(
            "generation_failed",
            unit=unit.name,
            code=diagnostic.code,
            member=diagnostic.member,
            message=diagnostic.message,
        )
    return GenerationResult(unit=unit.name, text=None, diagnostics=diagnostics)


def generate(
    unit: GenerationUnit,
    *,
    config: StubforgeConfig | None = None,
    cache: GenerationCache | None = None,
) -> GenerationResult:
    """Run the whole pipeline for one unit.

    Args:
        unit: What to generate.
        config: Settings; defaults apply when omitted.
        cache: Optional result cache shared across calls.

    Returns:
        A result holding either the module text or the diagnostics.
    """
    config = config or StubforgeConfig()
    settings = config.generation
    strict = settings.strict_default if unit.strict is None else unit.strict

    set_unit_id()
    try:
        log.debug(
            "generation_started",
            unit=unit.name,
            strategy=unit.strategy.value,
            targets=len(unit.targets),
            strict=strict,
        )
        surfaces, errors = flatten_unit(unit)
        if errors:
            return _failed(unit, errors)

        fingerprint = unit_fingerprint(unit, surfaces, strict, settings)
        use_cache = cache is not None and config.cache.enabled
        if use_cache:
            hit = cache.get(fingerprint)
            if hit is not None:
                log.debug("generation_cache_hit", unit=unit.name, fingerprint=fingerprint[:12])
                return GenerationResult(
                    unit=unit.name, text=hit.text, fingerprint=fingerprint, cached=True
                )

        stubs: list[StubModel] = []
        # Doubles of one unit share a namespace; class names must not collide.
        taken = frozenset(class_name for class_name, _ in surfaces)
        for class_name, surface in surfaces:
            try:
                names = assign_names(
                    surface, class_name, spy_attribute=settings.spy_attribute, taken=taken
                )
                taken |= names.class_names()
                stubs.append(build_stub(surface, names, strict=strict))
            except GenerationError as e:
                errors.append(e)
        if errors:
            return _failed(unit, errors)

        model = UnitModel(
            name=unit.name,
            strategy=unit.strategy,
            stubs=tuple(stubs),
            imports=_type_imports(surfaces),
            runtime_module=settings.runtime_module,
            header=settings.emit_header,
            indent=settings.indent,
        )
        text = render_unit(model)
        result = GenerationResult(unit=unit.name, text=text, fingerprint=fingerprint)
        if use_cache:
            cache.put(fingerprint, result)
        log.debug(
            "generation_completed",
            unit=unit.name,
            stubs=len(stubs),
            lines=text.count("\n"),
        )
        return result
    finally:
        clear_unit_id()


def generate_all(
    units: list[GenerationUnit],
    *,
    config: StubforgeConfig | None = None,
    cache: GenerationCache | None = None,
) -> list[GenerationResult]:
    """Generate independent units in order. Each unit fails or succeeds alone."""
    return [generate(unit, config=config, cache=cache) for unit in units]
