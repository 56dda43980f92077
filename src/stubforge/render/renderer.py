"""Renderer - interceptor models to Python source.

Stateless: equal unit models render equal text. Names and default values
are settled upstream; the strategy only chooses the wrapping shape.
"""

from __future__ import annotations

from stubforge.contract.models import ParameterDescriptor
from stubforge.core.errors import InternalError
from stubforge.interceptors.defaults import Deferred, NoSafeDefault, Outcome, Value, is_safe
from stubforge.interceptors.models import (
    EventModel,
    GenericMethodModel,
    IndexerModel,
    InterceptorModel,
    MethodModel,
    OverloadGroup,
    PropertyModel,
    Strategy,
    StubModel,
    UnitModel,
)
from stubforge.render.writer import CodeWriter

HEADER = "# Generated by stubforge. Do not edit."


class _Context:
    """Per-render bookkeeping: name qualification and imports in use."""

    def __init__(self, unit: UnitModel) -> None:
        self.unit = unit
        self.nested = unit.strategy is Strategy.NESTED
        self.qualifier = f"{unit.name}." if self.nested else ""
        self.runtime: set[str] = set()
        self.typing: set[str] = set()

    def q(self, name: str) -> str:
        """Reference a generated class from inside a method body."""
        return self.qualifier + name

    def rt(self, name: str) -> str:
        self.runtime.add(name)
        return name

    def gap(self, w: CodeWriter) -> None:
        w.blank(1 if self.nested else 2)

    def outcome(self, outcome: Outcome) -> str:
        if isinstance(outcome, Value):
            return outcome.expr
        if isinstance(outcome, Deferred):
            return f"{self.rt('completed')}({self.outcome(outcome.inner)})"
        if isinstance(outcome, NoSafeDefault):
            return "None"
        raise InternalError.unexpected(f"unknown default outcome {outcome!r}")


def _tuple_literal(items: list[str]) -> str:
    if not items:
        return "()"
    if len(items) == 1:
        return f"({items[0]},)"
    return f"({', '.join(items)})"


def _params(params: tuple[ParameterDescriptor, ...]) -> str:
    return "".join(f", {p.name}: {p.type.annotation}" for p in params)


def _call_args(params: tuple[ParameterDescriptor, ...]) -> str:
    return "".join(f", {p.name}" for p in params)


def _return_annotation(model: MethodModel) -> str:
    member = model.member
    result = member.return_type.annotation if member.return_type else "None"
    if not model.returns.tupled:
        return result
    parts = [result] if member.return_type else []
    parts.extend(o.parameter.type.annotation for o in model.returns.outputs)
    return f"tuple[{', '.join(parts)}]"


def _key_annotation(model: IndexerModel) -> str:
    if len(model.keys) == 1:
        return model.keys[0].type.annotation
    return f"tuple[{', '.join(k.type.annotation for k in model.keys)}]"


def _class_header(ctx: _Context, stub: StubModel, name: str, base: str) -> str:
    bases = [ctx.rt(base)]
    if stub.type_parameters:
        ctx.typing.add("Generic")
        bases.append(f"Generic[{', '.join(stub.type_parameters)}]")
    return f"class {name}({', '.join(bases)}):"


def _emit_fallback(
    w: CodeWriter, safe: bool, expr: str, accessor: str | None = None
) -> None:
    if not safe:
        with w.block("if self.owner.strict:"):
            w.emit(f"raise self.unconfigured({accessor!r})" if accessor else "raise self.unconfigured()")
    w.emit(f"return {expr}")


def _emit_identity(w: CodeWriter, model: InterceptorModel) -> None:
    w.emit(f"member = {model.member.name!r}")
    w.emit(f"surface = {model.member.declaring_surface!r}")


# ----------------------------------------------------------------------
# Interceptor classes
# ----------------------------------------------------------------------


def _method_fallback(ctx: _Context, model: MethodModel) -> str:
    plan = model.returns
    parts: list[str] = []
    if plan.result is not None:
        parts.append(ctx.outcome(plan.result))
    for slot in plan.outputs:
        parts.append(slot.parameter.name if slot.outcome is None else ctx.outcome(slot.outcome))
    if not plan.tupled:
        return parts[0] if parts else "None"
    return _tuple_literal(parts)


def _render_method(w: CodeWriter, ctx: _Context, stub: StubModel, model: MethodModel) -> None:
    record = model.names.record_class
    if record:
        ctx.typing.add("NamedTuple")
        with w.block(f"class {record}(NamedTuple):"):
            for p in model.tracked:
                w.emit(f"{p.name}: {p.type.annotation}")
        ctx.gap(w)

    tracked = model.tracked
    if not tracked:
        record_expr = "()"
    elif len(tracked) == 1:
        record_expr = tracked[0].name
    else:
        record_expr = f"{ctx.q(record or '')}({', '.join(p.name for p in tracked)})"

    args = _call_args(model.inputs)
    override_args = f"self.owner, self.type_arguments{args}" if model.generic else f"self.owner{args}"

    with w.block(_class_header(ctx, stub, model.class_name, "MethodInterceptor")):
        _emit_identity(w, model)
        w.blank()
        with w.block(f"def invoke(self{_params(model.inputs)}) -> {_return_annotation(model)}:"):
            w.emit(f"self._record({record_expr})")
            w.emit("_callback = self._next_callback()")
            with w.block("if _callback is not None:"):
                w.emit(f"return _callback(self.owner{args})")
            w.emit("_override = type(self).override")
            with w.block("if _override is not None:"):
                w.emit(f"return _override({override_args})")
            _emit_fallback(w, model.returns.safe, _method_fallback(ctx, model))


def _render_property(w: CodeWriter, ctx: _Context, stub: StubModel, model: PropertyModel) -> None:
    annotation = model.member.return_type.annotation if model.member.return_type else "None"
    with w.block(_class_header(ctx, stub, model.names.interceptor_class, "PropertyInterceptor")):
        _emit_identity(w, model)
        if model.readable:
            w.blank()
            with w.block(f"def get(self) -> {annotation}:"):
                w.emit("self.get_count += 1")
                with w.block("if self.on_get is not None:"):
                    w.emit("return self.on_get(self.owner)")
                w.emit("_override = type(self).override_get")
                with w.block("if _override is not None:"):
                    w.emit("return _override(self.owner)")
                with w.block(f"if self.value is not {ctx.rt('UNSET')}:"):
                    w.emit("return self.value")
                _emit_fallback(w, is_safe(model.outcome), ctx.outcome(model.outcome), "get")
        if model.writable:
            w.blank()
            with w.block(f"def set(self, value: {annotation}) -> None:"):
                w.emit("self.set_count += 1")
                w.emit("self.last_set_value = value")
                with w.block("if self.on_set is not None:"):
                    w.emit("self.on_set(self.owner, value)")
                    w.emit("return")
                w.emit("_override = type(self).override_set")
                with w.block("if _override is not None:"):
                    w.emit("_override(self.owner, value)")
                    w.emit("return")
                w.emit("self.value = value")


def _render_indexer(w: CodeWriter, ctx: _Context, stub: StubModel, model: IndexerModel) -> None:
    key = _key_annotation(model)
    value = model.member.return_type.annotation if model.member.return_type else "None"
    with w.block(_class_header(ctx, stub, model.names.interceptor_class, "IndexerInterceptor")):
        _emit_identity(w, model)
        if model.member.readable:
            w.blank()
            with w.block(f"def get(self, key: {key}) -> {value}:"):
                w.emit("self.get_count += 1")
                w.emit("self.last_get_key = key")
                with w.block("if self.on_get is not None:"):
                    w.emit("return self.on_get(self.owner, key)")
                w.emit("_override = type(self).override_get")
                with w.block("if _override is not None:"):
                    w.emit("return _override(self.owner, key)")
                with w.block("if key in self.backing:"):
                    w.emit("return self.backing[key]")
                _emit_fallback(w, is_safe(model.outcome), ctx.outcome(model.outcome), "get")
        if model.member.writable:
            w.blank()
            with w.block(f"def set(self, key: {key}, value: {value}) -> None:"):
                w.emit("self.set_count += 1")
                w.emit("self.last_set_entry = (key, value)")
                with w.block("if self.on_set is not None:"):
                    w.emit("self.on_set(self.owner, key, value)")
                    w.emit("return")
                w.emit("_override = type(self).override_set")
                with w.block("if _override is not None:"):
                    w.emit("_override(self.owner, key, value)")
                    w.emit("return")
                w.emit("self.backing[key] = value")


def _render_event(w: CodeWriter, ctx: _Context, stub: StubModel, model: EventModel) -> None:
    with w.block(_class_header(ctx, stub, model.names.interceptor_class, "EventInterceptor")):
        _emit_identity(w, model)


def _render_generic(
    w: CodeWriter, ctx: _Context, stub: StubModel, model: GenericMethodModel
) -> None:
    _render_method(w, ctx, stub, model.combination)
    ctx.gap(w)
    header = _class_header(ctx, stub, model.names.interceptor_class, "GenericMethodInterceptor")
    with w.block(header):
        _emit_identity(w, model)


def _render_interceptor(
    w: CodeWriter, ctx: _Context, stub: StubModel, model: InterceptorModel
) -> None:
    if isinstance(model, MethodModel):
        _render_method(w, ctx, stub, model)
    elif isinstance(model, PropertyModel):
        _render_property(w, ctx, stub, model)
    elif isinstance(model, IndexerModel):
        _render_indexer(w, ctx, stub, model)
    elif isinstance(model, EventModel):
        _render_event(w, ctx, stub, model)
    elif isinstance(model, GenericMethodModel):
        _render_generic(w, ctx, stub, model)
    else:
        raise InternalError.unexpected(f"unknown interceptor model {type(model).__name__}")


# ----------------------------------------------------------------------
# Spy container and double
# ----------------------------------------------------------------------


def _construct(ctx: _Context, model: InterceptorModel) -> str:
    cls = ctx.q(model.names.interceptor_class)
    if isinstance(model, GenericMethodModel):
        return f"{cls}(owner, {ctx.q(model.combination.class_name)}, {model.arity})"
    if isinstance(model, PropertyModel) and is_safe(model.outcome):
        return f"{cls}(owner, {ctx.outcome(model.outcome)})"
    if isinstance(model, (MethodModel, PropertyModel, IndexerModel, EventModel)):
        return f"{cls}(owner)"
    raise InternalError.unexpected(f"unknown interceptor model {type(model).__name__}")


def _render_spy(w: CodeWriter, ctx: _Context, stub: StubModel) -> None:
    with w.block(_class_header(ctx, stub, stub.spy_class, "Spy")):
        with w.block(f"def __init__(self, owner: {stub.class_name}) -> None:"):
            if not stub.interceptors:
                w.emit("pass")
            for model in stub.interceptors:
                w.emit(f"self.{model.names.interceptor} = {_construct(ctx, model)}")
            for model in stub.interceptors:
                for alias in model.names.aliases:
                    w.emit(f"self.{alias} = self.{model.names.interceptor}")


def _render_overload_table(w: CodeWriter, ctx: _Context, group: OverloadGroup) -> None:
    w.emit(f"{group.table} = (")
    w.indent()
    for model in group.members:
        params = [repr(p.name) for p in model.inputs]
        types = [p.type.runtime_name or "None" for p in model.inputs]
        w.emit(
            f"{ctx.rt('Overload')}({model.names.interceptor!r}, "
            f"{_tuple_literal(params)}, {_tuple_literal(types)}),"
        )
    w.dedent()
    w.emit(")")


def _render_dispatch(w: CodeWriter, ctx: _Context, stub: StubModel, group: OverloadGroup) -> None:
    spy = f"self.{stub.spy_attribute}"
    resolve = ctx.rt("resolve_overload")
    ctx.typing.add("Any")
    if not group.is_indexer:
        with w.block(f"def {group.name}(self, *args: Any, **kwargs: Any) -> Any:"):
            w.emit(f"_target = {resolve}({group.name!r}, self.{group.table}, args, kwargs)")
            w.emit(f"return getattr({spy}, _target).invoke(*args, **kwargs)")
        return

    first = group.members[0]
    assert isinstance(first, IndexerModel)
    key_args = "(key,)" if len(first.keys) == 1 else "key"
    readable = any(m.member.readable for m in group.members)
    if readable:
        with w.block("def __getitem__(self, key: Any) -> Any:"):
            w.emit(f"_target = {resolve}('indexer', self.{group.table}, {key_args}, {{}})")
            w.emit(f"return getattr({spy}, _target).get(key)")
    if any(m.member.writable for m in group.members):
        if readable:
            w.blank()
        with w.block("def __setitem__(self, key: Any, value: Any) -> None:"):
            w.emit(f"_target = {resolve}('indexer', self.{group.table}, {key_args}, {{}})")
            w.emit(f"getattr({spy}, _target).set(key, value)")


def _render_member(w: CodeWriter, ctx: _Context, stub: StubModel, model: InterceptorModel) -> None:
    spy = f"self.{stub.spy_attribute}.{model.names.interceptor}"
    name = model.member.name
    if isinstance(model, MethodModel):
        with w.block(f"def {name}(self{_params(model.inputs)}) -> {_return_annotation(model)}:"):
            w.emit(f"return {spy}.invoke({_call_args(model.inputs)[2:]})")
    elif isinstance(model, PropertyModel):
        annotation = model.member.return_type.annotation if model.member.return_type else "None"
        w.emit("@property")
        with w.block(f"def {name}(self) -> {annotation}:"):
            if model.readable:
                w.emit(f"return {spy}.get()")
            else:
                w.emit(f"raise AttributeError({f'{name} is write-only'!r})")
        if model.writable:
            w.blank()
            w.emit(f"@{name}.setter")
            with w.block(f"def {name}(self, value: {annotation}) -> None:"):
                w.emit(f"{spy}.set(value)")
    elif isinstance(model, IndexerModel):
        key = _key_annotation(model)
        value = model.member.return_type.annotation if model.member.return_type else "None"
        if model.member.readable:
            with w.block(f"def __getitem__(self, key: {key}) -> {value}:"):
                w.emit(f"return {spy}.get(key)")
        if model.member.writable:
            if model.member.readable:
                w.blank()
            with w.block(f"def __setitem__(self, key: {key}, value: {value}) -> None:"):
                w.emit(f"{spy}.set(key, value)")
    elif isinstance(model, EventModel):
        accessor = ctx.rt("EventAccessor")
        w.emit("@property")
        with w.block(f"def {name}(self) -> {accessor}:"):
            w.emit(f"return {accessor}({spy})")
        w.blank()
        w.emit(f"@{name}.setter")
        with w.block(f"def {name}(self, accessor: {accessor}) -> None:"):
            w.emit(f"{accessor}.assign({spy}, accessor)")
    elif isinstance(model, GenericMethodModel):
        accessor = ctx.rt("GenericMethodAccessor")
        w.emit("@property")
        with w.block(f"def {name}(self) -> {accessor}:"):
            w.emit(f"return {accessor}({spy})")
    else:
        raise InternalError.unexpected(f"unknown interceptor model {type(model).__name__}")


def _render_double(w: CodeWriter, ctx: _Context, stub: StubModel) -> None:
    grouped = {g.name: g for g in stub.overload_groups}
    with w.block(_class_header(ctx, stub, stub.class_name, "StubBase")):
        w.docstring(f"Tracking double for {stub.root}.")
        w.blank()
        w.emit(f"strict = {stub.strict}")
        for group in stub.overload_groups:
            _render_overload_table(w, ctx, group)
        w.blank()
        with w.block("def __init__(self) -> None:"):
            w.emit(f"self.{stub.spy_attribute} = {ctx.q(stub.spy_class)}(self)")

        rendered: set[str] = set()
        for model in stub.interceptors:
            name = model.member.name
            if name in rendered:
                continue
            w.blank()
            if name in grouped:
                rendered.add(name)
                _render_dispatch(w, ctx, stub, grouped[name])
            else:
                _render_member(w, ctx, stub, model)

        if stub.callable_member is not None:
            model = stub.callable_member
            w.blank()
            with w.block(f"def __call__(self{_params(model.inputs)}) -> {_return_annotation(model)}:"):
                spy = f"self.{stub.spy_attribute}.{model.names.interceptor}"
                w.emit(f"return {spy}.invoke({_call_args(model.inputs)[2:]})")


def _render_registry(w: CodeWriter, stub: StubModel) -> None:
    if not stub.interceptors:
        w.emit(f"{stub.class_name}._interceptor_types = {{}}")
        return
    w.emit(f"{stub.class_name}._interceptor_types = {{")
    w.indent()
    for model in stub.interceptors:
        if isinstance(model, GenericMethodModel):
            target = model.combination.class_name
        else:
            target = model.names.interceptor_class
        w.emit(f"{model.names.interceptor!r}: {target},")
    w.dedent()
    w.emit("}")


def _render_stub(w: CodeWriter, ctx: _Context, stub: StubModel) -> None:
    for model in stub.interceptors:
        _render_interceptor(w, ctx, stub, model)
        ctx.gap(w)
    _render_spy(w, ctx, stub)
    ctx.gap(w)
    _render_double(w, ctx, stub)
    w.blank()
    _render_registry(w, stub)


# ----------------------------------------------------------------------
# Unit
# ----------------------------------------------------------------------


def _render_imports(w: CodeWriter, ctx: _Context, body: str) -> None:
    unit = ctx.unit
    w.emit("from __future__ import annotations")
    w.blank()
    if "Awaitable[" in body:
        w.emit("from collections.abc import Awaitable")
    if ctx.typing:
        w.emit(f"from typing import {', '.join(sorted(ctx.typing))}")
    if ctx.typing or "Awaitable[" in body:
        w.blank()
    w.emit(f"from {unit.runtime_module} import (")
    w.indent()
    for name in sorted(ctx.runtime, key=lambda n: (not n.isupper(), n)):
        w.emit(f"{name},")
    w.dedent()
    w.emit(")")

    by_module: dict[str, list[str]] = {}
    for module, name in unit.imports:
        by_module.setdefault(module, []).append(name)
    if by_module:
        w.blank()
        for module in sorted(by_module):
            w.emit(f"from {module} import {', '.join(sorted(set(by_module[module])))}")


def render_unit(unit: UnitModel) -> str:
    """Render a whole generation unit as module source text."""
    ctx = _Context(unit)
    body = CodeWriter(unit.indent)

    type_parameters: list[str] = []
    if unit.strategy is Strategy.NESTED:
        with body.block(f"class {unit.name}:"):
            body.docstring(f"Tracking doubles hosted by {unit.name}.")
            for stub in unit.stubs:
                body.blank()
                _render_stub(body, ctx, stub)
    else:
        for index, stub in enumerate(unit.stubs):
            if index:
                ctx.gap(body)
            _render_stub(body, ctx, stub)
            type_parameters.extend(tp for tp in stub.type_parameters if tp not in type_parameters)

    if type_parameters:
        ctx.typing.add("TypeVar")
    text = body.getvalue()

    head = CodeWriter(unit.indent)
    if unit.header:
        head.emit(HEADER)
        head.emit(f"# Unit: {unit.name} ({unit.strategy.value})")
    _render_imports(head, ctx, text)
    if type_parameters:
        head.blank()
        for tp in type_parameters:
            head.emit(f"{tp} = TypeVar({tp!r})")
    head.blank(2)
    return head.getvalue() + text
