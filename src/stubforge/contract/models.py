"""Contract model - immutable descriptions of a declared member surface.

Everything here is a frozen dataclass built from tuples, so values compare by
deep structure and hash stably. That is what lets the pipeline skip a unit
whose contract is structurally equal to one it has already generated.
"""

from __future__ import annotations

import keyword
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum

from stubforge.core.errors import GenerationError

# Canonical naming suffixes for builtin Python types.
_SUFFIX_NAMES: dict[str, str] = {
    "str": "String",
    "int": "Int",
    "float": "Float",
    "bool": "Bool",
    "bytes": "Bytes",
    "bytearray": "ByteArray",
    "complex": "Complex",
    "object": "Object",
    "list": "List",
    "dict": "Dict",
    "set": "Set",
    "frozenset": "FrozenSet",
    "tuple": "Tuple",
    "None": "None",
}

# Types that can be named at runtime without an import.
_BUILTIN_TYPES = frozenset(
    {
        "str",
        "int",
        "float",
        "bool",
        "bytes",
        "bytearray",
        "complex",
        "object",
        "list",
        "dict",
        "set",
        "frozenset",
        "tuple",
    }
)

_NON_WORD = re.compile(r"[^0-9A-Za-z]")


def _check_identifier(name: str, what: str) -> None:
    if not name.isidentifier() or keyword.iskeyword(name):
        raise ValueError(f"{what} must be a Python identifier, got {name!r}")


class TypeKind(Enum):
    """Shape of a type reference, as far as code generation cares."""

    VALUE = "value"  # has a zero value
    NULLABLE = "nullable"  # wraps an inner type, defaults to None
    DEFERRED = "deferred"  # awaitable wrapper around an inner result type
    CONTAINER = "container"  # canonical empty instance via a factory
    REFERENCE = "reference"  # opaque
    TYPE_PARAMETER = "type_parameter"  # unbound placeholder
    ARRAY = "array"
    TUPLE = "tuple"


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """A closed type reference."""

    kind: TypeKind
    name: str
    args: tuple[TypeDescriptor, ...] = ()
    zero: str | None = None  # literal zero value (VALUE)
    factory: str | None = None  # empty-instance constructor (CONTAINER)
    module: str | None = None  # import location for non-builtin names

    @classmethod
    def value(cls, name: str, zero: str) -> TypeDescriptor:
        return cls(TypeKind.VALUE, name, zero=zero)

    @classmethod
    def nullable(cls, inner: TypeDescriptor) -> TypeDescriptor:
        return cls(TypeKind.NULLABLE, "Optional", (inner,))

    @classmethod
    def deferred(cls, inner: TypeDescriptor | None = None) -> TypeDescriptor:
        """Awaitable result. ``inner=None`` models a deferred void."""
        return cls(TypeKind.DEFERRED, "Awaitable", () if inner is None else (inner,))

    @classmethod
    def container(
        cls,
        name: str,
        *args: TypeDescriptor,
        factory: str | None = None,
        module: str | None = None,
    ) -> TypeDescriptor:
        return cls(TypeKind.CONTAINER, name, tuple(args), factory=factory or name, module=module)

    @classmethod
    def reference(
        cls, name: str, *args: TypeDescriptor, module: str | None = None
    ) -> TypeDescriptor:
        return cls(TypeKind.REFERENCE, name, tuple(args), module=module)

    @classmethod
    def type_parameter(cls, name: str) -> TypeDescriptor:
        return cls(TypeKind.TYPE_PARAMETER, name)

    @classmethod
    def array(cls, element: TypeDescriptor) -> TypeDescriptor:
        return cls(TypeKind.ARRAY, "list", (element,))

    @classmethod
    def tuple_of(cls, *elements: TypeDescriptor) -> TypeDescriptor:
        return cls(TypeKind.TUPLE, "tuple", tuple(elements))

    @property
    def inner(self) -> TypeDescriptor | None:
        """Wrapped type for NULLABLE, DEFERRED and ARRAY kinds."""
        if self.kind in (TypeKind.NULLABLE, TypeKind.DEFERRED, TypeKind.ARRAY) and self.args:
            return self.args[0]
        return None

    @property
    def annotation(self) -> str:
        """Python annotation text."""
        if self.kind is TypeKind.NULLABLE:
            return f"{self.args[0].annotation} | None"
        if self.kind is TypeKind.DEFERRED:
            inner = self.args[0].annotation if self.args else "None"
            return f"Awaitable[{inner}]"
        if self.kind is TypeKind.TUPLE:
            if not self.args:
                return "tuple[()]"
            return f"tuple[{', '.join(a.annotation for a in self.args)}]"
        if self.args:
            return f"{self.name}[{', '.join(a.annotation for a in self.args)}]"
        return self.name

    @property
    def suffix(self) -> str:
        """Canonical name fragment used to build generated identifiers.

        Examples:
            str -> "String"
            list[str] (array) -> "StringArray"
            int | None -> "NullableInt"
            tuple[str, int] -> "TupleStringInt"
            dict[str, User] -> "DictStringUser"
        """
        if self.kind is TypeKind.ARRAY:
            return self.args[0].suffix + "Array"
        if self.kind is TypeKind.NULLABLE:
            return "Nullable" + self.args[0].suffix
        if self.kind is TypeKind.TUPLE:
            return "Tuple" + "".join(a.suffix for a in self.args)
        return _simple_suffix(self.name) + "".join(a.suffix for a in self.args)

    @property
    def runtime_name(self) -> str | None:
        """Name usable in an ``isinstance`` check, or None if not resolvable."""
        if self.kind is TypeKind.ARRAY:
            return "list"
        if self.kind is TypeKind.TUPLE:
            return "tuple"
        if self.kind in (TypeKind.VALUE, TypeKind.CONTAINER, TypeKind.REFERENCE):
            if self.name in _BUILTIN_TYPES or self.module is not None:
                return self.name
        return None

    @property
    def canonical(self) -> str:
        """Unambiguous text form. Used for ordering and fingerprints."""
        parts = [self.kind.value, self.name]
        if self.module:
            parts.append(f"@{self.module}")
        text = ":".join(parts)
        if self.args:
            text += "[" + ",".join(a.canonical for a in self.args) + "]"
        return text

    def structural_key(self) -> tuple[object, ...]:
        """Every field, nested types included. Equal keys render identically."""
        return (
            self.kind.value,
            self.name,
            self.zero,
            self.factory,
            self.module,
            tuple(a.structural_key() for a in self.args),
        )

    def free_type_parameters(self) -> frozenset[str]:
        if self.kind is TypeKind.TYPE_PARAMETER:
            return frozenset({self.name})
        found: frozenset[str] = frozenset()
        for arg in self.args:
            found |= arg.free_type_parameters()
        return found

    def substitute(self, bindings: Mapping[str, TypeDescriptor]) -> TypeDescriptor:
        """Replace type parameters by their bound types."""
        if self.kind is TypeKind.TYPE_PARAMETER:
            return bindings.get(self.name, self)
        if not self.args:
            return self
        return replace(self, args=tuple(a.substitute(bindings) for a in self.args))

    def iter_types(self):
        """Yield this type and every nested type argument."""
        yield self
        for arg in self.args:
            yield from arg.iter_types()


def _simple_suffix(name: str) -> str:
    if name in _SUFFIX_NAMES:
        return _SUFFIX_NAMES[name]
    simple = _NON_WORD.sub("", name.rsplit(".", 1)[-1])
    if not simple:
        return "Unknown"
    return simple[0].upper() + simple[1:]


class ParameterMode(Enum):
    """How an argument is passed."""

    VALUE = "value"
    IN_OUT = "in_out"
    OUT = "out"


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    name: str
    type: TypeDescriptor
    mode: ParameterMode = ParameterMode.VALUE

    def __post_init__(self) -> None:
        _check_identifier(self.name, "Parameter name")
        if self.name in ("self", "owner") or self.name.startswith("_"):
            raise ValueError(f"Parameter name {self.name!r} is reserved for generated code")

    @property
    def tracked(self) -> bool:
        """Out parameters are outputs and never enter call history."""
        return self.mode is not ParameterMode.OUT

    def substitute(self, bindings: Mapping[str, TypeDescriptor]) -> ParameterDescriptor:
        return replace(self, type=self.type.substitute(bindings))


@dataclass(frozen=True, slots=True)
class TypeParameter:
    name: str
    constraints: tuple[TypeDescriptor, ...] = ()

    def __post_init__(self) -> None:
        _check_identifier(self.name, "Type parameter name")


class MemberKind(Enum):
    METHOD = "method"
    PROPERTY = "property"
    INDEXER = "indexer"
    EVENT = "event"
    GENERIC_METHOD = "generic_method"


@dataclass(frozen=True, slots=True)
class MemberContract:
    """One declared member.

    For properties ``return_type`` is the property type; for indexers
    ``parameters`` are the keys and ``return_type`` the element type; for
    events ``parameters`` describe the arguments handlers receive.
    """

    kind: MemberKind
    name: str
    parameters: tuple[ParameterDescriptor, ...] = ()
    return_type: TypeDescriptor | None = None
    declaring_surface: str = ""
    type_parameters: tuple[TypeParameter, ...] = ()
    readable: bool = True
    writable: bool = True

    def __post_init__(self) -> None:
        if self.kind is not MemberKind.INDEXER:
            _check_identifier(self.name, "Member name")
        if self.kind is MemberKind.PROPERTY and self.parameters:
            raise ValueError(f"Property {self.name!r} cannot take parameters")
        if self.kind is MemberKind.INDEXER and not self.parameters:
            raise ValueError("Indexer requires at least one key parameter")
        if self.kind is MemberKind.GENERIC_METHOD and not self.type_parameters:
            raise ValueError(f"Generic method {self.name!r} requires type parameters")
        if self.kind is not MemberKind.GENERIC_METHOD and self.type_parameters:
            raise ValueError(f"Only generic methods declare type parameters ({self.name!r})")
        if self.kind in (MemberKind.PROPERTY, MemberKind.INDEXER) and self.return_type is None:
            raise ValueError(f"{self.kind.value} {self.name!r} requires a value type")
        if self.kind in (MemberKind.PROPERTY, MemberKind.INDEXER) and not self.readable:
            if not self.writable:
                raise ValueError(f"{self.kind.value} {self.name!r} has no accessors")
        names = [p.name for p in self.parameters]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate parameter names on {self.name!r}")

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def method(
        cls,
        name: str,
        *parameters: ParameterDescriptor,
        returns: TypeDescriptor | None = None,
        surface: str = "",
    ) -> MemberContract:
        return cls(MemberKind.METHOD, name, tuple(parameters), returns, surface)

    @classmethod
    def generic_method(
        cls,
        name: str,
        type_parameters: tuple[TypeParameter, ...] | tuple[str, ...],
        *parameters: ParameterDescriptor,
        returns: TypeDescriptor | None = None,
        surface: str = "",
    ) -> MemberContract:
        tps = tuple(tp if isinstance(tp, TypeParameter) else TypeParameter(tp) for tp in type_parameters)
        return cls(MemberKind.GENERIC_METHOD, name, tuple(parameters), returns, surface, tps)

    @classmethod
    def prop(
        cls,
        name: str,
        type: TypeDescriptor,
        *,
        readable: bool = True,
        writable: bool = True,
        surface: str = "",
    ) -> MemberContract:
        return cls(
            MemberKind.PROPERTY, name, (), type, surface, readable=readable, writable=writable
        )

    @classmethod
    def indexer(
        cls,
        keys: tuple[ParameterDescriptor, ...] | ParameterDescriptor,
        value_type: TypeDescriptor,
        *,
        readable: bool = True,
        writable: bool = True,
        surface: str = "",
    ) -> MemberContract:
        key_params = keys if isinstance(keys, tuple) else (keys,)
        return cls(
            MemberKind.INDEXER,
            "Indexer",
            key_params,
            value_type,
            surface,
            readable=readable,
            writable=writable,
        )

    @classmethod
    def event(cls, name: str, *parameters: ParameterDescriptor, surface: str = "") -> MemberContract:
        return cls(MemberKind.EVENT, name, tuple(parameters), None, surface)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def is_void(self) -> bool:
        return self.return_type is None

    @property
    def tracked_parameters(self) -> tuple[ParameterDescriptor, ...]:
        return tuple(p for p in self.parameters if p.tracked)

    @property
    def input_parameters(self) -> tuple[ParameterDescriptor, ...]:
        """Parameters present in the Python signature (everything but OUT)."""
        return self.tracked_parameters

    @property
    def by_reference_parameters(self) -> tuple[ParameterDescriptor, ...]:
        return tuple(p for p in self.parameters if p.mode is not ParameterMode.VALUE)

    def _normalized(self) -> MemberContract:
        """Rename method type parameters positionally, so ``<T>`` equals ``<U>``."""
        if not self.type_parameters:
            return self
        bindings = {
            tp.name: TypeDescriptor.type_parameter(f"_{i}") for i, tp in enumerate(self.type_parameters)
        }
        return replace(
            self,
            parameters=tuple(p.substitute(bindings) for p in self.parameters),
            return_type=self.return_type.substitute(bindings) if self.return_type else None,
        )

    def parameter_key(self) -> tuple[tuple[str, str], ...]:
        """Parameter types and modes, ignoring names."""
        normalized = self._normalized()
        return tuple((p.type.canonical, p.mode.value) for p in normalized.parameters)

    def signature_key(self) -> tuple[object, ...]:
        """Identity for signature equality.

        Kind, name, parameter types and modes, return type, accessors and
        generic arity. Declaring surface and parameter names do not take part.
        """
        normalized = self._normalized()
        return (
            self.kind.value,
            self.name,
            self.parameter_key(),
            normalized.return_type.canonical if normalized.return_type else None,
            self.readable,
            self.writable,
            len(self.type_parameters),
        )

    def structural_key(self) -> tuple[object, ...]:
        """Full identity, parameter and type parameter names included."""
        return (
            self.kind.value,
            self.name,
            tuple((p.name, p.type.structural_key(), p.mode.value) for p in self.parameters),
            self.return_type.structural_key() if self.return_type else None,
            self.declaring_surface,
            tuple(
                (tp.name, tuple(c.structural_key() for c in tp.constraints))
                for tp in self.type_parameters
            ),
            self.readable,
            self.writable,
        )

    def describe(self) -> str:
        """Human-readable signature for diagnostics."""
        params = ", ".join(
            f"{'out ' if p.mode is ParameterMode.OUT else 'inout ' if p.mode is ParameterMode.IN_OUT else ''}"
            f"{p.name}: {p.type.annotation}"
            for p in self.parameters
        )
        returns = self.return_type.annotation if self.return_type else "None"
        if self.kind is MemberKind.PROPERTY:
            access = "/".join(a for a, on in (("get", self.readable), ("set", self.writable)) if on)
            return f"property {self.name}: {returns} {{{access}}}"
        if self.kind is MemberKind.INDEXER:
            return f"indexer [{params}] -> {returns}"
        if self.kind is MemberKind.EVENT:
            return f"event {self.name}({params})"
        generic = ""
        if self.type_parameters:
            generic = "[" + ", ".join(tp.name for tp in self.type_parameters) + "]"
        return f"{self.name}{generic}({params}) -> {returns}"

    def free_type_parameters(self) -> frozenset[str]:
        own = {tp.name for tp in self.type_parameters}
        found: frozenset[str] = frozenset()
        for p in self.parameters:
            found |= p.type.free_type_parameters()
        if self.return_type is not None:
            found |= self.return_type.free_type_parameters()
        return found - own

    def substitute(self, bindings: Mapping[str, TypeDescriptor]) -> MemberContract:
        # Method-level type parameters shadow type-level bindings.
        own = {tp.name for tp in self.type_parameters}
        effective = {k: v for k, v in bindings.items() if k not in own} if own else bindings
        if not effective:
            return self
        return replace(
            self,
            parameters=tuple(p.substitute(effective) for p in self.parameters),
            return_type=self.return_type.substitute(effective) if self.return_type else None,
        )

    def with_surface(self, surface: str) -> MemberContract:
        return replace(self, declaring_surface=surface)


class ContractKind(Enum):
    INTERFACE = "interface"
    CALLABLE = "callable"  # a single-signature callable type


CALLABLE_MEMBER_NAME = "Invoke"


@dataclass(frozen=True, slots=True)
class ContractType:
    """A contract declaration: its own members plus its direct supertypes."""

    name: str
    members: tuple[MemberContract, ...] = ()
    supertypes: tuple[ContractType, ...] = ()
    type_parameters: tuple[str, ...] = ()
    type_arguments: tuple[TypeDescriptor, ...] = ()
    kind: ContractKind = ContractKind.INTERFACE
    module: str | None = None

    def __post_init__(self) -> None:
        _check_identifier(self.name, "Contract name")
        for tp in self.type_parameters:
            _check_identifier(tp, "Type parameter name")
        if self.type_arguments and len(self.type_arguments) != len(self.type_parameters):
            raise GenerationError.arity_mismatch(
                self.name, len(self.type_parameters), len(self.type_arguments)
            )
        if self.kind is ContractKind.CALLABLE:
            if len(self.members) != 1 or self.members[0].kind is not MemberKind.METHOD:
                raise ValueError(f"Callable contract {self.name!r} must declare exactly one method")
            if self.supertypes:
                raise ValueError(f"Callable contract {self.name!r} cannot have supertypes")

    @classmethod
    def callable(
        cls,
        name: str,
        *parameters: ParameterDescriptor,
        returns: TypeDescriptor | None = None,
        type_parameters: tuple[str, ...] = (),
        module: str | None = None,
    ) -> ContractType:
        invoke = MemberContract.method(CALLABLE_MEMBER_NAME, *parameters, returns=returns)
        return cls(
            name,
            (invoke,),
            type_parameters=type_parameters,
            kind=ContractKind.CALLABLE,
            module=module,
        )

    @property
    def is_bound(self) -> bool:
        return len(self.type_arguments) == len(self.type_parameters)

    @property
    def display_name(self) -> str:
        """``IRepository[User]`` for instantiations, the plain name otherwise."""
        if self.type_arguments:
            return f"{self.name}[{', '.join(a.annotation for a in self.type_arguments)}]"
        return self.name

    @property
    def argument_suffix(self) -> str:
        return "".join(a.suffix for a in self.type_arguments)

    def bindings(self) -> dict[str, TypeDescriptor]:
        return dict(zip(self.type_parameters, self.type_arguments, strict=False))

    def instantiate(self, *arguments: TypeDescriptor) -> ContractType:
        """Bind type arguments. The count must match the declared parameters."""
        if len(arguments) != len(self.type_parameters):
            raise GenerationError.arity_mismatch(
                self.name, len(self.type_parameters), len(arguments)
            )
        return replace(self, type_arguments=tuple(arguments))
