"""Ready-made descriptors for builtin Python types."""

from stubforge.contract.models import ParameterDescriptor, ParameterMode, TypeDescriptor

INT = TypeDescriptor.value("int", "0")
FLOAT = TypeDescriptor.value("float", "0.0")
BOOL = TypeDescriptor.value("bool", "False")
COMPLEX = TypeDescriptor.value("complex", "0j")
STR = TypeDescriptor.value("str", '""')
BYTES = TypeDescriptor.value("bytes", 'b""')
OBJECT = TypeDescriptor.reference("object")


def list_of(element: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor.container("list", element)


def dict_of(key: TypeDescriptor, value: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor.container("dict", key, value)


def set_of(element: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor.container("set", element)


def optional(inner: TypeDescriptor) -> TypeDescriptor:
    return TypeDescriptor.nullable(inner)


def awaitable(inner: TypeDescriptor | None = None) -> TypeDescriptor:
    return TypeDescriptor.deferred(inner)


def param(
    name: str, type: TypeDescriptor, mode: ParameterMode = ParameterMode.VALUE
) -> ParameterDescriptor:
    return ParameterDescriptor(name, type, mode)


def out(name: str, type: TypeDescriptor) -> ParameterDescriptor:
    return ParameterDescriptor(name, type, ParameterMode.OUT)


def inout(name: str, type: TypeDescriptor) -> ParameterDescriptor:
    return ParameterDescriptor(name, type, ParameterMode.IN_OUT)
