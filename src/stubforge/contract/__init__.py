"""Contract model exports."""

from stubforge.contract.models import (
    CALLABLE_MEMBER_NAME,
    ContractKind,
    ContractType,
    MemberContract,
    MemberKind,
    ParameterDescriptor,
    ParameterMode,
    TypeDescriptor,
    TypeKind,
    TypeParameter,
)

__all__ = [
    "CALLABLE_MEMBER_NAME",
    "ContractKind",
    "ContractType",
    "MemberContract",
    "MemberKind",
    "ParameterDescriptor",
    "ParameterMode",
    "TypeDescriptor",
    "TypeKind",
    "TypeParameter",
]
