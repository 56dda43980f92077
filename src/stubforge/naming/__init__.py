"""Naming resolver exports."""

from stubforge.naming.resolver import (
    SPY_RESERVED,
    STUB_RESERVED,
    MemberNames,
    NameAssignment,
    assign_names,
    stub_class_names,
)

__all__ = [
    "SPY_RESERVED",
    "STUB_RESERVED",
    "MemberNames",
    "NameAssignment",
    "assign_names",
    "stub_class_names",
]
