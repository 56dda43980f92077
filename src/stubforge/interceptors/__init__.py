"""Interceptor model builder, default value policy and generic specialization."""

from stubforge.interceptors.builder import build_interceptor, build_stub, return_plan
from stubforge.interceptors.defaults import (
    VOID,
    Deferred,
    NoSafeDefault,
    Outcome,
    Value,
    default_for,
    is_safe,
)
from stubforge.interceptors.generics import build_generic_method, check_type_parameters
from stubforge.interceptors.models import (
    EventModel,
    GenericMethodModel,
    IndexerModel,
    InterceptorModel,
    MethodModel,
    OutputSlot,
    OverloadGroup,
    PropertyModel,
    ReturnPlan,
    Strategy,
    StubModel,
    UnitModel,
)

__all__ = [
    # Builder
    "build_interceptor",
    "build_stub",
    "return_plan",
    # Defaults
    "VOID",
    "Deferred",
    "NoSafeDefault",
    "Outcome",
    "Value",
    "default_for",
    "is_safe",
    # Generics
    "build_generic_method",
    "check_type_parameters",
    # Models
    "EventModel",
    "GenericMethodModel",
    "IndexerModel",
    "InterceptorModel",
    "MethodModel",
    "OutputSlot",
    "OverloadGroup",
    "PropertyModel",
    "ReturnPlan",
    "Strategy",
    "StubModel",
    "UnitModel",
]
