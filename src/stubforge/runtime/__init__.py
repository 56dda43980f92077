"""Support library imported by generated doubles."""

from stubforge.runtime.accessors import (
    EventAccessor,
    GenericMethodAccessor,
    Overload,
    resolve_overload,
)
from stubforge.runtime.errors import SequenceExhausted, UnconfiguredAccess, VerificationFailed
from stubforge.runtime.stub import Spy, StubBase
from stubforge.runtime.times import MethodSequence, Times
from stubforge.runtime.tracking import (
    EventInterceptor,
    GenericMethodInterceptor,
    IndexerInterceptor,
    Interceptor,
    MethodInterceptor,
    PropertyInterceptor,
)
from stubforge.runtime.values import UNSET, Completed, completed

__all__ = [
    # Doubles
    "Spy",
    "StubBase",
    # Interceptors
    "EventInterceptor",
    "GenericMethodInterceptor",
    "IndexerInterceptor",
    "Interceptor",
    "MethodInterceptor",
    "PropertyInterceptor",
    # Call sites
    "EventAccessor",
    "GenericMethodAccessor",
    "Overload",
    "resolve_overload",
    # Behavior
    "MethodSequence",
    "Times",
    # Values
    "UNSET",
    "Completed",
    "completed",
    # Errors
    "SequenceExhausted",
    "UnconfiguredAccess",
    "VerificationFailed",
]
