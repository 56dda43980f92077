"""Generation pipeline exports."""

from stubforge.interceptors.models import Strategy
from stubforge.pipeline.cache import CacheStats, GenerationCache
from stubforge.pipeline.models import Diagnostic, GenerationResult, GenerationUnit
from stubforge.pipeline.ops import flatten_unit, generate, generate_all, unit_fingerprint

__all__ = [
    "CacheStats",
    "Diagnostic",
    "GenerationCache",
    "GenerationResult",
    "GenerationUnit",
    "Strategy",
    "flatten_unit",
    "generate",
    "generate_all",
    "unit_fingerprint",
]
