"""Stubforge - build-time generator of tracking test doubles."""

from stubforge.pipeline import (
    Diagnostic,
    GenerationCache,
    GenerationResult,
    GenerationUnit,
    Strategy,
    generate,
    generate_all,
)

__version__ = "0.1.0"

__all__ = [
    "Diagnostic",
    "GenerationCache",
    "GenerationResult",
    "GenerationUnit",
    "Strategy",
    "__version__",
    "generate",
    "generate_all",
]
