"""Config module exports."""

from stubforge.config.loader import StubforgeSettings, load_config
from stubforge.config.models import (
    CacheConfig,
    GenerationConfig,
    LoggingConfig,
    LogOutputConfig,
    StubforgeConfig,
)

__all__ = [
    "load_config",
    "CacheConfig",
    "GenerationConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "StubforgeConfig",
    "StubforgeSettings",
]
