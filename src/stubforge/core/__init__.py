"""Core module exports."""

from stubforge.core.errors import (
    ConfigError,
    ErrorCode,
    GenerationError,
    InternalError,
    StubforgeError,
)
from stubforge.core.logging import (
    clear_unit_id,
    configure_logging,
    get_logger,
    get_unit_id,
    set_unit_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "GenerationError",
    "InternalError",
    "StubforgeError",
    # Logging
    "clear_unit_id",
    "configure_logging",
    "get_logger",
    "get_unit_id",
    "set_unit_id",
]
