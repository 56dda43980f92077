"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (STUBFORGE__SECTION__KEY)
3. Repo YAML (.stubforge/config.yaml)
4. Global YAML (~/.config/stubforge/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    STUBFORGE__<SECTION>__<KEY>=<VALUE>

Examples:
    STUBFORGE__LOGGING__LEVEL=DEBUG
    STUBFORGE__GENERATION__STRICT_DEFAULT=true
    STUBFORGE__CACHE__MAX_ENTRIES=64
"""

import keyword
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        STUBFORGE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every pipeline stage of every unit.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class GenerationConfig(BaseModel):
    """Code emission settings.

    Env vars:
        STUBFORGE__GENERATION__STRICT_DEFAULT: Strict mode when a unit does not say
        STUBFORGE__GENERATION__SPY_ATTRIBUTE: Attribute holding the interceptors
        STUBFORGE__GENERATION__RUNTIME_MODULE: Module generated code imports from
    """

    strict_default: bool = Field(
        default=False,
        description="Strict mode for units whose declaration leaves it unset.",
    )
    spy_attribute: str = Field(
        default="spy",
        description="Instance attribute that exposes interceptors on generated doubles. "
        "Renamed with trailing underscores when a contract member already uses it.",
    )
    runtime_module: str = Field(
        default="stubforge.runtime",
        description="Module that generated code imports its support classes from.",
    )
    emit_header: bool = Field(
        default=True,
        description="Emit a 'generated code' banner at the top of standalone units.",
    )
    indent: int = Field(
        default=4,
        description="Spaces per indentation level in emitted code.",
    )

    @field_validator("spy_attribute")
    @classmethod
    def validate_spy_attribute(cls, v: str) -> str:
        if not v.isidentifier() or keyword.iskeyword(v):
            raise ValueError(f"Must be a Python identifier, got {v!r}")
        return v

    @field_validator("runtime_module")
    @classmethod
    def validate_runtime_module(cls, v: str) -> str:
        if not all(part.isidentifier() for part in v.split(".")):
            raise ValueError(f"Must be a dotted module path, got {v!r}")
        return v

    @field_validator("indent")
    @classmethod
    def validate_indent(cls, v: int) -> int:
        if not (1 <= v <= 8):
            raise ValueError(f"Indent must be 1-8, got {v}")
        return v


class CacheConfig(BaseModel):
    """Generation cache configuration.

    Env vars:
        STUBFORGE__CACHE__ENABLED: Skip structurally-equal units already generated
        STUBFORGE__CACHE__MAX_ENTRIES: Entries kept before the oldest is evicted
    """

    enabled: bool = Field(
        default=True,
        description="Reuse results for structurally-equal units.",
    )
    max_entries: int = Field(
        default=256,
        description="Maximum cached units. Oldest entries are evicted first.",
    )

    @field_validator("max_entries")
    @classmethod
    def validate_max_entries(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_entries must be positive, got {v}")
        return v


class StubforgeConfig(BaseModel):
    """Root configuration (for type hints; use StubforgeSettings to load with env support)."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
