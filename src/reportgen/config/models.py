"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (REPORTGEN__SECTION__KEY)
3. Config YAML (explicit path, or ./reportgen.yaml)
4. Global YAML (~/.config/reportgen/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    REPORTGEN__<SECTION>__<KEY>=<VALUE>

Examples:
    REPORTGEN__LOGGING__LEVEL=DEBUG
    REPORTGEN__PARSER__DEFAULT_ASSEMBLY_NAME=MyProject
    REPORTGEN__PARSER__FILE_FILTERS='["-*/tests/*"]'
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_ASSEMBLY_NAME = "Default"


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

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
        REPORTGEN__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG logs every skipped tracefile block.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ParserConfig(BaseModel):
    """LCOV parser configuration.

    Filter patterns use the form "+Glob" (include) or "-Glob" (exclude).
    A pattern without a sign is an include. Matching is case-insensitive.

    Env vars:
        REPORTGEN__PARSER__DEFAULT_ASSEMBLY_NAME: Name of the synthesized assembly
        REPORTGEN__PARSER__FILE_FILTERS: JSON list of file path patterns
        REPORTGEN__PARSER__CLASS_FILTERS: JSON list of class name patterns
    """

    default_assembly_name: str = Field(
        default=DEFAULT_ASSEMBLY_NAME,
        description="LCOV has no assembly concept; all classes land in one assembly of this name.",
    )
    file_filters: list[str] = Field(
        default_factory=list,
        description="Patterns tested against the normalized SF: path.",
    )
    class_filters: list[str] = Field(
        default_factory=list,
        description="Patterns tested against the class name (file base name).",
    )

    @field_validator("default_assembly_name")
    @classmethod
    def validate_assembly_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Assembly name must not be empty")
        return v

    @field_validator("file_filters", "class_filters")
    @classmethod
    def validate_filters(cls, v: list[str]) -> list[str]:
        for pattern in v:
            if not pattern.lstrip("+-"):
                raise ValueError(f"Empty filter pattern: {pattern!r}")
        return v


class ReportGenConfig(BaseModel):
    """Root configuration for reportgen."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    parser: ParserConfig = Field(default_factory=ParserConfig)
