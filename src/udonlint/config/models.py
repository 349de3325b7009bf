"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (UDONLINT__SECTION__KEY)
3. Project YAML (<project>/.udonlint.yaml)
4. Global YAML (~/.config/udonlint/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    UDONLINT__<SECTION>__<KEY>=<VALUE>

Examples:
    UDONLINT__LOGGING__LEVEL=DEBUG
    UDONLINT__ANALYSIS__MAX_WORKERS=4
    UDONLINT__OUTPUT__CODE_PREFIX=UDON
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


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
        UDONLINT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. Diagnostics are unaffected; this only controls "
        "operational events such as skipped files and phase timings.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class AnalysisConfig(BaseModel):
    """Restricted-subset rules configuration.

    Env vars:
        UDONLINT__ANALYSIS__BASE_TYPE: Sandboxed base type name
        UDONLINT__ANALYSIS__MAX_WORKERS: Worker threads (0 = interpreter default)
    """

    base_type: str = Field(
        default="UdonSharpBehaviour",
        description="Types inheriting (directly or transitively) from this are entry points.",
    )
    marker_import: str = Field(
        default="UdonSharp",
        description="Namespace whose using directive marks a file as UdonSharp source.",
    )
    serializable_attributes: list[str] = Field(
        default_factory=lambda: ["Serializable"],
        description="Attribute names marking plain-data types (Attribute suffix optional).",
    )
    network_callable_attribute: str = Field(default="NetworkCallable")
    field_change_callback_attribute: str = Field(default="FieldChangeCallback")
    max_network_callable_parameters: int = Field(
        default=8,
        description="Parameter ceiling for network-callable methods.",
    )
    external_namespaces: list[str] = Field(
        default_factory=lambda: ["UnityEngine", "VRC.SDKBase", "VRC.Udon", "TMPro", "UdonSharp"],
        description="Library namespaces; types declared in them are never plain-data types.",
    )
    disabled_rules: list[int] = Field(
        default_factory=list,
        description="Rule codes that are never evaluated.",
    )
    max_workers: int = Field(
        default=0,
        description="Worker threads for parsing and rule evaluation. 0 uses the "
        "ThreadPoolExecutor default.",
    )

    @field_validator("max_network_callable_parameters", "max_workers")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Must be >= 0, got {v}")
        return v

    @field_validator("serializable_attributes")
    @classmethod
    def strip_attribute_suffix(cls, v: list[str]) -> list[str]:
        return [name.removesuffix("Attribute") for name in v]


class DiscoveryConfig(BaseModel):
    """Source file discovery configuration."""

    extensions: list[str] = Field(default_factory=lambda: [".cs"])
    excluded_dirs: list[str] | None = Field(
        default=None,
        description="Directory names pruned during the walk. None uses the built-in "
        "Unity defaults (Temp, Library, obj, bin, Editor, ...).",
    )


class OutputConfig(BaseModel):
    """Diagnostic output configuration."""

    code_prefix: str = Field(default="UDON", description="Prefix of rendered rule codes.")
    tool_name: str = Field(default="udonsharp-lint")


class UdonLintConfig(BaseModel):
    """Root configuration for udonlint."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
