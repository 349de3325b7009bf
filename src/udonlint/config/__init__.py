"""Config module exports."""

from udonlint.config.loader import load_config
from udonlint.config.models import (
    AnalysisConfig,
    DiscoveryConfig,
    LoggingConfig,
    OutputConfig,
    UdonLintConfig,
)

__all__ = [
    "load_config",
    "AnalysisConfig",
    "DiscoveryConfig",
    "LoggingConfig",
    "OutputConfig",
    "UdonLintConfig",
]
