"""Configuration management for Blendfold."""

from blendfold.core.config.loader import (
    configure_logging,
    detect_format,
    load_app_config,
    load_config,
)
from blendfold.core.config.models import (
    AnalysisConfig,
    AppConfig,
    LoggingConfig,
    OptimizerConfig,
    SpeedConfig,
)

__all__ = [
    # Loaders
    "detect_format",
    "load_config",
    "load_app_config",
    "configure_logging",
    # Models
    "AppConfig",
    "AnalysisConfig",
    "LoggingConfig",
    "OptimizerConfig",
    "SpeedConfig",
]
