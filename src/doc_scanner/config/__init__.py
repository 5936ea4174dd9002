"""Configuration package for the document scanner."""

from .logging_config import setup_logging, LoggingConfig, LoggedOperation, StructuredLogger
from .settings import ConfigError, Settings, load_settings

__all__ = [
    # Logging
    "setup_logging",
    "LoggingConfig",
    "LoggedOperation",
    "StructuredLogger",
    # Settings
    "ConfigError",
    "Settings",
    "load_settings",
]
