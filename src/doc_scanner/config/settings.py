"""Centralized settings management for the document scanner."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger


DEFAULT_CONFIG_FILE = Path("config/settings.json")

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
VALID_DASHBOARD_STATUSES = {"all", "open", "closed"}
VALID_DASHBOARD_SORTS = {"newest", "oldest", "recently-closed"}


class ConfigError(Exception):
    """Raised when settings cannot be loaded or are invalid."""
    pass


@dataclass(frozen=True)
class Settings:
    """Centralized application settings."""

    # Storage
    database_path: Path = Path("doc_scanner.db")
    documents_directory: Path = Path("documents")

    # Remote document store
    api_base_url: Optional[str] = None
    api_token: Optional[str] = None
    request_timeout_seconds: float = 10.0

    # Logging
    log_level: str = "INFO"
    log_file: Path = Path("logs/doc_scanner.log")

    # Dashboard defaults
    dashboard_status: str = "all"
    dashboard_sort: str = "newest"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")
        if self.request_timeout_seconds <= 0:
            raise ValueError("Request timeout must be positive")
        if self.dashboard_status not in VALID_DASHBOARD_STATUSES:
            raise ValueError(f"Invalid dashboard status: {self.dashboard_status}")
        if self.dashboard_sort not in VALID_DASHBOARD_SORTS:
            raise ValueError(f"Invalid dashboard sort: {self.dashboard_sort}")
        if self.api_base_url is not None and not self.api_base_url.startswith(("http://", "https://")):
            raise ValueError("API base URL must start with http:// or https://")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Settings:
        """Create Settings from a plain dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(sorted(unknown))}")

        values: Dict[str, Any] = {key: value for key, value in data.items() if key in known}
        for path_field in ("database_path", "documents_directory", "log_file"):
            if path_field in values:
                values[path_field] = Path(values[path_field])
        return cls(**values)


def load_settings(config_file: Optional[Path] = None) -> Settings:
    """Load application settings from a JSON file.

    Args:
        config_file: Path to the settings file. A missing file yields defaults.

    Returns:
        Loaded Settings instance.

    Raises:
        ConfigError: If the file cannot be read or holds invalid settings.
    """
    config_file = config_file or DEFAULT_CONFIG_FILE
    if not config_file.exists():
        logger.debug(f"No settings file at {config_file}, using defaults")
        return Settings()

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("settings file must contain a JSON object")

        settings: Settings = Settings.from_dict(data)
        logger.info(f"Settings loaded successfully from {config_file}")
        return settings

    except Exception as e:
        logger.error(f"Failed to load settings: {e}")
        raise ConfigError(f"Failed to load settings from {config_file}: {e}") from e
