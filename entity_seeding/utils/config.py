"""
Configuration management for the seeding library.

Configuration is read from environment variables, with a ``.env`` file loaded
through python-dotenv first. Values are validated once and cached; tests call
``reset_config()`` after patching the environment.

Environment variables:
- SEEDING_DATABASE_URL: SQLAlchemy async URL of the seeding database
- SEEDING_SYNCHRONIZE: create missing tables when the data source initializes
- SEEDING_ECHO: echo SQL statements
- SEEDING_LOG_LEVEL: structlog filtering level
- SEEDING_LOG_FORMAT: "json" or "console"
- SEEDING_MAX_FACTORY_DEPTH: nesting limit for factory resolution (unset = unlimited)
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import structlog
from dotenv import load_dotenv

from .error_handling import ConfigurationError

logger = structlog.get_logger(__name__)

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
LOG_FORMATS = ("json", "console")

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _parse_depth(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    try:
        depth = int(value)
    except ValueError:
        raise ConfigurationError(f"SEEDING_MAX_FACTORY_DEPTH must be an integer, got {value!r}")
    if depth < 1:
        raise ConfigurationError("SEEDING_MAX_FACTORY_DEPTH must be at least 1")
    return depth


@dataclass
class SeedingConfig:
    """Seeding configuration structure with validation"""
    database_url: str = DEFAULT_DATABASE_URL
    synchronize: bool = True
    echo: bool = False
    log_level: str = "INFO"
    log_format: str = "json"
    max_factory_depth: Optional[int] = None

    def __post_init__(self):
        """Validate configuration after initialization"""
        if not self.database_url:
            raise ConfigurationError("Seeding database URL is required")
        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(f"Unknown log level: {self.log_level}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"Log format must be one of {', '.join(LOG_FORMATS)}, got {self.log_format!r}"
            )

    @classmethod
    def from_env(cls) -> "SeedingConfig":
        """Build the configuration from environment variables."""
        return cls(
            database_url=os.environ.get('SEEDING_DATABASE_URL', DEFAULT_DATABASE_URL),
            synchronize=_parse_bool('SEEDING_SYNCHRONIZE', os.environ.get('SEEDING_SYNCHRONIZE', 'true')),
            echo=_parse_bool('SEEDING_ECHO', os.environ.get('SEEDING_ECHO', 'false')),
            log_level=os.environ.get('SEEDING_LOG_LEVEL', 'INFO'),
            log_format=os.environ.get('SEEDING_LOG_FORMAT', 'json').lower(),
            max_factory_depth=_parse_depth(os.environ.get('SEEDING_MAX_FACTORY_DEPTH')),
        )


_config: Optional[SeedingConfig] = None


def get_config() -> SeedingConfig:
    """
    Get the process-wide seeding configuration.

    Returns:
        SeedingConfig loaded from the environment on first use
    """
    global _config
    if _config is None:
        load_dotenv()
        _config = SeedingConfig.from_env()
        logger.debug("config.loaded", log_level=_config.log_level, log_format=_config.log_format)
    return _config


def reset_config() -> None:
    """Forget the cached configuration so the next access re-reads the environment."""
    global _config
    _config = None
