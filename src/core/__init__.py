"""Core skill components."""

from .config import ConfigLoader, ChromeConfig, MonitoringConfig, CamelModel
from .errors import (
    SkillError,
    ArgumentError,
    ConfigError,
    BrowserError,
    DocumentError,
)

__all__ = [
    "ConfigLoader",
    "ChromeConfig",
    "MonitoringConfig",
    "CamelModel",
    "SkillError",
    "ArgumentError",
    "ConfigError",
    "BrowserError",
    "DocumentError",
]
