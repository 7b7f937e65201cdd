"""Skill error definitions."""

from typing import Optional, Any
from enum import Enum


class ErrorCategory(Enum):
    """Error categories for reporting."""
    ARGUMENT = "argument"         # Missing or invalid command-line input
    CONFIG = "config"             # Unreadable or malformed JSON/YAML input
    EXTERNAL = "external"         # Browser or file-format library failure
    VALIDATION = "validation"     # Input content not usable by the skill


class SkillError(Exception):
    """Base exception for all skill errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.EXTERNAL,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize error for logging."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "context": {k: v for k, v in self.context.items() if v is not None},
        }


class ArgumentError(SkillError):
    """Required argument missing or inconsistent."""

    def __init__(self, message: str, argument: Optional[str] = None, **kwargs):
        kwargs.setdefault("category", ErrorCategory.ARGUMENT)
        super().__init__(message, **kwargs)
        self.context["argument"] = argument


class ConfigError(SkillError):
    """Configuration file loading or validation error."""

    def __init__(self, message: str, config_path: Optional[str] = None, **kwargs):
        kwargs.setdefault("category", ErrorCategory.CONFIG)
        super().__init__(message, **kwargs)
        self.context["config_path"] = config_path


class BrowserError(SkillError):
    """Browser automation error."""

    def __init__(
        self,
        message: str,
        selector: Optional[str] = None,
        url: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.context["selector"] = selector
        self.context["url"] = url


class DocumentError(SkillError):
    """Spreadsheet, presentation, document or PDF processing error."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        kwargs.setdefault("category", ErrorCategory.VALIDATION)
        super().__init__(message, **kwargs)
        self.context["path"] = path
