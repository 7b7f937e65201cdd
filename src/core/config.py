"""Configuration loading and validation."""

import os
import json
from pathlib import Path
from typing import Any, Optional, TypeVar, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .errors import ConfigError

ModelT = TypeVar("ModelT", bound=BaseModel)

EXECUTABLE_PATH_ENV = "BROWSER_EXECUTABLE_PATH"
HEADLESS_ENV = "BROWSER_HEADLESS"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class CamelModel(BaseModel):
    """Base model for JSON inputs written with camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class MonitoringConfig(CamelModel):
    """Dashboard monitoring loop settings."""
    interval: int = Field(default=300, ge=0)          # Seconds between checks
    checks: int = Field(default=1, ge=1)
    output: str = Field(default="dashboard_status.json")
    settle_ms: int = Field(default=3000, ge=0)        # Delay after network idle


class ChromeConfig(CamelModel):
    """Browser skill configuration (chrome skill config.json)."""
    headless: bool = Field(default=True)
    timeout: int = Field(default=30000, ge=1000)      # Milliseconds
    viewport_width: int = Field(default=1920, ge=320)
    viewport_height: int = Field(default=1080, ge=240)
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    executable_path: Optional[str] = Field(default=None)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    @classmethod
    def from_env(cls, **overrides: Any) -> "ChromeConfig":
        """Build config from environment variables, then apply overrides."""
        values: dict[str, Any] = {}
        if os.getenv(EXECUTABLE_PATH_ENV):
            values["executable_path"] = os.getenv(EXECUTABLE_PATH_ENV)
        if os.getenv(HEADLESS_ENV):
            values["headless"] = os.getenv(HEADLESS_ENV, "true").lower() == "true"
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class ConfigLoader:
    """Loads JSON/YAML skill inputs and validates them against models."""

    def __init__(self, base_dir: str = "."):
        self.base_dir = Path(base_dir)

    def load_file(self, path: Union[str, Path]) -> Any:
        """Load YAML or JSON file."""
        path = self._resolve(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}", config_path=str(path))

        try:
            content = path.read_text(encoding="utf-8")
            if path.suffix in (".yaml", ".yml"):
                return yaml.safe_load(content) or {}
            return json.loads(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}", config_path=str(path))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON: {e}", config_path=str(path))

    def load_model(self, path: Union[str, Path], model: type[ModelT]) -> ModelT:
        """Load a file and validate it as `model`."""
        data = self.load_file(path)
        return self.validate(data, model, config_path=str(path))

    def load_chrome_config(self, path: Optional[str] = None, **overrides: Any) -> ChromeConfig:
        """Load browser config from file (if given) merged over environment defaults."""
        base = ChromeConfig.from_env()
        if path:
            data = self.load_file(path)
            merged = base.model_dump(by_alias=True)
            merged.update(data if isinstance(data, dict) else {})
            base = self.validate(merged, ChromeConfig, config_path=path)
        if not overrides:
            return base

        merged = base.model_dump()
        merged["monitoring"].update(
            {k: v for k, v in overrides.pop("monitoring", {}).items() if v is not None}
        )
        merged.update({k: v for k, v in overrides.items() if v is not None})
        return self.validate(merged, ChromeConfig, config_path=path)

    @staticmethod
    def validate(data: Any, model: type[ModelT], config_path: Optional[str] = None) -> ModelT:
        """Validate raw data against a model, raising ConfigError on failure."""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ConfigError(
                f"Invalid {model.__name__}: {e.error_count()} error(s): {e.errors()[0]['msg']}",
                config_path=config_path,
            )

    def _resolve(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.base_dir / path
