"""Configuration management for renderctl using Pydantic."""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from renderctl.core.exceptions import ConfigError
from renderctl.core.logging import LogLevel
from renderctl.core.output import OutputFormat

DEFAULT_BASE_URL = "https://api.render.com"


class RenderConfig(BaseModel):
    """Render API configuration."""

    api_key: str | None = None
    service_id: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: int = 30

    def get_api_key(self) -> str | None:
        """Get API key from config or environment."""
        key = self.api_key
        if key == "from_env" or key is None:
            key = os.environ.get("RENDERCTL_API_KEY") or os.environ.get("RENDER_API_KEY")
        return key

    def get_service_id(self) -> str | None:
        """Get service ID from config or environment."""
        return (
            os.environ.get("RENDERCTL_SERVICE_ID")
            or os.environ.get("RENDER_SERVICE_ID")
            or self.service_id
        )

    def get_base_url(self) -> str:
        """Get API base URL from config or environment."""
        return os.environ.get("RENDERCTL_BASE_URL") or self.base_url


class MonitorConfig(BaseModel):
    """Deployment status polling configuration."""

    poll_interval: float = 30
    max_wait: float = 3600  # seconds; 0 disables the deadline
    max_consecutive_errors: int = 5
    backoff_max: float = 300

    @field_validator("poll_interval", "backoff_max")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("max_wait")
    @classmethod
    def validate_max_wait(cls, v: float) -> float:
        if v < 0:
            raise ValueError("max_wait must not be negative")
        return v

    @field_validator("max_consecutive_errors")
    @classmethod
    def validate_error_budget(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_consecutive_errors must be at least 1")
        return v


class HealthConfig(BaseModel):
    """Post-deployment health check configuration."""

    path: str = "/health"
    max_attempts: int = 10
    interval: float = 30
    timeout: float = 10
    required: bool = True  # exhaustion fails the run

    @field_validator("max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_attempts must be at least 1")
        return v

    @field_validator("interval", "timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        return v if v.startswith("/") else f"/{v}"


class ProfileConfig(BaseModel):
    """Profile configuration grouping all service settings."""

    render: RenderConfig = Field(default_factory=RenderConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    health: HealthConfig = Field(default_factory=HealthConfig)


class GlobalConfig(BaseModel):
    """Global settings."""

    output_format: OutputFormat = OutputFormat.TABLE
    color: str = "auto"  # auto, always, never
    verbosity: LogLevel = LogLevel.WARNING

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if v not in ("auto", "always", "never"):
            raise ValueError("color must be 'auto', 'always', or 'never'")
        return v


class RenderCtlConfig(BaseModel):
    """Main configuration model."""

    model_config = {"populate_by_name": True}

    version: str = "1"
    global_settings: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    profiles: dict[str, ProfileConfig] = Field(default_factory=lambda: {"default": ProfileConfig()})

    def get_profile(self, name: str | None = None) -> ProfileConfig:
        """Get a profile by name, defaulting to 'default'."""
        profile_name = name or "default"
        if profile_name not in self.profiles:
            raise ConfigError(f"Profile '{profile_name}' not found")
        return self.profiles[profile_name]


class RunInputs(BaseSettings):
    """Per-run deployment inputs, usually provided by the CI environment."""

    model_config = SettingsConfigDict(extra="ignore")

    environment: Literal["staging", "production"] = Field(
        default="staging",
        validation_alias=AliasChoices("RENDERCTL_ENVIRONMENT", "DEPLOY_ENVIRONMENT"),
    )
    runtime_version: str = Field(
        default="latest",
        validation_alias=AliasChoices("RENDERCTL_RUNTIME_VERSION"),
    )
    commit: str = Field(
        default="",
        validation_alias=AliasChoices("RENDERCTL_COMMIT", "GITHUB_SHA"),
    )
    actor: str = Field(
        default="",
        validation_alias=AliasChoices("RENDERCTL_ACTOR", "GITHUB_ACTOR"),
    )
    image_name: str = Field(
        default="app",
        validation_alias=AliasChoices("RENDERCTL_IMAGE_NAME"),
    )

    def image_url(self) -> str:
        """Image reference built from the image name and commit."""
        if not self.commit:
            raise ConfigError("Cannot derive image URL: no commit (set --image or GITHUB_SHA)")
        return f"{self.image_name}:{self.commit}"


class ConfigLoader:
    """Loads and merges configuration from multiple sources."""

    CONFIG_FILENAMES = ["renderctl.yaml", "renderctl.yml", ".renderctl.yaml", ".renderctl.yml"]

    def __init__(self):
        self._config: RenderCtlConfig | None = None

    def load(self, config_file: str | Path | None = None) -> RenderCtlConfig:
        """Load configuration from files.

        Priority (highest to lowest):
        1. Explicitly specified config file
        2. Project config (./renderctl.yaml)
        3. User config (~/.renderctl/config.yaml)

        Args:
            config_file: Optional explicit config file path

        Returns:
            Merged configuration
        """
        configs: list[dict[str, Any]] = []

        user_config_path = Path.home() / ".renderctl" / "config.yaml"
        if user_config_path.exists():
            configs.append(self._load_yaml_file(user_config_path))

        project_config = self._find_project_config()
        if project_config:
            configs.append(self._load_yaml_file(project_config))

        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ConfigError(f"Config file not found: {config_file}")
            configs.append(self._load_yaml_file(config_path))

        merged = self._merge_configs(configs)

        try:
            self._config = RenderCtlConfig(**merged)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}")
        return self._config

    def _find_project_config(self) -> Path | None:
        """Find project config file in current or parent directories."""
        current = Path.cwd()

        while current != current.parent:
            for filename in self.CONFIG_FILENAMES:
                config_path = current / filename
                if config_path.exists():
                    return config_path
            current = current.parent

        return None

    def _load_yaml_file(self, path: Path) -> dict[str, Any]:
        """Load a YAML config file."""
        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}")

        if not isinstance(content, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return content

    def _merge_configs(self, configs: list[dict[str, Any]]) -> dict[str, Any]:
        """Deep merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = self._deep_merge(result, config)
        return result

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


_config_loader = ConfigLoader()


def load_config(config_file: str | Path | None = None) -> RenderCtlConfig:
    """Load renderctl configuration.

    Args:
        config_file: Optional explicit config file path

    Returns:
        Loaded configuration
    """
    return _config_loader.load(config_file)


def get_default_config() -> RenderCtlConfig:
    """Get default configuration without loading from files."""
    return RenderCtlConfig()
