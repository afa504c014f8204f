"""Configuration management for shipctl using Pydantic."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shipctl.core.exceptions import ConfigError
from shipctl.core.logging import LogLevel
from shipctl.core.output import OutputFormat

DEFAULT_API_URL = "https://api.shipctl.dev"


class EnvSettings(BaseSettings):
    """Overrides read from SHIPCTL_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="SHIPCTL_", extra="ignore")

    api_url: str | None = None
    token: str | None = None
    service_id: str | None = None
    no_fallback: bool = False


class RemoteConfig(BaseModel):
    """Remote build service configuration."""

    api_url: str = DEFAULT_API_URL
    token: str | None = None
    service_id: str | None = None
    timeout: int = 30
    upload_timeout: int = 600
    poll_interval: float = 5.0
    max_wait: float = 600.0

    def get_api_url(self) -> str:
        """Get API URL from environment or config."""
        return EnvSettings().api_url or self.api_url

    def get_token(self) -> str | None:
        """Get session token from config or environment."""
        token = self.token
        if token == "from_env" or token is None:
            token = EnvSettings().token
        return token

    def get_service_id(self) -> str | None:
        """Get linked service ID from environment or config."""
        return EnvSettings().service_id or self.service_id


class BuildSettings(BaseModel):
    """Local build behaviour."""

    fallback: bool = True
    default_tag: str = "latest"
    port_detection: bool = True
    timeout: int | None = None
    secrets_env_prefix: str = "SHIPCTL_SECRET_"

    def fallback_enabled(self) -> bool:
        """Fallback is on unless disabled in config or by SHIPCTL_NO_FALLBACK."""
        return self.fallback and not EnvSettings().no_fallback


class ProfileConfig(BaseModel):
    """Profile configuration grouping all service settings."""

    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    build: BuildSettings = Field(default_factory=BuildSettings)


class PluginConfig(BaseModel):
    """A `use` block naming a builder or platform plus its raw settings."""

    use: str
    config: dict[str, Any] = Field(default_factory=dict)

    @field_validator("use")
    @classmethod
    def validate_use(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("use must name a plugin")
        return v


class AppConfig(BaseModel):
    """Application build and deploy definition."""

    name: str = ""
    path: str = "."
    labels: dict[str, str] = Field(default_factory=dict)
    build: PluginConfig
    deploy: PluginConfig = Field(default_factory=lambda: PluginConfig(use="noop"))


class GlobalConfig(BaseModel):
    """Global settings."""

    output_format: OutputFormat = OutputFormat.TABLE
    color: str = "auto"  # auto, always, never
    verbosity: LogLevel = LogLevel.WARNING
    dry_run: bool = False

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if v not in ("auto", "always", "never"):
            raise ValueError("color must be 'auto', 'always', or 'never'")
        return v


class ShipCtlConfig(BaseModel):
    """Main configuration model."""

    model_config = {"populate_by_name": True}

    version: str = "1"
    project: str | None = None
    global_settings: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    profiles: dict[str, ProfileConfig] = Field(default_factory=lambda: {"default": ProfileConfig()})
    apps: dict[str, AppConfig] = Field(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        for name, app in self.apps.items():
            if not app.name:
                app.name = name

    def get_profile(self, name: str | None = None) -> ProfileConfig:
        """Get a profile by name, defaulting to 'default'."""
        profile_name = name or "default"
        if profile_name not in self.profiles:
            if profile_name == "default":
                return ProfileConfig()
            raise ConfigError(f"Profile '{profile_name}' not found")
        return self.profiles[profile_name]

    def get_app(self, name: str) -> AppConfig | None:
        """Get an application definition by name."""
        return self.apps.get(name)


class ConfigLoader:
    """Loads and merges configuration from multiple sources."""

    CONFIG_FILENAMES = ["shipctl.yaml", "shipctl.yml", ".shipctl.yaml", ".shipctl.yml"]

    def __init__(self):
        self._config: ShipCtlConfig | None = None

    def load(
        self,
        config_file: str | Path | None = None,
        profile: str | None = None,
    ) -> ShipCtlConfig:
        """Load configuration from files and environment.

        Priority (highest to lowest):
        1. Explicitly specified config file
        2. Project config (./shipctl.yaml)
        3. User config (~/.shipctl/config.yaml)

        Args:
            config_file: Optional explicit config file path
            profile: Profile name to use

        Returns:
            Merged configuration
        """
        configs: list[dict[str, Any]] = []

        user_config_path = Path.home() / ".shipctl" / "config.yaml"
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
            self._config = ShipCtlConfig(**merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}")

        if profile:
            self._config.get_profile(profile)
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
            raise ConfigError(f"Invalid config in {path}: expected a mapping")
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


def load_config(
    config_file: str | Path | None = None,
    profile: str | None = None,
) -> ShipCtlConfig:
    """Load shipctl configuration.

    Args:
        config_file: Optional explicit config file path
        profile: Profile name to use

    Returns:
        Loaded configuration
    """
    return _config_loader.load(config_file, profile)


def get_default_config() -> ShipCtlConfig:
    """Get default configuration without loading from files."""
    return ShipCtlConfig()
