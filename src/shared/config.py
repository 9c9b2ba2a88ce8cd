# Configuration loader with environment variable support

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import RouterBaseModel

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_ROUTES_FILENAME = "routes.yaml"
DEFAULT_SEPARATOR = "\n\n---\n\n"
DEFAULT_MISSING_MARKER = "<!-- missing: {ref} -->"


class AppConfig(BaseModel):
    name: str = "docs-router-mcp"
    version: str = "1.0.0"
    log_level: str = "INFO"
    environment: str = "development"


class ServerConfig(BaseModel):
    name: str = "mvp24hours-dotnet-mcp"
    instructions: Optional[str] = None


class DocsConfig(BaseModel):
    """Where the documentation corpus lives and how composites are joined."""

    base_path: str = "docs"
    encoding: str = "utf-8"
    separator: str = DEFAULT_SEPARATOR
    missing_marker: str = DEFAULT_MISSING_MARKER
    concurrent_reads: bool = True

    @field_validator("missing_marker")
    @classmethod
    def validate_missing_marker(cls, v):
        """The marker must name the missing ref so it stays debuggable"""
        if "{ref}" not in v:
            raise ValueError("missing_marker must contain the '{ref}' placeholder")
        return v


class RoutingConfig(BaseModel):
    routes_path: Optional[str] = None
    uri_scheme: Optional[str] = None  # Overrides the scheme declared in routes.yaml
    examples_per_listing: int = Field(default=2, ge=1, le=2)


class Config(RouterBaseModel):
    """Main configuration model"""

    app: AppConfig = Field(default_factory=AppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    docs: DocsConfig = Field(default_factory=DocsConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)


class Settings(BaseSettings):
    """Environment-based settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
        populate_by_name=True,
    )

    env: str = Field(default="development", alias="ENV")
    config_path: Optional[str] = Field(default=None, alias="CONFIG_PATH")
    routes_path: Optional[str] = Field(default=None, alias="ROUTES_PATH")
    docs_path: Optional[str] = Field(default=None, alias="DOCS_PATH")
    log_level: Optional[str] = Field(default=None, alias="LOG_LEVEL")
    stdio_mode: bool = Field(default=False, alias="DOCS_ROUTER_STDIO_MODE")


def resolve_path(value: str, base: Path = PROJECT_ROOT) -> Path:
    """Resolve a config path; relative paths are anchored at the project root."""
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return path.resolve()


def _apply_env_overrides(config: Config, settings: Settings) -> None:
    if settings.docs_path:
        config.docs.base_path = settings.docs_path
    if settings.routes_path:
        config.routing.routes_path = settings.routes_path
    if settings.log_level:
        config.app.log_level = settings.log_level.upper()


def get_routes_path(config: Config, config_path: Optional[Path] = None) -> Path:
    """Locate routes.yaml: explicit setting first, else next to the config file."""
    if config.routing.routes_path:
        return resolve_path(config.routing.routes_path)
    if config_path is not None:
        return (config_path.parent / DEFAULT_ROUTES_FILENAME).resolve()
    return (PROJECT_ROOT / "config" / DEFAULT_ROUTES_FILENAME).resolve()


def load_config() -> tuple[Config, Settings]:
    """
    Load configuration from YAML file and environment variables.

    Returns:
        tuple: (Config, Settings) - YAML config and environment settings

    Raises:
        FileNotFoundError: If config file not found
        ValueError: If configuration validation fails
    """
    settings = Settings()

    if settings.config_path:
        config_path = Path(settings.config_path)
    else:
        config_path = PROJECT_ROOT / "config" / f"{settings.env}.yaml"

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    config = Config(**config_dict)
    _apply_env_overrides(config, settings)
    if not config.routing.routes_path:
        config.routing.routes_path = str(get_routes_path(config, config_path))

    validate_config_at_startup(config, settings)

    return config, settings


def validate_config_at_startup(config: Config, settings: Settings) -> None:
    """
    Validate critical configuration at startup.

    Raises:
        ValueError: If critical validation fails
    """
    logger.info(
        "Docs configuration loaded: base_path=%s routes=%s env=%s",
        config.docs.base_path,
        config.routing.routes_path,
        settings.env,
    )

    if not config.docs.separator:
        raise ValueError("docs.separator must not be empty")

    docs_root = resolve_path(config.docs.base_path)
    if not docs_root.is_dir():
        if settings.env in {"development", "test"}:
            logger.warning(
                "Documentation directory %s does not exist; every document "
                "will resolve as missing",
                docs_root,
            )
        else:
            raise ValueError(f"docs.base_path does not exist: {docs_root}")

    logger.info("Configuration validation successful")


# Global config instances (loaded once at startup)
_config: Optional[Config] = None
_settings: Optional[Settings] = None


def get_config() -> Config:
    """Get the global Config instance"""
    global _config, _settings
    if _config is None:
        _config, _settings = load_config()
    return _config


def get_settings() -> Settings:
    """Get the global Settings instance"""
    global _config, _settings
    if _settings is None:
        _config, _settings = load_config()
    return _settings


def init_config() -> tuple[Config, Settings]:
    """Initialize and cache global config instances"""
    global _config, _settings
    _config, _settings = load_config()
    return _config, _settings


def reload_config() -> tuple[Config, Settings]:
    """Force reload of config/settings from disk and environment."""
    global _config, _settings
    _config, _settings = load_config()
    return _config, _settings
