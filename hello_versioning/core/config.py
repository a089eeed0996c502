"""
Configuration Management.

Loads overrides from config/.env and settings from config/settings/*.yaml.

Overrides (.env or environment, prefix HELLO_):
    HELLO_BASE_URL, HELLO_TIMEOUT

Settings (YAML):
    application.yaml - App identity and server bind address
    client.yaml      - Remote hello service URL, timeout, version signal
    server.yaml      - Version resolution for the reference service
    logging.yaml     - Logging configuration
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from hello_versioning.core.config_schema import (
    ApplicationSchema,
    ClientSchema,
    LoggingSchema,
    ServerSchema,
)


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Deployment overrides from config/.env or the environment."""

    base_url: str | None = None
    timeout: float | None = None

    model_config = SettingsConfigDict(
        env_prefix="HELLO_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._client = _load_validated(ClientSchema, "client.yaml")
        self._server = _load_validated(ServerSchema, "server.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def client(self) -> ClientSchema:
        """Remote hello service settings."""
        return self._client

    @property
    def server(self) -> ServerSchema:
        """Reference service settings."""
        return self._server

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


@lru_cache
def get_settings() -> Settings:
    """Get cached overrides instance. Resolves .env path from project root."""
    env_path = find_project_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_client_settings() -> ClientSchema:
    """
    Client settings from client.yaml with environment overrides applied.

    Returns:
        A ClientSchema; the cached config instance is never mutated.
    """
    client = get_app_config().client
    overrides = get_settings()
    updates: dict[str, Any] = {}
    if overrides.base_url:
        updates["base_url"] = overrides.base_url
    if overrides.timeout is not None:
        updates["timeout"] = overrides.timeout
    return client.model_copy(update=updates) if updates else client
