"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    ClientSchema       → client.yaml
    ServerSchema       → server.yaml
    LoggingSchema      → logging.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# Shared
# =============================================================================


class VersioningSchema(_StrictBase):
    """How the API version travels on the wire.

    ``header`` sends it as ``header_name``, ``parameter`` as the query
    parameter ``parameter_name``. ``default_version`` is only consulted when
    resolving an incoming request that carries no version.
    """

    strategy: Literal["header", "parameter"] = "header"
    header_name: str = Field(default="X-API-VERSION", min_length=1)
    parameter_name: str = Field(default="api-version", min_length=1)
    default_version: str | None = None


# =============================================================================
# application.yaml
# =============================================================================


class HostPortSchema(_StrictBase):
    host: str
    port: int


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    server: HostPortSchema


# =============================================================================
# client.yaml
# =============================================================================


class ClientSchema(_StrictBase):
    base_url: str
    timeout: float = Field(gt=0)
    versioning: VersioningSchema


# =============================================================================
# server.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    versioning: VersioningSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: Literal["json", "console"]
    handlers: HandlersSchema
