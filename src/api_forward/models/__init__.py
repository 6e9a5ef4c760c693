"""Pydantic models for API Forward."""

from api_forward.models.config import (
    AdminConfig,
    AppSettings,
    CorsConfig,
    ServerConfig,
    StorageConfig,
)
from api_forward.models.endpoints import (
    DEFAULT_GROUP,
    EndpointDefinition,
    ParameterSchema,
    ProxySettings,
    Snapshot,
    UrlConstruction,
)

__all__ = [
    "AdminConfig",
    "AppSettings",
    "CorsConfig",
    "DEFAULT_GROUP",
    "EndpointDefinition",
    "ParameterSchema",
    "ProxySettings",
    "ServerConfig",
    "Snapshot",
    "StorageConfig",
    "UrlConstruction",
]
