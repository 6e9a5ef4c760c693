"""Application settings models for API Forward."""

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"


class StorageConfig(BaseModel):
    """Where the endpoint snapshot is persisted."""

    db_path: str = "data/config.db"
    backup_path: str = "config.json"
    enable_file_operations: bool = True


class AdminConfig(BaseModel):
    """Shared-secret admin cookie settings."""

    token: str = "admin"
    cookie_name: str = "api_forward_admin_token"
    cookie_max_age: int = 24 * 60 * 60


class CorsConfig(BaseModel):
    """CORS configuration."""

    allow_origins: list[str] = Field(default_factory=lambda: ["*"])


class AppSettings(BaseModel):
    """Root settings for the service."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)
    cors: CorsConfig = Field(default_factory=CorsConfig)
