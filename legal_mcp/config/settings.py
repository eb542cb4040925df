"""
Configuration settings for the Legal MCP Server
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Service
    service_name: str = "mcp-cerebra-legal-server"
    service_version: str = "2.0.0"
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=3000, validation_alias=AliasChoices("PORT", "API_PORT"))
    api_reload: bool = False
    cors_enabled: bool = True

    # MCP transport
    mcp_endpoint: str = "/mcp"
    session_timeout_seconds: int = Field(
        default=30 * 60,
        ge=1,
        description="Idle time after which a session is evicted (also the sweep interval)",
    )
    max_body_bytes: int = 5 * 1024 * 1024  # 5 MiB


# Global settings instance
settings = Settings()
