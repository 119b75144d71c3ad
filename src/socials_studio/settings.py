"""Server settings loaded from ``SOCIALS_STUDIO_*`` environment variables.

Example .env:
    SOCIALS_STUDIO_HOST=0.0.0.0
    SOCIALS_STUDIO_PORT=8000
    SOCIALS_STUDIO_CORS_ORIGINS=["http://localhost:3000"]
    SOCIALS_STUDIO_PROVIDERS_CONFIG=config/providers.yaml
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """HTTP server and runtime settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SOCIALS_STUDIO_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="127.0.0.1", description="Server bind address.")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port.")
    log_dir: Path = Field(default=Path("logs"), description="Directory for ai_calls.log.")
    log_level: str = Field(default="INFO", description="Level for the application loggers.")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware.",
    )
    providers_config: Path | None = Field(
        default=None,
        description="Path to providers.yaml. Defaults to config/providers.yaml.",
    )


def get_settings() -> ServerSettings:
    """Load settings from the environment and .env."""
    return ServerSettings()
