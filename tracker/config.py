"""
Configuration and settings for the progress tracker.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_prefix="TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_prefix: str = Field(default="/api")

    # Which DocumentStore adapter to build.
    storage_backend: Literal["memory", "file", "sql", "s3"] = Field(default="file")

    # Local file backend
    data_dir: str = Field(default=".")

    # SQL backend (Postgres/Supabase expected, SQLite works for local runs)
    database_url: Optional[str] = Field(default=None)

    # S3-compatible object storage
    s3_bucket: Optional[str] = Field(default=None)
    s3_region: Optional[str] = Field(default=None)
    s3_endpoint: Optional[str] = Field(default=None)
    s3_prefix: str = Field(default="progress")
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # Tenants
    tenants: list[str] = Field(default_factory=lambda: ["user1", "user2"])
    single_tenant: bool = Field(default=False)
    default_tenant: str = Field(default="default")

    # Login accounts for the in-memory credential store, as a JSON list of
    # {"username", "password", "userType"} objects.
    users: list[dict] = Field(default_factory=list)

    # HTTP
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    static_dir: Optional[str] = Field(default=None)
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
