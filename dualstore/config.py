"""
Configuration settings for Dual Store Sync.

Uses Pydantic Settings to load environment variables for the PostgreSQL and
MongoDB connections, the startup migration behaviour, the HTTP server and
logging.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL (relational store)
    pg_host: str = Field("localhost", alias="PG_HOST")
    pg_port: int = Field(5432, alias="PG_PORT")
    pg_user: str = Field("postgres", alias="PG_USER")
    pg_password: str = Field("root", alias="PG_PASSWORD")
    pg_name: str = Field("migration", alias="PG_NAME")
    pg_pool_min_size: int = Field(1, alias="PG_POOL_MIN_SIZE")
    pg_pool_max_size: int = Field(10, alias="PG_POOL_MAX_SIZE")

    # MongoDB (document store)
    mongo_uri: str = Field("mongodb://localhost:27017", alias="MONGO_URI")
    mongo_database: str = Field("migrationgo", alias="MONGO_DATABASE")

    # Per-call deadline passed through to both stores; None means no deadline.
    store_timeout_seconds: Optional[float] = Field(None, alias="STORE_TIMEOUT_SECONDS")
    connect_attempts: int = Field(3, alias="CONNECT_ATTEMPTS")

    # Startup migration
    migrate_on_startup: bool = Field(True, alias="MIGRATE_ON_STARTUP")
    migration_strict: bool = Field(True, alias="MIGRATION_STRICT")

    # HTTP server
    api_host: str = Field("0.0.0.0", alias="API_HOST")
    api_port: int = Field(8080, alias="API_PORT")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def pg_dsn(self) -> str:
        return (
            f"postgresql://{self.pg_user}:{self.pg_password}"
            f"@{self.pg_host}:{self.pg_port}/{self.pg_name}"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
