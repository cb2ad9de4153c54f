"""
Configuration settings for surreal-crud.

Uses Pydantic Settings to load the SurrealDB connection fields and logging
options from environment variables (or a local `.env` file). The defaults
point at a local development database.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DbConfig(BaseModel):
    """
    Connection parameters for a single SurrealDB handle.
    """

    url: str = Field("ws://localhost:8000/rpc", description="RPC endpoint of the database.")
    namespace: str = Field("test", description="SurrealDB namespace.")
    database: str = Field("test", description="SurrealDB database name.")
    username: str = Field("root", description="Root or namespace user.")
    password: str = Field("root", description="Password for `username`.")

    model_config = {"frozen": True}


DEFAULT_CONFIG = DbConfig()


class Settings(BaseSettings):
    # Database
    surreal_url: str = Field(DEFAULT_CONFIG.url, alias="SURREAL_URL")
    surreal_namespace: str = Field(DEFAULT_CONFIG.namespace, alias="SURREAL_NAMESPACE")
    surreal_database: str = Field(DEFAULT_CONFIG.database, alias="SURREAL_DATABASE")
    surreal_username: str = Field(DEFAULT_CONFIG.username, alias="SURREAL_USERNAME")
    surreal_password: str = Field(DEFAULT_CONFIG.password, alias="SURREAL_PASSWORD")

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

    def db_config(self) -> DbConfig:
        """Build the connection config described by these settings."""
        return DbConfig(
            url=self.surreal_url,
            namespace=self.surreal_namespace,
            database=self.surreal_database,
            username=self.surreal_username,
            password=self.surreal_password,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["DEFAULT_CONFIG", "DbConfig", "Settings", "get_settings"]
