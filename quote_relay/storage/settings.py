"""
Storage settings using Pydantic for environment-based configuration.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration for database and storage-related settings."""

    database_path: str = Field(
        default="./database.db", description="Path to SQLite database file"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


storage_settings = StorageSettings()
