"""
Quote client settings using Pydantic for environment-based configuration.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Quote client configuration using Pydantic settings."""

    server_url: str = Field(
        default="http://localhost:8080/cotacao",
        description="Quote server endpoint",
    )
    request_timeout: float = Field(
        default=0.3, gt=0, description="Deadline in seconds for the whole request"
    )
    output_path: str = Field(
        default="cotacao.txt", description="File the bid is written to"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


client_settings = ClientSettings()
