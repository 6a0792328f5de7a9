"""
Quote server settings using Pydantic for environment-based configuration.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """Quote server configuration using Pydantic settings."""

    server_host: str = Field(default="0.0.0.0", description="Server host address")
    server_port: int = Field(default=8080, description="Server port number")

    upstream_url: str = Field(
        default="https://economia.awesomeapi.com.br/json/last/USD-BRL",
        description="Upstream quote provider URL",
    )
    upstream_pair_key: str = Field(
        default="USDBRL",
        description="Key the provider nests the quote under",
    )

    fetch_timeout: float = Field(
        default=0.2, gt=0, description="Deadline in seconds for the upstream call"
    )
    persist_timeout: float = Field(
        default=0.01, gt=0, description="Deadline in seconds for storing the quote"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


server_settings = ServerSettings()
