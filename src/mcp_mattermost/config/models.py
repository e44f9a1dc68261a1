"""Pydantic models for application configuration."""

from typing import Annotated, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

NonEmptyStr = Annotated[str, Field(min_length=1)]


class MattermostConfig(BaseModel):
    """Mattermost connection and team selection configuration.

    If neither ``team_names`` nor ``team_ids`` is set, every team the
    token's user belongs to is used.
    """

    url: str = Field(
        ...,
        description="Base URL of the Mattermost server (e.g., 'https://chat.example.com').",
    )
    token: str = Field(
        ...,
        min_length=1,
        description="Personal access token or bot token.",
    )
    team_names: list[NonEmptyStr] | None = Field(
        default=None,
        description="Team URL names to operate on.",
    )
    team_ids: list[NonEmptyStr] | None = Field(
        default=None,
        description="Team IDs to operate on. Resolved before team_names.",
    )

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid Mattermost URL: {value!r}")
        return value.rstrip("/")


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 3002


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "SILENT"] = "INFO"
    format: Literal["json", "text"] = "json"


class AuthConfig(BaseModel):
    """Bearer token authentication configuration."""

    tokens: str | None = Field(
        default=None,
        description=(
            "Comma-separated 'username:token' pairs. "
            "Authentication is disabled when unset or empty."
        ),
    )


class AppConfig(BaseModel):
    """Application configuration."""

    mattermost: MattermostConfig
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
