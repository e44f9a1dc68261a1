"""Configuration module for mcp-mattermost."""

from mcp_mattermost.config.loader import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigParseError,
    EnvVarNotFoundError,
    load_config,
    load_config_from_env,
)
from mcp_mattermost.config.models import (
    AppConfig,
    AuthConfig,
    LoggingConfig,
    MattermostConfig,
    ServerConfig,
)

__all__ = [
    # Exceptions
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigParseError",
    "EnvVarNotFoundError",
    # Functions
    "load_config",
    "load_config_from_env",
    # Models
    "AppConfig",
    "AuthConfig",
    "LoggingConfig",
    "MattermostConfig",
    "ServerConfig",
]
