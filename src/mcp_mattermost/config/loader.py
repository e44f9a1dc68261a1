"""Configuration loaders for YAML files and environment variables."""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from mcp_mattermost.config.models import AppConfig

# Regex pattern for environment variable: matches ${VAR_NAME} exactly
ENV_VAR_PATTERN = re.compile(r"^\$\{([A-Za-z_][A-Za-z0-9_]*)\}$")

# Levels accepted from MCP_LOG_LEVEL; anything else falls back to INFO
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "SILENT")
LOG_LEVEL_ALIASES = {"WARN": "WARNING"}


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigFileNotFoundError(ConfigError):
    """Raised when the configuration file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the YAML file cannot be parsed."""


class EnvVarNotFoundError(ConfigError):
    """Raised when an environment variable is not found."""


def expand_env_vars(data: Any) -> Any:
    """Expand environment variables in the configuration data.

    Only expands complete string values matching ${VAR_NAME} pattern.
    Does not expand partial matches like "prefix${VAR}suffix".

    Args:
        data: Configuration data (dict, list, or scalar value).

    Returns:
        Data with environment variables expanded.

    Raises:
        EnvVarNotFoundError: If an environment variable is not defined.
    """
    if isinstance(data, dict):
        return {key: expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        match = ENV_VAR_PATTERN.match(data)
        if match:
            var_name = match.group(1)
            value = os.environ.get(var_name)
            if value is None:
                raise EnvVarNotFoundError(
                    f"Environment variable '{var_name}' not found"
                )
            return value
        return data
    else:
        return data


def load_config(path: Path) -> AppConfig:
    """Load and validate configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Validated AppConfig instance.

    Raises:
        ConfigFileNotFoundError: If the file does not exist.
        ConfigParseError: If the YAML cannot be parsed.
        EnvVarNotFoundError: If an environment variable is not defined.
        ValidationError: If the configuration fails Pydantic validation.
    """
    if not path.exists():
        raise ConfigFileNotFoundError(f"Configuration file not found: {path}")

    # Variables already set in the environment take precedence over .env
    load_dotenv(path.parent / ".env", override=False)

    try:
        with open(path) as f:
            raw_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Failed to parse YAML: {e}") from e

    if raw_data is None:
        raw_data = {}

    expanded_data = expand_env_vars(raw_data)
    return AppConfig(**expanded_data)


def split_csv(value: str | None) -> list[str] | None:
    """Split a comma-separated value, trimming entries and dropping blanks.

    Args:
        value: Raw environment variable value.

    Returns:
        List of entries, or None if the value is unset or holds no entries.
    """
    if not value:
        return None
    items = [item.strip() for item in value.split(",")]
    return [item for item in items if item] or None


def load_config_from_env(
    environ: Mapping[str, str] | None = None,
    env_file: Path | None = None,
) -> AppConfig:
    """Build configuration from MCP_* environment variables.

    Recognized variables:
        MCP_MATTERMOST_URL, MCP_MATTERMOST_TOKEN: Server URL and token.
        MCP_MATTERMOST_TEAM_NAME, MCP_MATTERMOST_TEAM_ID: Comma-separated teams.
        MCP_HTTP_HOST, MCP_HTTP_PORT: Listen address.
        MCP_LOG_LEVEL, MCP_LOG_FORMAT: Logging options.
        MCP_AUTH_TOKENS: Comma-separated 'username:token' pairs.

    Args:
        environ: Environment mapping. If None, uses os.environ.
        env_file: Optional .env file merged into os.environ before reading.
            Variables already set keep their values.

    Returns:
        Validated AppConfig instance.

    Raises:
        ValidationError: If the configuration fails Pydantic validation.
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)
    env = os.environ if environ is None else environ

    data: dict[str, Any] = {
        "mattermost": {
            "url": env.get("MCP_MATTERMOST_URL", ""),
            "token": env.get("MCP_MATTERMOST_TOKEN", ""),
            "team_names": split_csv(env.get("MCP_MATTERMOST_TEAM_NAME")),
            "team_ids": split_csv(env.get("MCP_MATTERMOST_TEAM_ID")),
        },
        "server": {},
        "logging": {},
        "auth": {"tokens": env.get("MCP_AUTH_TOKENS")},
    }

    if "MCP_HTTP_HOST" in env:
        data["server"]["host"] = env["MCP_HTTP_HOST"]
    if "MCP_HTTP_PORT" in env:
        data["server"]["port"] = env["MCP_HTTP_PORT"]
    if "MCP_LOG_LEVEL" in env:
        level = env["MCP_LOG_LEVEL"].upper()
        level = LOG_LEVEL_ALIASES.get(level, level)
        data["logging"]["level"] = level if level in LOG_LEVELS else "INFO"
    if "MCP_LOG_FORMAT" in env:
        data["logging"]["format"] = env["MCP_LOG_FORMAT"].lower()

    return AppConfig(**data)
