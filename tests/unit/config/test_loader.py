"""Tests for config loader."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from mcp_mattermost.config.loader import (
    ConfigFileNotFoundError,
    ConfigParseError,
    EnvVarNotFoundError,
    expand_env_vars,
    load_config,
    load_config_from_env,
    split_csv,
)
from mcp_mattermost.config.models import AppConfig

BASE_ENV = {
    "MCP_MATTERMOST_URL": "https://mattermost.example.com",
    "MCP_MATTERMOST_TOKEN": "bot-token",
}


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_config(self, tmp_path: Path) -> None:
        """Load a valid config file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
mattermost:
  url: "https://mattermost.example.com/"
  token: "bot-token"
  team_names:
    - engineering
    - sales
server:
  port: 9000
""")

        config = load_config(config_file)

        assert isinstance(config, AppConfig)
        assert config.mattermost.url == "https://mattermost.example.com"
        assert config.mattermost.team_names == ["engineering", "sales"]
        assert config.mattermost.team_ids is None
        assert config.server.port == 9000
        assert config.server.host == "0.0.0.0"

    def test_file_not_found(self) -> None:
        """File not found raises ConfigFileNotFoundError."""
        with pytest.raises(ConfigFileNotFoundError) as exc_info:
            load_config(Path("/nonexistent/path/config.yaml"))

        assert "not found" in str(exc_info.value).lower()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Invalid YAML format raises ConfigParseError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("invalid: yaml: format:")

        with pytest.raises(ConfigParseError):
            load_config(config_file)

    def test_missing_required_field(self, tmp_path: Path) -> None:
        """Missing mattermost section raises ValidationError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
server:
  port: 8080
""")

        with pytest.raises(ValidationError) as exc_info:
            load_config(config_file)

        errors = exc_info.value.errors()
        assert any(e["loc"] == ("mattermost",) for e in errors)

    def test_empty_file_raises_validation_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        with pytest.raises(ValidationError):
            load_config(config_file)


class TestExpandEnvVars:
    """Tests for expand_env_vars function."""

    def test_expand_string_env_var(self) -> None:
        with patch.dict(os.environ, {"MM_TOKEN": "secret"}, clear=False):
            result = expand_env_vars("${MM_TOKEN}")

        assert result == "secret"

    def test_expand_nested_dict(self) -> None:
        with patch.dict(os.environ, {"MM_TOKEN": "secret"}, clear=False):
            data = {"mattermost": {"token": "${MM_TOKEN}"}}
            result = expand_env_vars(data)

        assert result["mattermost"]["token"] == "secret"

    def test_expand_in_list(self) -> None:
        with patch.dict(os.environ, {"VAR1": "value1", "VAR2": "value2"}, clear=False):
            data = ["${VAR1}", "${VAR2}", "static"]
            result = expand_env_vars(data)

        assert result == ["value1", "value2", "static"]

    def test_no_expansion_for_partial_match(self) -> None:
        with patch.dict(os.environ, {"VAR": "value"}, clear=False):
            result = expand_env_vars("prefix${VAR}suffix")

        assert result == "prefix${VAR}suffix"

    def test_undefined_env_var_raises_error(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(EnvVarNotFoundError) as exc_info:
                expand_env_vars("${UNDEFINED_VAR}")

            assert "UNDEFINED_VAR" in str(exc_info.value)

    def test_non_string_values_unchanged(self) -> None:
        data = {
            "port": 8080,
            "enabled": True,
            "ratio": 0.5,
            "nothing": None,
        }
        result = expand_env_vars(data)

        assert result == data


class TestLoadConfigWithEnvVars:
    """Tests for load_config with environment variable expansion."""

    def test_load_config_with_env_vars(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
mattermost:
  url: "https://mattermost.example.com"
  token: ${MM_TOKEN}
""")

        with patch.dict(os.environ, {"MM_TOKEN": "expanded-token"}, clear=False):
            config = load_config(config_file)

        assert config.mattermost.token == "expanded-token"

    def test_load_config_with_undefined_env_var(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
mattermost:
  url: "https://mattermost.example.com"
  token: ${UNDEFINED_MM_TOKEN}
""")

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(EnvVarNotFoundError):
                load_config(config_file)


class TestLoadConfigWithDotEnv:
    """Tests for .env loading next to the config file."""

    def test_loads_env_file_from_config_directory(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("MM_TOKEN=from-dotenv\n")
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
mattermost:
  url: "https://mattermost.example.com"
  token: ${MM_TOKEN}
""")

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(config_file)

        assert config.mattermost.token == "from-dotenv"

    def test_existing_env_var_takes_precedence(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("MM_TOKEN=from-dotenv\n")
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
mattermost:
  url: "https://mattermost.example.com"
  token: ${MM_TOKEN}
""")

        with patch.dict(os.environ, {"MM_TOKEN": "from-environ"}, clear=True):
            config = load_config(config_file)

        assert config.mattermost.token == "from-environ"

    def test_no_error_when_env_file_missing(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
mattermost:
  url: "https://mattermost.example.com"
  token: "plain"
""")

        config = load_config(config_file)

        assert config.mattermost.token == "plain"


class TestSplitCsv:
    """Tests for split_csv function."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, None),
            ("", None),
            ("team-a", ["team-a"]),
            ("team-a,team-b", ["team-a", "team-b"]),
            (" team-a , team-b ", ["team-a", "team-b"]),
            ("team-a,,team-b,", ["team-a", "team-b"]),
            (" , ,", None),
        ],
    )
    def test_split(self, value: str | None, expected: list[str] | None) -> None:
        assert split_csv(value) == expected


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    def test_minimal_environment(self) -> None:
        config = load_config_from_env(BASE_ENV)

        assert config.mattermost.url == "https://mattermost.example.com"
        assert config.mattermost.token == "bot-token"
        assert config.mattermost.team_names is None
        assert config.mattermost.team_ids is None
        assert config.server.port == 3002
        assert config.logging.level == "INFO"
        assert config.auth.tokens is None

    def test_single_team_name(self) -> None:
        env = {**BASE_ENV, "MCP_MATTERMOST_TEAM_NAME": "engineering"}

        config = load_config_from_env(env)

        assert config.mattermost.team_names == ["engineering"]

    def test_multiple_team_names_and_ids(self) -> None:
        env = {
            **BASE_ENV,
            "MCP_MATTERMOST_TEAM_NAME": "engineering, sales",
            "MCP_MATTERMOST_TEAM_ID": "id-1,id-2,",
        }

        config = load_config_from_env(env)

        assert config.mattermost.team_names == ["engineering", "sales"]
        assert config.mattermost.team_ids == ["id-1", "id-2"]

    def test_blank_team_variables_mean_unset(self) -> None:
        env = {
            **BASE_ENV,
            "MCP_MATTERMOST_TEAM_NAME": "",
            "MCP_MATTERMOST_TEAM_ID": " , ",
        }

        config = load_config_from_env(env)

        assert config.mattermost.team_names is None
        assert config.mattermost.team_ids is None

    def test_missing_url_raises(self) -> None:
        with pytest.raises(ValidationError):
            load_config_from_env({"MCP_MATTERMOST_TOKEN": "bot-token"})

    def test_invalid_url_raises(self) -> None:
        env = {**BASE_ENV, "MCP_MATTERMOST_URL": "not a url"}

        with pytest.raises(ValidationError):
            load_config_from_env(env)

    def test_missing_token_raises(self) -> None:
        with pytest.raises(ValidationError):
            load_config_from_env({"MCP_MATTERMOST_URL": "https://mm.example.com"})

    def test_http_settings(self) -> None:
        env = {**BASE_ENV, "MCP_HTTP_HOST": "127.0.0.1", "MCP_HTTP_PORT": "8080"}

        config = load_config_from_env(env)

        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8080

    def test_invalid_port_raises(self) -> None:
        env = {**BASE_ENV, "MCP_HTTP_PORT": "not-a-port"}

        with pytest.raises(ValidationError):
            load_config_from_env(env)

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("debug", "DEBUG"), ("WARN", "WARNING"), ("warn", "WARNING"), ("Error", "ERROR")],
    )
    def test_log_level(self, raw: str, expected: str) -> None:
        env = {**BASE_ENV, "MCP_LOG_LEVEL": raw}

        config = load_config_from_env(env)

        assert config.logging.level == expected

    def test_unknown_log_level_falls_back_to_info(self) -> None:
        env = {**BASE_ENV, "MCP_LOG_LEVEL": "verbose"}

        config = load_config_from_env(env)

        assert config.logging.level == "INFO"

    def test_silent_log_level(self) -> None:
        env = {**BASE_ENV, "MCP_LOG_LEVEL": "silent"}

        config = load_config_from_env(env)

        assert config.logging.level == "SILENT"

    def test_log_format(self) -> None:
        env = {**BASE_ENV, "MCP_LOG_FORMAT": "TEXT"}

        config = load_config_from_env(env)

        assert config.logging.format == "text"

    def test_auth_tokens_passed_through(self) -> None:
        env = {**BASE_ENV, "MCP_AUTH_TOKENS": "alice:tok1,bob:tok2"}

        config = load_config_from_env(env)

        assert config.auth.tokens == "alice:tok1,bob:tok2"

    def test_reads_os_environ_by_default(self) -> None:
        with patch.dict(os.environ, BASE_ENV, clear=True):
            config = load_config_from_env()

        assert config.mattermost.token == "bot-token"

    def test_env_file_fills_missing_variables(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text(
            "MCP_MATTERMOST_URL=https://mm.example.com\n"
            "MCP_MATTERMOST_TOKEN=from-dotenv\n"
        )

        with patch.dict(
            os.environ, {"MCP_MATTERMOST_TOKEN": "from-environ"}, clear=True
        ):
            config = load_config_from_env(env_file=env_file)

        assert config.mattermost.url == "https://mm.example.com"
        assert config.mattermost.token == "from-environ"
