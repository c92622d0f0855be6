"""Tests for the config loader."""

import os
from pathlib import Path
from typing import Generator

import pytest
import yaml

from pyslc.config import (
    ApiConfig,
    CommandConfig,
    Config,
    ConfigValidationError,
    CredentialMode,
    EnvironmentVariableError,
    PollingConfig,
    TransportMode,
    expand_env_vars,
    load_config,
)


@pytest.fixture
def temp_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory."""
    return tmp_path


@pytest.fixture
def env_vars() -> Generator[dict[str, str], None, None]:
    """Set and clean up test environment variables."""
    test_vars = {
        "TEST_SLC_TOKEN": "secret-token",
        "TEST_SLC_BOT_ID": "42",
        "TEST_VAR_A": "valueA",
        "TEST_VAR_B": "valueB",
    }
    for key, value in test_vars.items():
        os.environ[key] = value
    yield test_vars
    for key in test_vars:
        os.environ.pop(key, None)


def write_config(directory: Path, content: str) -> Path:
    config_path = directory / "config.yaml"
    config_path.write_text(content)
    return config_path


MINIMAL_CONFIG = """
bot:
  prefix: "!"
  token: ${TEST_SLC_TOKEN}
  bot_id: ${TEST_SLC_BOT_ID}
"""


class TestExpandEnvVars:
    """Tests for expand_env_vars."""

    def test_single_variable(self, env_vars: dict[str, str]) -> None:
        """A single variable is expanded."""
        assert expand_env_vars("${TEST_SLC_TOKEN}") == "secret-token"

    def test_multiple_variables(self, env_vars: dict[str, str]) -> None:
        """Several variables in one string are expanded."""
        assert expand_env_vars("${TEST_VAR_A}_${TEST_VAR_B}") == "valueA_valueB"

    def test_no_variables(self) -> None:
        """Plain text is returned unchanged."""
        assert expand_env_vars("plain text") == "plain text"

    def test_undefined_variable(self) -> None:
        """An unset variable raises EnvironmentVariableError."""
        with pytest.raises(EnvironmentVariableError) as exc_info:
            expand_env_vars("${UNDEFINED_VAR_12345}")
        assert "UNDEFINED_VAR_12345" in str(exc_info.value)

    def test_empty_string(self) -> None:
        """An empty string is returned unchanged."""
        assert expand_env_vars("") == ""


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_minimal_config(
        self, temp_config_dir: Path, env_vars: dict[str, str]
    ) -> None:
        """Only the bot section is required; everything else has defaults."""
        config = load_config(write_config(temp_config_dir, MINIMAL_CONFIG))

        assert isinstance(config, Config)
        assert config.bot.prefix == "!"
        assert config.bot.token == "secret-token"
        assert config.bot.bot_id == "42"
        assert config.transport is TransportMode.POLLING
        assert config.api == ApiConfig()
        assert config.polling == PollingConfig()
        assert config.commands == CommandConfig()
        assert config.logging is None

    def test_load_full_config(
        self, temp_config_dir: Path, env_vars: dict[str, str]
    ) -> None:
        """Every section is read."""
        content = (
            MINIMAL_CONFIG
            + """
transport: socket
api:
  base_url: https://chat.example.com/
  timeout_seconds: 3
  credential_mode: form
polling:
  interval_seconds: 5
  deduplicate: false
commands:
  drop_last_argument: false
  ignore_own_messages: false
logging:
  level: DEBUG
  loggers:
    httpx: WARNING
"""
        )
        config = load_config(write_config(temp_config_dir, content))

        assert config.transport is TransportMode.SOCKET
        assert config.api.base_url == "https://chat.example.com"
        assert config.api.timeout_seconds == 3.0
        assert config.api.credential_mode is CredentialMode.FORM
        assert config.polling.interval_seconds == 5.0
        assert config.polling.deduplicate is False
        assert config.commands.drop_last_argument is False
        assert config.commands.ignore_own_messages is False
        assert config.logging is not None
        assert config.logging.level == "DEBUG"
        assert config.logging.loggers == {"httpx": "WARNING"}

    def test_numeric_bot_id_becomes_string(self, temp_config_dir: Path) -> None:
        """Numeric ids written without quotes are normalised to strings."""
        content = """
bot:
  prefix: "?"
  token: abc
  bot_id: 1234
"""
        config = load_config(write_config(temp_config_dir, content))

        assert config.bot.bot_id == "1234"

    def test_file_not_found(self) -> None:
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(Path("/nonexistent/config.yaml"))

    def test_undefined_env_var(self, temp_config_dir: Path) -> None:
        """An unset variable raises EnvironmentVariableError."""
        content = """
bot:
  prefix: "!"
  token: ${UNDEFINED_TOKEN_12345}
  bot_id: "1"
"""
        with pytest.raises(EnvironmentVariableError):
            load_config(write_config(temp_config_dir, content))

    def test_missing_bot_section(self, temp_config_dir: Path) -> None:
        """A config without a bot section is rejected."""
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(temp_config_dir, "transport: polling\n"))

        assert "bot" in str(exc_info.value)

    def test_missing_required_field_token(self, temp_config_dir: Path) -> None:
        """A missing bot.token raises ConfigValidationError naming the field."""
        content = """
bot:
  prefix: "!"
  bot_id: "1"
"""
        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(temp_config_dir, content))

        assert "bot.token" in str(exc_info.value)

    def test_invalid_transport(
        self, temp_config_dir: Path, env_vars: dict[str, str]
    ) -> None:
        """An unknown transport lists the allowed values."""
        content = MINIMAL_CONFIG + "transport: carrier-pigeon\n"

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(temp_config_dir, content))

        assert "polling" in str(exc_info.value)
        assert "socket" in str(exc_info.value)

    def test_invalid_credential_mode(
        self, temp_config_dir: Path, env_vars: dict[str, str]
    ) -> None:
        """An unknown credential mode is rejected."""
        content = MINIMAL_CONFIG + "api:\n  credential_mode: header\n"

        with pytest.raises(ConfigValidationError):
            load_config(write_config(temp_config_dir, content))

    def test_non_positive_interval(
        self, temp_config_dir: Path, env_vars: dict[str, str]
    ) -> None:
        """A zero poll interval is rejected."""
        content = MINIMAL_CONFIG + "polling:\n  interval_seconds: 0\n"

        with pytest.raises(ConfigValidationError):
            load_config(write_config(temp_config_dir, content))

    def test_invalid_yaml(self, temp_config_dir: Path) -> None:
        """Broken YAML raises yaml.YAMLError."""
        with pytest.raises(yaml.YAMLError):
            load_config(write_config(temp_config_dir, "bot: [unclosed\n"))

    def test_quoted_false_flag(
        self, temp_config_dir: Path, env_vars: dict[str, str]
    ) -> None:
        """A quoted "false" turns the flag off."""
        content = MINIMAL_CONFIG + 'polling:\n  deduplicate: "false"\n'

        config = load_config(write_config(temp_config_dir, content))

        assert config.polling.deduplicate is False

    def test_flag_from_env_var(
        self,
        temp_config_dir: Path,
        env_vars: dict[str, str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Expanded variables are strings; they are read as flags."""
        monkeypatch.setenv("TEST_IGNORE_OWN", "False")
        content = MINIMAL_CONFIG + "commands:\n  ignore_own_messages: ${TEST_IGNORE_OWN}\n"

        config = load_config(write_config(temp_config_dir, content))

        assert config.commands.ignore_own_messages is False

    def test_invalid_flag(
        self, temp_config_dir: Path, env_vars: dict[str, str]
    ) -> None:
        """A value that is not a boolean is rejected."""
        content = MINIMAL_CONFIG + "commands:\n  drop_last_argument: sometimes\n"

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(write_config(temp_config_dir, content))

        assert "commands.drop_last_argument" in str(exc_info.value)
