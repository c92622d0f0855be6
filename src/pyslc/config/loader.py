"""Load YAML config files and expand environment variables."""

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import yaml

from pyslc.config.models import (
    DEFAULT_BASE_URL,
    DEFAULT_LOG_FORMAT,
    ApiConfig,
    BotConfig,
    CommandConfig,
    Config,
    CredentialMode,
    LoggingConfig,
    PollingConfig,
    TransportMode,
)

_E = TypeVar("_E", bound=Enum)


class ConfigError(Exception):
    """Base class for configuration errors."""


class ConfigValidationError(ConfigError):
    """A config value is missing or invalid."""


class EnvironmentVariableError(ConfigError):
    """A referenced environment variable is not set."""


# ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(value: str) -> str:
    """Replace every ${VAR_NAME} in a string with the variable's value.

    Args:
        value: String to expand.

    Returns:
        The expanded string.

    Raises:
        EnvironmentVariableError: A referenced variable is not set.
    """
    if not value:
        return value

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            raise EnvironmentVariableError(
                f"Environment variable '{var_name}' is not set"
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, value)


def _expand_recursive(data: Any) -> Any:
    """Walk dicts and lists, expanding environment variables in strings."""
    if isinstance(data, dict):
        return {key: _expand_recursive(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _validate_required_field(data: dict[str, Any], field: str, parent: str = "") -> Any:
    """Return a required field, raising if it is absent.

    Args:
        data: Mapping to look in.
        field: Field name.
        parent: Parent section name, for the error message.

    Returns:
        The field value.

    Raises:
        ConfigValidationError: The field is missing or null.
    """
    if field not in data or data[field] is None:
        full_path = f"{parent}.{field}" if parent else field
        raise ConfigValidationError(f"Required field '{full_path}' is missing")
    return data[field]


def _parse_enum(enum_type: type[_E], value: Any, path: str) -> _E:
    try:
        return enum_type(str(value).lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ConfigValidationError(
            f"Invalid value '{value}' for '{path}' (expected one of: {allowed})"
        ) from None


_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


def _parse_bool(value: Any, path: str) -> bool:
    """Read a flag. Strings come from quoted YAML or ${VAR} expansion."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigValidationError(
        f"Invalid value '{value}' for '{path}' (expected true or false)"
    )


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigValidationError(f"Section '{name}' must be a mapping")
    return section


def load_config(path: str | Path) -> Config:
    """Load a config file.

    Args:
        path: Path to config.yaml.

    Returns:
        Config object.

    Raises:
        FileNotFoundError: The file does not exist.
        ConfigValidationError: A required value is missing or invalid.
        EnvironmentVariableError: A referenced variable is not set.
        yaml.YAMLError: The file is not valid YAML.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f) or {}

    data = _expand_recursive(raw_data)

    bot_data = _validate_required_field(data, "bot")
    bot = BotConfig(
        prefix=str(_validate_required_field(bot_data, "prefix", "bot")),
        token=str(_validate_required_field(bot_data, "token", "bot")),
        # Older accounts have numeric ids; YAML hands those back as int
        bot_id=str(_validate_required_field(bot_data, "bot_id", "bot")),
    )

    transport = _parse_enum(
        TransportMode, data.get("transport", TransportMode.POLLING.value), "transport"
    )

    api_data = _section(data, "api")
    api = ApiConfig(
        base_url=str(api_data.get("base_url", DEFAULT_BASE_URL)).rstrip("/"),
        timeout_seconds=float(api_data.get("timeout_seconds", 10.0)),
        credential_mode=_parse_enum(
            CredentialMode,
            api_data.get("credential_mode", CredentialMode.COOKIE.value),
            "api.credential_mode",
        ),
    )

    polling_data = _section(data, "polling")
    polling = PollingConfig(
        interval_seconds=float(polling_data.get("interval_seconds", 2.5)),
        deduplicate=_parse_bool(
            polling_data.get("deduplicate", True), "polling.deduplicate"
        ),
    )
    if polling.interval_seconds <= 0:
        raise ConfigValidationError("'polling.interval_seconds' must be positive")

    commands_data = _section(data, "commands")
    commands = CommandConfig(
        drop_last_argument=_parse_bool(
            commands_data.get("drop_last_argument", True), "commands.drop_last_argument"
        ),
        ignore_own_messages=_parse_bool(
            commands_data.get("ignore_own_messages", True),
            "commands.ignore_own_messages",
        ),
    )

    # LoggingConfig (optional)
    logging_config: LoggingConfig | None = None
    logging_data = data.get("logging")
    if logging_data:
        logging_config = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            format=logging_data.get("format", DEFAULT_LOG_FORMAT),
            loggers=logging_data.get("loggers"),
        )

    return Config(
        bot=bot,
        transport=transport,
        api=api,
        polling=polling,
        commands=commands,
        logging=logging_config,
    )
