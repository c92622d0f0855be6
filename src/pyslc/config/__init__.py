"""Configuration."""

from pyslc.config.loader import (
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
from pyslc.config.models import (
    ApiConfig,
    BotConfig,
    CommandConfig,
    Config,
    CredentialMode,
    LoggingConfig,
    PollingConfig,
    TransportMode,
)

__all__ = [
    "ApiConfig",
    "BotConfig",
    "CommandConfig",
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "CredentialMode",
    "EnvironmentVariableError",
    "LoggingConfig",
    "PollingConfig",
    "TransportMode",
    "expand_env_vars",
    "load_config",
]
