"""Configuration dataclasses."""

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_BASE_URL = "https://slchat.alwaysdata.net"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class TransportMode(Enum):
    """How the bot receives messages."""

    POLLING = "polling"
    SOCKET = "socket"


class CredentialMode(Enum):
    """How the token (and bot id) travel with outbound requests.

    FORM sends the token as a form field (polling-era API).
    COOKIE sends `token` and `op` cookies (socket-era API).
    """

    FORM = "form"
    COOKIE = "cookie"


@dataclass
class BotConfig:
    """Bot account settings."""

    prefix: str
    token: str
    bot_id: str


@dataclass
class ApiConfig:
    """Remote API settings."""

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 10.0
    credential_mode: CredentialMode = CredentialMode.COOKIE


@dataclass
class PollingConfig:
    """Poll loop settings.

    Attributes:
        interval_seconds: Period between two poll ticks.
        deduplicate: Skip a server when its latest message marker is unchanged.
    """

    interval_seconds: float = 2.5
    deduplicate: bool = True


@dataclass
class CommandConfig:
    """Command routing settings.

    Attributes:
        drop_last_argument: Drop the final argument token when parsing
            commands, as deployed bots on the platform expect.
        ignore_own_messages: Drop messages posted by the bot itself. When
            False they still never reach command listeners, but are handed
            to message listeners.
    """

    drop_last_argument: bool = True
    ignore_own_messages: bool = True


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    format: str = DEFAULT_LOG_FORMAT
    loggers: dict[str, str] | None = None


@dataclass
class Config:
    """Application settings."""

    bot: BotConfig
    transport: TransportMode = TransportMode.POLLING
    api: ApiConfig = field(default_factory=ApiConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    commands: CommandConfig = field(default_factory=CommandConfig)
    logging: LoggingConfig | None = None
