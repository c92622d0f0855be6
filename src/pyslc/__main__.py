"""Run an example bot from config.yaml."""

import asyncio
import logging
import os
import signal
import sys
from pathlib import Path

from pyslc.application.bot import Bot
from pyslc.application.factory import create_bot
from pyslc.config import ConfigError, LoggingConfig, load_config
from pyslc.config.models import DEFAULT_LOG_FORMAT
from pyslc.domain.entities.context import CommandContext
from pyslc.domain.exceptions import BotConfigurationError

# Startup logging until the config is loaded
logging.basicConfig(
    level=logging.INFO,
    format=DEFAULT_LOG_FORMAT,
)
logger = logging.getLogger(__name__)


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(config: LoggingConfig | None) -> None:
    """Apply the logging section of the config.

    Sets the root level, reformats the handlers installed at startup and
    applies per-logger levels. Does nothing when the section is absent.
    """
    if config is None:
        return

    root_logger = logging.getLogger()
    root_logger.setLevel(_parse_level(config.level))

    formatter = logging.Formatter(config.format)
    for handler in root_logger.handlers:
        handler.setFormatter(formatter)

    for logger_name, logger_level in (config.loggers or {}).items():
        logging.getLogger(logger_name).setLevel(_parse_level(logger_level))
        logger.debug("Logger '%s' set to %s", logger_name, logger_level.upper())


async def handle_command(ctx: CommandContext) -> None:
    """Answer the example commands."""
    if ctx.command == "ping":
        await ctx.send("pong")
    elif ctx.command == "echo" and ctx.arguments:
        await ctx.send(" ".join(ctx.arguments))


async def log_error(error: Exception, operation: str) -> None:
    logger.error("[%s] %s", operation, error)


async def main() -> None:
    """Start the example bot."""
    config_path = Path(os.environ.get("PYSLC_CONFIG", "config.yaml"))
    if not config_path.exists():
        logger.error("%s not found", config_path)
        sys.exit(1)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        sys.exit(1)

    configure_logging(config.logging)

    try:
        bot: Bot = create_bot(
            config,
            on_start=lambda: logger.info("Bot started"),
            on_error=log_error,
            command_listeners=[handle_command],
        )
    except BotConfigurationError as e:
        logger.error("Invalid bot configuration: %s", e)
        sys.exit(1)

    logger.info("Starting bot %s (%s transport)...", config.bot.bot_id, config.transport.value)
    run_task = asyncio.create_task(bot.run())

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def shutdown_handler() -> None:
        logger.info("Received shutdown signal...")
        stop_event.set()

    loop.add_signal_handler(signal.SIGINT, shutdown_handler)
    loop.add_signal_handler(signal.SIGTERM, shutdown_handler)

    stop_wait = asyncio.create_task(stop_event.wait())
    done, _ = await asyncio.wait(
        {run_task, stop_wait}, return_when=asyncio.FIRST_COMPLETED
    )

    if run_task in done:
        # run() only returns on its own when startup failed
        stop_wait.cancel()
        error = run_task.exception()
        logger.error("Bot failed to start%s", f": {error}" if error else "")
        await bot.stop()
        sys.exit(1)

    logger.info("Shutting down...")
    await bot.stop()
    await asyncio.gather(run_task, return_exceptions=True)
    logger.info("Shutdown complete")


def run() -> None:
    """Run the async main function."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    run()
