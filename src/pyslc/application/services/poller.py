"""Fixed-rate poll loop."""

import asyncio
import logging

from pyslc.application.services.poll_cycle import PollCycle
from pyslc.config import PollingConfig

logger = logging.getLogger(__name__)


class MessagePoller:
    """Runs a poll cycle at a fixed rate.

    The first cycle runs immediately. Ticks are spaced from their start
    times, so a slow cycle shortens the following wait rather than
    drifting the schedule. Runs as an asyncio task and stops gracefully
    on stop().
    """

    def __init__(self, cycle: PollCycle, config: PollingConfig) -> None:
        """Initialize the poller.

        Args:
            cycle: Work executed once per tick.
            config: Polling configuration with the tick interval.
        """
        self._cycle = cycle
        self._config = config
        # set() means "not running"
        self._stop_event = asyncio.Event()
        self._stop_event.set()

    def schedule(self) -> asyncio.Task[None] | None:
        """Mark the poller running and run the loop as a background task.

        The poller counts as running as soon as this returns, so a stop()
        issued before the task gets to run still ends it.

        Returns:
            The loop task, or None if the poller was already running.
        """
        if self.is_running:
            logger.warning("MessagePoller.schedule() called while already running; ignoring.")
            return None
        self._stop_event.clear()
        return asyncio.create_task(self._run())

    async def start(self) -> None:
        """Poll until stop() is called.

        If already running, logs a warning and returns immediately.
        """
        if self.is_running:
            logger.warning("MessagePoller.start() called while already running; ignoring.")
            return
        self._stop_event.clear()
        await self._run()

    async def _run(self) -> None:
        logger.info("Polling every %.1fs", self._config.interval_seconds)

        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while not self._stop_event.is_set():
            next_tick += self._config.interval_seconds
            try:
                await self._cycle.execute()
            except Exception as e:
                logger.error(
                    "Poll cycle failed (interval=%.1fs): %s",
                    self._config.interval_seconds,
                    e,
                )

            timeout = max(0.0, next_tick - loop.time())
            if timeout == 0.0:
                # Overran a whole period; realign
                next_tick = loop.time()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
                break
            except asyncio.TimeoutError:
                pass

        logger.info("MessagePoller stopped")

    async def stop(self) -> None:
        """Signal the loop to stop after the current cycle.

        Does not wait for the loop task; await the task running the loop
        for that.
        """
        self._stop_event.set()

    @property
    def is_running(self) -> bool:
        return not self._stop_event.is_set()
