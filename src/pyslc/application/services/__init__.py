"""Application services."""

from pyslc.application.services.dispatcher import ErrorReporter, ListenerDispatcher
from pyslc.application.services.poll_cycle import PollCycle
from pyslc.application.services.poller import MessagePoller
from pyslc.application.services.router import MessageRouter

__all__ = [
    "ErrorReporter",
    "ListenerDispatcher",
    "MessagePoller",
    "MessageRouter",
    "PollCycle",
]
