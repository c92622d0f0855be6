"""Socket.IO integration."""

from pyslc.infrastructure.socket.hub import SocketHub, decode_prompt

__all__ = ["SocketHub", "decode_prompt"]
