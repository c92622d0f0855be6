"""HTTP integration."""

from pyslc.infrastructure.http.client import SLChatApiClient

__all__ = ["SLChatApiClient"]
