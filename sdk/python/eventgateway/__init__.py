"""
Event Gateway SDK - emit events and manage gateway configuration.

Usage:
    from eventgateway import EventGateway

    eventgateway = EventGateway(url="http://localhost:4000")
    await eventgateway.emit("user.created", data={"name": "Max"})
"""

__version__ = "0.1.0"

from .client import EmitError, EventGateway
from .config import ConfigClient, ConfigError
from .function import http_response

__all__ = [
    "__version__",
    "ConfigClient",
    "ConfigError",
    "EmitError",
    "EventGateway",
    "http_response",
]
