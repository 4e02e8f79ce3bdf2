"""
Core configuration and infrastructure for the Event Gateway.
"""
from .config import settings, Settings

__all__ = [
    "settings",
    "Settings",
]
