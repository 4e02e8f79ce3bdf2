"""
Event Gateway - routes emitted events to subscribed functions.

The service exposes two HTTP interfaces:
- the Events API, where clients emit events and make HTTP requests
- the Configuration API, where event types, functions and subscriptions
  are managed per space
"""

__version__ = "0.1.0"
