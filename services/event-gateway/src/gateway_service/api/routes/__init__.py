from .eventtypes import router as eventtypes_router
from .events import router as events_router
from .functions import router as functions_router
from .health import router as health_router
from .subscriptions import router as subscriptions_router

__all__ = [
    "eventtypes_router",
    "events_router",
    "functions_router",
    "health_router",
    "subscriptions_router",
]
