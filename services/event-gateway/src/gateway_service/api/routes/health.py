from typing import Dict

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from ...services.gateway import gateway

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    adapter: str = Field(..., description="Active adapter type")
    connected: bool = Field(..., description="Whether adapter is connected")
    backlog: int = Field(..., description="Events waiting for async delivery")


@router.get("/v1/status")
async def status() -> Dict[str, str]:
    """Liveness probe."""
    return {}


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.
    
    Returns service status, adapter connection state and router backlog.
    """
    adapter = gateway.adapter
    connected = bool(adapter and adapter.is_connected)
    draining = bool(gateway.router and gateway.router.is_draining)
    return HealthResponse(
        status="healthy" if connected and not draining else "degraded",
        adapter=adapter.name if adapter else "none",
        connected=connected,
        backlog=gateway.router.queued if gateway.router else 0,
    )


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
