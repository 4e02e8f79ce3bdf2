import logging

from fastapi import APIRouter, Request, Response

from ...services.gateway import gateway

router = APIRouter(tags=["Events"])
logger = logging.getLogger(__name__)

METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


@router.api_route("/{path:path}", methods=METHODS, include_in_schema=False)
async def handle_event(request: Request, path: str) -> Response:
    """
    Entry point of the Events API.
    
    Every request, whatever its method and path, is an event: either a custom
    event emitted by a client or an HTTP request for a sync subscription.
    """
    if gateway.router is None:
        return Response(content=b"Event Gateway not initialized", status_code=503)

    host = request.headers.get("host", "")
    result = await gateway.router.handle(
        space=gateway.space_for_host(host),
        path="/" + path,
        method=request.method,
        headers=request.headers,
        body=await request.body(),
        host=host,
        query=request.query_params.multi_items(),
    )
    return Response(content=result.body, status_code=result.status_code, headers=result.headers)
