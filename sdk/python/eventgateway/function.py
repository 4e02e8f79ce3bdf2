"""
Helpers for writing functions served behind the gateway.

Functions subscribed to ``http.request`` events answer with an HTTP response
object that the gateway writes back to the original caller.
"""
import json
from typing import Any, Dict, Optional

from eventgateway_common import HTTPResponse

JSON_CONTENT_TYPE = "application/json"


def http_response(
    body: Any,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Build the HTTP response object of a sync ``http.request`` subscription.
    
    Dict and list bodies are JSON encoded and get a JSON content type.
    
    Example:
        return http_response({"id": "1", "name": "Max"})
    """
    response_headers = dict(headers or {})
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
        response_headers.setdefault("Content-Type", JSON_CONTENT_TYPE)
    elif body is None:
        body = ""
    
    response = HTTPResponse(status_code=status_code, headers=response_headers, body=str(body))
    return response.model_dump(by_alias=True)
