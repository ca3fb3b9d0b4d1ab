"""Per-call request model"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class HttpMethod(str, Enum):
    """HTTP method types supported"""
    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def allows_body(self) -> bool:
        """GET requests never carry a body"""
        return self is not HttpMethod.GET


@dataclass(frozen=True)
class RestRequest:
    """Headers, path parameters, query values and body for a single call"""
    headers: Optional[Dict[str, str]] = None
    params: Optional[Dict[str, str]] = None
    query: Optional[Dict[str, str]] = None
    body: Optional[Any] = None

    def merged_with(
        self,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        query: Optional[Dict[str, str]] = None,
        body: Optional[Any] = None,
    ) -> "RestRequest":
        """Return a copy with keyword values layered over this request"""
        return RestRequest(
            headers={**(self.headers or {}), **headers} if headers else self.headers,
            params={**(self.params or {}), **params} if params else self.params,
            query={**(self.query or {}), **query} if query else self.query,
            body=body if body is not None else self.body,
        )
