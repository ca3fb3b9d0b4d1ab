"""
REST client
Dispatches one request per call and classifies the outcome into a
Success or Failure envelope. No exception escapes a verb call.
"""

import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

import requests
from pydantic import BaseModel

from rest_routes.client.transport import (
    RequestsTransport,
    Transport,
    normalize_transport_error,
)
from rest_routes.config.client_config import ClientConfig, ConfigDefaults
from rest_routes.exceptions import (
    DecodeFailure,
    HTTPStatusFailure,
    RestError,
    TransportFailure,
)
from rest_routes.models.request import HttpMethod, RestRequest
from rest_routes.models.result import Failure, RestResponse, Success
from rest_routes.routes.route_map import Route, RouteMap
from rest_routes.utils.headers import get_header, is_json_content_type, merge_headers
from rest_routes.utils.url import resolve_url


logger = logging.getLogger(__name__)


@dataclass
class RequestAuditEntry:
    """Audit log entry for a single call"""
    timestamp: str
    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[Any] = None
    status_code: Optional[int] = None
    duration: int = 0  # milliseconds
    success: bool = False
    error: Optional[str] = None


# Header and body keys whose values are redacted in audit entries
SENSITIVE_FIELDS = [
    "authorization",
    "x-api-key",
    "cookie",
    "password",
    "secret",
    "token",
]


AuditLogCallback = Callable[[RequestAuditEntry], None]


def redact_sensitive_data(obj: Any) -> Any:
    """Redact sensitive values from headers or a body for logging"""
    if isinstance(obj, BaseModel):
        obj = obj.model_dump(mode="json")

    if isinstance(obj, list):
        return [redact_sensitive_data(item) for item in obj]

    if isinstance(obj, dict):
        redacted = {}
        for key, value in obj.items():
            lower_key = str(key).lower()
            if any(field in lower_key for field in SENSITIVE_FIELDS):
                redacted[key] = "[REDACTED]"
            else:
                redacted[key] = redact_sensitive_data(value)
        return redacted

    return obj


def is_success_status(status_code: int) -> bool:
    """Success range is 200-299"""
    return 200 <= status_code < 300


class RestClient:
    """
    Typed REST client

    Holds a base URL and default headers, both fixed at construction,
    and exposes one coroutine per HTTP verb. When a RouteMap is given,
    calls are checked against it and payloads are converted to the
    route's response type.

    Example:
        >>> routes = RouteMap()
        >>> routes.get("/pokemon/:name", response=Pokemon)
        >>> client = RestClient(
        ...     "https://pokeapi.co/api/v2",
        ...     {"Content-Type": "application/json"},
        ...     routes=routes,
        ... )
        >>> result = await client.get("/pokemon/:name", params={"name": "pikachu"})
        >>> if result.status == "success":
        ...     print(result.data.id)
    """

    def __init__(
        self,
        base_url: str,
        default_headers: Optional[Mapping[str, str]] = None,
        *,
        routes: Optional[RouteMap] = None,
        transport: Optional[Transport] = None,
        enable_audit_log: bool = ConfigDefaults.ENABLE_AUDIT_LOG,
    ) -> None:
        """
        Create a new client

        Args:
            base_url: Base address path templates are appended to
            default_headers: Headers sent with every request
            routes: Optional route map calls are checked against
            transport: Transport performing the exchange; a
                RequestsTransport is created when omitted
            enable_audit_log: Emit audit entries to the audit callback
        """
        self._base_url = base_url
        self._default_headers: Dict[str, str] = dict(default_headers or {})
        self._routes = routes
        self._owns_transport = transport is None
        self._transport: Transport = transport or RequestsTransport()
        self._enable_audit_log = enable_audit_log
        self._audit_log_callback: Optional[AuditLogCallback] = None

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        routes: Optional[RouteMap] = None,
        transport: Optional[Transport] = None,
    ) -> "RestClient":
        """Create a client from a resolved ClientConfig"""
        return cls(
            config.base_url,
            config.default_headers,
            routes=routes,
            transport=transport,
            enable_audit_log=config.enable_audit_log,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def default_headers(self) -> Dict[str, str]:
        """Copy of the default headers"""
        return dict(self._default_headers)

    @property
    def routes(self) -> Optional[RouteMap]:
        return self._routes

    def set_audit_log_callback(self, callback: Optional[AuditLogCallback]) -> None:
        """Set audit log callback"""
        self._audit_log_callback = callback

    def _log_audit(
        self,
        method: HttpMethod,
        url: str,
        headers: Dict[str, str],
        body: Optional[Any],
        start_time: float,
        response: Optional[requests.Response] = None,
        error: Optional[RestError] = None,
    ) -> None:
        if not (self._enable_audit_log and self._audit_log_callback):
            return

        entry = RequestAuditEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            method=method.value,
            url=url,
            headers=redact_sensitive_data(headers),
            body=redact_sensitive_data(body),
            status_code=response.status_code if response is not None else None,
            duration=int((time.time() - start_time) * 1000),
            success=error is None,
            error=error.get_description() if error is not None else None,
        )
        try:
            self._audit_log_callback(entry)
        except Exception as e:
            logger.warning(f"Audit log callback failed: {e}")

    def _lookup_route(self, method: HttpMethod, path: str) -> Optional[Route]:
        if self._routes is None:
            return None
        return self._routes.lookup(method, path)

    def _encode_body(
        self, method: HttpMethod, headers: Mapping[str, str], body: Optional[Any]
    ) -> Optional[Any]:
        """JSON-encode the body when the headers declare JSON, else pass it through"""
        if not method.allows_body or body is None:
            return None

        if not is_json_content_type(get_header(headers, "Content-Type")):
            return body

        if isinstance(body, BaseModel):
            body = body.model_dump(mode="json")
        try:
            return json.dumps(body)
        except (TypeError, ValueError) as e:
            raise TransportFailure(
                f"Request body is not JSON serializable: {e}", cause=e
            ) from e

    def _decode_body(
        self, response: requests.Response, route: Optional[Route]
    ) -> Any:
        """
        Decode a success response body by its content type

        Raises:
            DecodeFailure: If the body is not valid JSON or does not
                match the route's response type
        """
        if is_json_content_type(response.headers.get("Content-Type")):
            try:
                payload = response.json()
            except ValueError as e:
                raise DecodeFailure(
                    f"Invalid JSON response body: {e}",
                    status_code=response.status_code,
                    cause=e,
                ) from e
        else:
            payload = response.text

        if route is None:
            return payload
        return route.decode(payload, status_code=response.status_code)

    async def _dispatch(
        self, method: HttpMethod, path: str, request: RestRequest
    ) -> RestResponse[Any]:
        """Execute a single request and classify its outcome"""
        start_time = time.time()
        headers = merge_headers(self._default_headers, request.headers)
        url = path
        response: Optional[requests.Response] = None

        try:
            route = self._lookup_route(method, path)
            if route is not None:
                route.validate_request(request, headers)

            url = resolve_url(self._base_url, path, request.params, request.query)
            body = self._encode_body(method, headers, request.body)

            logger.debug(f"{method.value} {url}")
            response = await self._transport.perform(method.value, url, headers, body)
        except Exception as e:
            error = normalize_transport_error(e)
            logger.warning(f"{method.value} {url} failed without a response: {error}")
            self._log_audit(method, url, headers, request.body, start_time, error=error)
            return Failure(error=error, response=None)

        if not is_success_status(response.status_code):
            error = HTTPStatusFailure(
                response.reason or f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
            logger.warning(f"{method.value} {url} returned {response.status_code}")
            self._log_audit(
                method, url, headers, request.body, start_time, response, error
            )
            return Failure(error=error, response=response)

        try:
            data = self._decode_body(response, route)
        except Exception as e:
            error = e if isinstance(e, DecodeFailure) else DecodeFailure(
                f"Response body could not be decoded: {e}",
                status_code=response.status_code,
                cause=e,
            )
            logger.warning(f"{method.value} {url} response could not be decoded: {error}")
            self._log_audit(
                method, url, headers, request.body, start_time, response, error
            )
            return Failure(error=error, response=response)

        self._log_audit(method, url, headers, request.body, start_time, response)
        return Success(data=data, response=response)

    def _build_request(
        self,
        request: Optional[RestRequest],
        headers: Optional[Dict[str, str]],
        params: Optional[Dict[str, str]],
        query: Optional[Dict[str, str]],
        body: Optional[Any] = None,
    ) -> RestRequest:
        return (request or RestRequest()).merged_with(
            headers=headers, params=params, query=query, body=body
        )

    async def get(
        self,
        path: str,
        request: Optional[RestRequest] = None,
        *,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        query: Optional[Dict[str, str]] = None,
    ) -> RestResponse[Any]:
        """
        Perform GET request

        Args:
            path: Path template (relative to base URL)
            request: Optional call request
            headers: Per-call header overrides
            params: Path parameter values
            query: Query values

        Returns:
            Success with the decoded payload, or Failure
        """
        return await self._dispatch(
            HttpMethod.GET,
            path,
            self._build_request(request, headers, params, query),
        )

    async def post(
        self,
        path: str,
        request: Optional[RestRequest] = None,
        *,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        query: Optional[Dict[str, str]] = None,
        body: Optional[Any] = None,
    ) -> RestResponse[Any]:
        """
        Perform POST request

        Args:
            path: Path template (relative to base URL)
            request: Optional call request
            headers: Per-call header overrides
            params: Path parameter values
            query: Query values
            body: Request body, JSON-encoded for JSON content types

        Returns:
            Success with the decoded payload, or Failure
        """
        return await self._dispatch(
            HttpMethod.POST,
            path,
            self._build_request(request, headers, params, query, body),
        )

    async def patch(
        self,
        path: str,
        request: Optional[RestRequest] = None,
        *,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        query: Optional[Dict[str, str]] = None,
        body: Optional[Any] = None,
    ) -> RestResponse[Any]:
        """Perform PATCH request"""
        return await self._dispatch(
            HttpMethod.PATCH,
            path,
            self._build_request(request, headers, params, query, body),
        )

    async def put(
        self,
        path: str,
        request: Optional[RestRequest] = None,
        *,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        query: Optional[Dict[str, str]] = None,
        body: Optional[Any] = None,
    ) -> RestResponse[Any]:
        """Perform PUT request"""
        return await self._dispatch(
            HttpMethod.PUT,
            path,
            self._build_request(request, headers, params, query, body),
        )

    async def delete(
        self,
        path: str,
        request: Optional[RestRequest] = None,
        *,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        query: Optional[Dict[str, str]] = None,
        body: Optional[Any] = None,
    ) -> RestResponse[Any]:
        """Perform DELETE request"""
        return await self._dispatch(
            HttpMethod.DELETE,
            path,
            self._build_request(request, headers, params, query, body),
        )

    def close(self) -> None:
        """Close the transport if this client created it"""
        if self._owns_transport and isinstance(self._transport, RequestsTransport):
            self._transport.close()

    async def __aenter__(self) -> "RestClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
