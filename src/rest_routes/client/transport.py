"""
HTTP transport layer
Performs the network exchange for the client on top of a requests session
"""

import asyncio
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

import requests
from requests.adapters import HTTPAdapter

from rest_routes.exceptions import MalformedURL, RestError, TransportFailure


@runtime_checkable
class Transport(Protocol):
    """
    Capability the client delegates network I/O to

    ``perform`` returns the received response for any status code and
    raises when no response could be obtained.
    """

    async def perform(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[Any] = None,
    ) -> requests.Response:
        ...


def normalize_transport_error(error: BaseException) -> RestError:
    """Normalize a requests exception into a TransportFailure"""
    if isinstance(error, RestError):
        return error

    if isinstance(
        error,
        (
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            requests.exceptions.InvalidURL,
        ),
    ):
        return MalformedURL(f"Invalid URL: {error}", cause=error)

    if isinstance(error, requests.exceptions.Timeout):
        return TransportFailure.timeout(cause=error)

    if isinstance(error, requests.exceptions.SSLError):
        return TransportFailure.ssl_error(f"SSL error: {error}", cause=error)

    if isinstance(error, requests.exceptions.ConnectionError):
        message = str(error)
        if "NameResolutionError" in message or "Failed to resolve" in message:
            return TransportFailure.dns_lookup_failed(
                f"DNS lookup failed: {message}", cause=error
            )
        return TransportFailure.connection_refused(
            f"Connection error: {message}", cause=error
        )

    return TransportFailure(f"Request error: {error}", cause=error)


class RequestsTransport:
    """
    Transport backed by a requests session

    The blocking send runs in a worker thread so the awaiting task yields
    to the event loop while the exchange is in flight. Headers are passed
    per request; the session carries no default headers of its own and
    ignores the environment (proxy variables, .netrc credentials).

    Bodies are handed to requests as ``data``: str and bytes go out as-is,
    while a mapping or a list of pairs is form-encoded by requests
    (``{"a": 1, "b": 2}`` is sent as ``a=1&b=2``).

    Example:
        >>> transport = RequestsTransport()
        >>> response = await transport.perform("GET", "https://example.com/", {})
        >>> transport.close()
    """

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        """
        Create a transport

        Args:
            session: Optional preconfigured session; one is created if omitted
        """
        self._owns_session = session is None
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create requests session without retries, default headers or environment"""
        session = requests.Session()
        session.headers.clear()
        session.trust_env = False

        adapter = HTTPAdapter(max_retries=0)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    @property
    def session(self) -> requests.Session:
        return self._session

    def _send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[Any],
    ) -> requests.Response:
        request = requests.Request(method=method, url=url, headers=headers, data=body)
        prepared = self._session.prepare_request(request)
        return self._session.send(prepared)

    async def perform(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[Any] = None,
    ) -> requests.Response:
        """
        Send a request and await its response

        Raises:
            requests.exceptions.RequestException: If no response is obtained
        """
        return await asyncio.to_thread(self._send, method, url, dict(headers), body)

    def close(self) -> None:
        """Close the session if this transport created it"""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
