"""Exception classes for the rest_routes client"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class RestErrorCategory(str, Enum):
    """Error category codes"""
    TRANSPORT = "NET"
    HTTP = "HTTP"
    DECODE = "DECODE"
    ROUTE = "ROUTE"
    CONFIG = "CONFIG"
    UNKNOWN = "UNKNOWN"


class TransportErrorCode(str, Enum):
    """Transport error codes"""
    TIMEOUT = "NET01"
    CONNECTION_REFUSED = "NET02"
    DNS_LOOKUP_FAILED = "NET03"
    SSL_ERROR = "NET04"
    MALFORMED_URL = "NET08"
    UNKNOWN = "NET10"


class RestError(Exception):
    """
    Base exception for client errors

    Every failure surfaced through a result envelope is an instance of
    this class. Provides consistent error handling and categorization.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.cause = cause
        self.details = details
        self.timestamp = datetime.now(timezone.utc)
        self.category = self._determine_category(code)

    def _determine_category(self, code: Optional[str]) -> RestErrorCategory:
        """Determine error category from code"""
        if not code:
            return RestErrorCategory.UNKNOWN

        if code.startswith("NET"):
            return RestErrorCategory.TRANSPORT
        if code.startswith("HTTP"):
            return RestErrorCategory.HTTP
        if code.startswith("DECODE"):
            return RestErrorCategory.DECODE
        if code.startswith("ROUTE"):
            return RestErrorCategory.ROUTE
        if code.startswith("CONFIG"):
            return RestErrorCategory.CONFIG

        return RestErrorCategory.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "name": self.__class__.__name__,
            "message": str(self),
            "code": self.code,
            "status_code": self.status_code,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "cause": repr(self.cause) if self.cause is not None else None,
            "details": self.details,
        }

    def has_code(self, code: str) -> bool:
        """Check if error has a specific code"""
        return self.code == code

    def is_category(self, category: RestErrorCategory) -> bool:
        """Check if error belongs to a category"""
        return self.category == category

    def get_description(self) -> str:
        """Get human-readable error description"""
        parts = [str(self)]

        if self.code:
            parts.insert(0, f"[{self.code}]")

        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")

        return " ".join(parts)


class TransportFailure(RestError):
    """
    No response was obtained from the transport

    Raised for DNS, connection, TLS and URL resolution failures that
    happen before any response is received.
    """

    def __init__(
        self,
        message: str,
        transport_code: TransportErrorCode = TransportErrorCode.UNKNOWN,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message, code=transport_code.value, cause=cause, details=details
        )
        self.transport_code = transport_code

    @classmethod
    def timeout(
        cls, cause: Optional[BaseException] = None
    ) -> "TransportFailure":
        """Create a timeout failure"""
        return cls("Request timed out", TransportErrorCode.TIMEOUT, cause=cause)

    @classmethod
    def connection_refused(
        cls, message: str = "Connection refused", cause: Optional[BaseException] = None
    ) -> "TransportFailure":
        """Create a connection failure"""
        return cls(message, TransportErrorCode.CONNECTION_REFUSED, cause=cause)

    @classmethod
    def dns_lookup_failed(
        cls, message: str = "DNS lookup failed", cause: Optional[BaseException] = None
    ) -> "TransportFailure":
        """Create a name resolution failure"""
        return cls(message, TransportErrorCode.DNS_LOOKUP_FAILED, cause=cause)

    @classmethod
    def ssl_error(
        cls, message: str = "SSL/TLS error", cause: Optional[BaseException] = None
    ) -> "TransportFailure":
        """Create an SSL error"""
        return cls(message, TransportErrorCode.SSL_ERROR, cause=cause)


class MalformedURL(TransportFailure):
    """The resolved URL is not a valid absolute URL"""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message,
            TransportErrorCode.MALFORMED_URL,
            cause=cause,
            details={"url": url} if url is not None else None,
        )
        self.url = url


class HTTPStatusFailure(RestError):
    """A response was received with a non-success status"""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message, code=f"HTTP{status_code}", status_code=status_code)


class DecodeFailure(RestError):
    """
    A success response body could not be decoded

    Covers malformed JSON as well as payloads that do not match the
    response type declared on a route.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            code="DECODE01",
            status_code=status_code,
            cause=cause,
            details=details,
        )


class RouteError(RestError):
    """Route registration or call does not match the route map"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code="ROUTE01", cause=cause, details=details)
        self.field = field


class ConfigError(RestError):
    """Configuration error"""

    def __init__(
        self,
        message: str,
        code: str = "CONFIG01",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)
