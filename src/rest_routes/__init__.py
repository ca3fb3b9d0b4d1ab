"""
Typed REST client for Python

Main entry point for the package
"""

from rest_routes.client import (
    RestClient,
    RequestsTransport,
    Transport,
    RequestAuditEntry,
)
from rest_routes.exceptions import (
    RestError,
    RestErrorCategory,
    TransportErrorCode,
    TransportFailure,
    MalformedURL,
    HTTPStatusFailure,
    DecodeFailure,
    RouteError,
    ConfigError,
)

# Configuration
from rest_routes.config import (
    ClientConfig,
    ConfigDefaults,
    ConfigLoader,
    ConfigValidator,
)

# Models
from rest_routes.models import (
    Failure,
    HttpMethod,
    RestRequest,
    RestResponse,
    Success,
)

# Routes
from rest_routes.routes import Route, RouteMap

__version__ = "0.1.0"

__all__ = [
    # Client
    "RestClient",
    "RequestsTransport",
    "Transport",
    "RequestAuditEntry",
    # Exceptions
    "RestError",
    "RestErrorCategory",
    "TransportErrorCode",
    "TransportFailure",
    "MalformedURL",
    "HTTPStatusFailure",
    "DecodeFailure",
    "RouteError",
    "ConfigError",
    # Configuration
    "ClientConfig",
    "ConfigDefaults",
    "ConfigLoader",
    "ConfigValidator",
    # Models
    "Failure",
    "HttpMethod",
    "RestRequest",
    "RestResponse",
    "Success",
    # Routes
    "Route",
    "RouteMap",
]
