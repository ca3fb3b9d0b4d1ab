"""
REST client module
"""

from rest_routes.client.rest_client import (
    AuditLogCallback,
    RequestAuditEntry,
    RestClient,
    SENSITIVE_FIELDS,
    is_success_status,
    redact_sensitive_data,
)
from rest_routes.client.transport import (
    RequestsTransport,
    Transport,
    normalize_transport_error,
)

__all__ = [
    "AuditLogCallback",
    "RequestAuditEntry",
    "RestClient",
    "SENSITIVE_FIELDS",
    "is_success_status",
    "redact_sensitive_data",
    "RequestsTransport",
    "Transport",
    "normalize_transport_error",
]
