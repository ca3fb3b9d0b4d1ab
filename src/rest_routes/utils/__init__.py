"""Utilities module initialization"""

from rest_routes.utils.headers import (
    JSON_CONTENT_TYPE,
    get_header,
    is_json_content_type,
    merge_headers,
)
from rest_routes.utils.url import (
    placeholder_names,
    resolve_url,
    substitute_params,
)

__all__ = [
    "JSON_CONTENT_TYPE",
    "get_header",
    "is_json_content_type",
    "merge_headers",
    "placeholder_names",
    "resolve_url",
    "substitute_params",
]
