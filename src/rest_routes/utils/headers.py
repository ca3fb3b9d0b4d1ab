"""Header helpers"""

from typing import Dict, Mapping, Optional

from requests.structures import CaseInsensitiveDict


JSON_CONTENT_TYPE = "application/json"


def merge_headers(
    defaults: Mapping[str, str], overrides: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """
    Merge per-call headers over the default headers

    Keys are compared case-sensitively. Neither input is modified.
    """
    merged = dict(defaults)
    if overrides:
        merged.update(overrides)
    return merged


def get_header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    """Look up a header value ignoring the case of its name"""
    if not headers:
        return None
    return CaseInsensitiveDict(headers).get(name)


def is_json_content_type(value: Optional[str]) -> bool:
    """Check whether a content-type value declares JSON"""
    return value is not None and JSON_CONTENT_TYPE in value.lower()
