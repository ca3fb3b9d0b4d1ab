"""
URL resolution for route templates
Substitutes path parameters and sets query parameters on the base URL
"""

import re
from typing import List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from rest_routes.exceptions import MalformedURL


# Matches "[name]" (file-system style) and ":name" (express style) placeholders.
# ":name" only counts at the start of a segment, so "/v1/items:batchGet" has none.
PLACEHOLDER_PATTERN = re.compile(
    r"\[([A-Za-z0-9_.~-]+)\]|(?<=/):([A-Za-z_][A-Za-z0-9_]*)"
)


def _to_text(value: object) -> str:
    return "" if value is None else str(value)


def placeholder_names(path: str) -> List[str]:
    """
    Extract placeholder names from a path template

    Args:
        path: Path template such as "/users/:id/posts/[slug]"

    Returns:
        Placeholder names in order of first appearance
    """
    names: List[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(path):
        name = match.group(1) or match.group(2)
        if name not in names:
            names.append(name)
    return names


def substitute_params(
    path: str, params: Optional[Mapping[str, object]] = None
) -> str:
    """
    Replace every "[key]" and ":key" occurrence for each supplied key

    Placeholders without a supplied value are left verbatim.
    """
    if not params:
        return path

    updated = path
    for key, value in params.items():
        text = _to_text(value)
        updated = updated.replace(f"[{key}]", text).replace(f":{key}", text)
    return updated


def _set_query(
    pairs: List[Tuple[str, str]], key: str, value: str
) -> List[Tuple[str, str]]:
    """Set a query key, replacing the first occurrence and dropping the rest"""
    result: List[Tuple[str, str]] = []
    replaced = False
    for existing_key, existing_value in pairs:
        if existing_key != key:
            result.append((existing_key, existing_value))
        elif not replaced:
            result.append((key, value))
            replaced = True
    if not replaced:
        result.append((key, value))
    return result


def resolve_url(
    base_url: str,
    path: str,
    params: Optional[Mapping[str, object]] = None,
    query: Optional[Mapping[str, object]] = None,
) -> str:
    """
    Build an absolute URL from a base URL and a path template

    Args:
        base_url: Base address the path is appended to
        path: Path template with ":name" or "[name]" placeholders
        params: Placeholder values
        query: Query values, set on the URL (overwriting existing keys)

    Returns:
        Absolute URL string

    Raises:
        MalformedURL: If the result is not a valid absolute URL
    """
    url = f"{base_url}{substitute_params(path, params)}"

    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise MalformedURL(f"Invalid URL: {url}", url=url, cause=e) from e

    if not parts.scheme or not parts.netloc:
        raise MalformedURL(f"Invalid URL: {url}", url=url)

    if not query:
        return url

    pairs = parse_qsl(parts.query, keep_blank_values=True)
    for key, value in query.items():
        pairs = _set_query(pairs, key, _to_text(value))

    return urlunsplit(parts._replace(query=urlencode(pairs)))
