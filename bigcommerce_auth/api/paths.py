"""Store API path and header construction."""

from collections.abc import Mapping
from typing import Optional


# v3 endpoints are JSON-only and never take a format extension
JSON_ONLY_VERSION = "v3"

# The time endpoint only exists on v2
TIME_API_VERSION = "v2"


def accept_header(response_type: str) -> str:
    """Return the Accept header value for a response type."""
    return "application/xml" if response_type == "xml" else "application/json"


def format_extension(response_type: str) -> str:
    # JSON is the default format and is never marked in the path
    return ".xml" if response_type == "xml" else ""


def resolve_api_path(
    version: str,
    store_hash: str,
    path: str,
    response_type: str = "json",
) -> str:
    """Build the full API path for a store resource.

    For any version other than v3 the format extension is inserted before
    the query string, or appended when there is none.

    Examples:
        >>> resolve_api_path("v2", "abc123", "/products", "xml")
        '/stores/abc123/v2/products.xml'
        >>> resolve_api_path("v2", "abc123", "/products?limit=5", "xml")
        '/stores/abc123/v2/products.xml?limit=5'
        >>> resolve_api_path("v3", "abc123", "/catalog/products")
        '/stores/abc123/v3/catalog/products'
    """
    full_path = f"/stores/{store_hash}/{version}"

    if version == JSON_ONLY_VERSION:
        return full_path + path

    resource, separator, query = path.partition("?")
    return full_path + resource + format_extension(response_type) + separator + query


def time_path(store_hash: str) -> str:
    """Path of the store clock endpoint."""
    return f"/stores/{store_hash}/{TIME_API_VERSION}/time"


def build_api_headers(
    client_id: str,
    access_token: str,
    response_type: str = "json",
    overrides: Optional[Mapping[str, str]] = None,
) -> dict[str, str]:
    """Build headers for an authenticated API call.

    Caller overrides win on key collision.
    """
    headers = {
        "Accept": accept_header(response_type),
        "X-Auth-Client": client_id,
        "X-Auth-Token": access_token,
    }
    headers.update(overrides or {})
    return headers
