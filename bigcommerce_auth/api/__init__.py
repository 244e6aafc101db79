"""Store API request shaping and transport."""

from .paths import build_api_headers, resolve_api_path, time_path
from .request import Request

__all__ = [
    "Request",
    "build_api_headers",
    "resolve_api_path",
    "time_path",
]
