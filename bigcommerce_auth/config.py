"""BigCommerce app configuration."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Optional

import httpx

from bigcommerce_auth.errors import ConfigurationError


DEFAULT_API_VERSION = "v2"
DEFAULT_LOGIN_URL = "login.bigcommerce.com"
DEFAULT_API_URL = "api.bigcommerce.com"

RESPONSE_TYPES = ("json", "xml")

# Configuration keys as documented for the JavaScript-style config object
_CAMEL_CASE_KEYS = {
    "clientId": "client_id",
    "secret": "secret",
    "callback": "callback",
    "accessToken": "access_token",
    "storeHash": "store_hash",
    "apiVersion": "api_version",
    "responseType": "response_type",
    "headers": "headers",
    "loginUrl": "login_url",
    "apiUrl": "api_url",
    "agent": "transport",
    "failOnLimitReached": "fail_on_limit_reached",
}


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class BigCommerceConfig:
    """Credentials and options for one BigCommerce app/store pair.

    Instances are immutable; build a new config (and a new client) to
    change credentials.
    """

    client_id: str
    secret: str
    callback: Optional[str] = None
    access_token: Optional[str] = None
    store_hash: Optional[str] = None
    api_version: str = DEFAULT_API_VERSION
    response_type: str = "json"
    headers: Mapping[str, str] = field(default_factory=dict)
    login_url: Optional[str] = None
    api_url: Optional[str] = None
    transport: Optional[httpx.AsyncBaseTransport] = None
    fail_on_limit_reached: bool = False

    def __post_init__(self) -> None:
        if not self.client_id or not self.secret:
            raise ConfigurationError("client_id and secret are required")
        if self.response_type not in RESPONSE_TYPES:
            raise ConfigurationError(
                f"response_type must be one of {', '.join(RESPONSE_TYPES)}, "
                f"got {self.response_type!r}"
            )
        # Read-only copy so neither the caller nor later code can change it
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers or {})))
        object.__setattr__(self, "api_version", self.api_version or DEFAULT_API_VERSION)

    @property
    def login_host(self) -> str:
        return self.login_url or DEFAULT_LOGIN_URL

    @property
    def api_host(self) -> str:
        return self.api_url or DEFAULT_API_URL

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "BigCommerceConfig":
        """Build a config from a dict using camelCase or snake_case keys.

        Unknown keys (e.g. ``logLevel``) are ignored.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value

        if not kwargs.get("client_id") or not kwargs.get("secret"):
            raise ConfigurationError("clientId and secret are required")

        return cls(**kwargs)

    @classmethod
    def from_env(cls) -> "BigCommerceConfig":
        """Load configuration from environment variables."""
        client_id = os.getenv("BIGCOMMERCE_CLIENT_ID")
        secret = os.getenv("BIGCOMMERCE_SECRET")

        if not client_id or not secret:
            raise ConfigurationError(
                "BIGCOMMERCE_CLIENT_ID and BIGCOMMERCE_SECRET must be set"
            )

        return cls(
            client_id=client_id,
            secret=secret,
            callback=os.getenv("BIGCOMMERCE_CALLBACK_URL"),
            access_token=os.getenv("BIGCOMMERCE_ACCESS_TOKEN"),
            store_hash=os.getenv("BIGCOMMERCE_STORE_HASH"),
            api_version=os.getenv("BIGCOMMERCE_API_VERSION", DEFAULT_API_VERSION),
            response_type=os.getenv("BIGCOMMERCE_RESPONSE_TYPE", "json"),
            login_url=os.getenv("BIGCOMMERCE_LOGIN_URL"),
            api_url=os.getenv("BIGCOMMERCE_API_URL"),
            fail_on_limit_reached=_env_flag("BIGCOMMERCE_FAIL_ON_LIMIT_REACHED"),
        )
