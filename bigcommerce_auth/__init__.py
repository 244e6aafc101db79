"""BigCommerce OAuth, request signing and API access for third-party apps."""

from .client import BigCommerce
from .config import BigCommerceConfig
from .errors import (
    BigCommerceError,
    ConfigurationError,
    ErrorCode,
    InvalidArgumentError,
    InvalidAudienceError,
    InvalidSignatureError,
    MalformedInputError,
    MalformedPayloadError,
    MalformedTokenError,
    MissingCredentialsError,
    RateLimitError,
    TokenExpiredError,
    TransportError,
)

__all__ = [
    "BigCommerce",
    "BigCommerceConfig",
    "BigCommerceError",
    "ConfigurationError",
    "ErrorCode",
    "InvalidArgumentError",
    "InvalidAudienceError",
    "InvalidSignatureError",
    "MalformedInputError",
    "MalformedPayloadError",
    "MalformedTokenError",
    "MissingCredentialsError",
    "RateLimitError",
    "TokenExpiredError",
    "TransportError",
]
