"""Exceptions raised by the BigCommerce auth client."""


class ErrorCode:
    """Machine-readable error codes."""

    # Construction errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    # Verification errors
    MALFORMED_INPUT = "MALFORMED_INPUT"
    MALFORMED_PAYLOAD = "MALFORMED_PAYLOAD"
    MALFORMED_TOKEN = "MALFORMED_TOKEN"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    INVALID_AUDIENCE = "INVALID_AUDIENCE"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # API errors
    MISSING_CREDENTIALS = "MISSING_CREDENTIALS"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    RATE_LIMITED = "RATE_LIMITED"


class BigCommerceError(Exception):
    """Base exception for BigCommerce client errors."""

    default_code = ErrorCode.INVALID_ARGUMENT

    def __init__(
        self,
        message: str,
        code: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.original_error = original_error


class ConfigurationError(BigCommerceError):
    """Required construction input is missing or invalid."""

    default_code = ErrorCode.CONFIGURATION_ERROR


class InvalidArgumentError(BigCommerceError):
    """Caller supplied malformed input."""

    default_code = ErrorCode.INVALID_ARGUMENT


class MalformedPayloadError(BigCommerceError):
    """Signed payload is structurally invalid or its data is not JSON."""

    default_code = ErrorCode.MALFORMED_PAYLOAD


class MalformedInputError(InvalidArgumentError, MalformedPayloadError):
    """Signed payload is missing or does not have two dot-separated parts."""

    default_code = ErrorCode.MALFORMED_INPUT


class MalformedTokenError(BigCommerceError):
    """JWT could not be decoded or is missing required claims."""

    default_code = ErrorCode.MALFORMED_TOKEN


class InvalidSignatureError(BigCommerceError):
    """HMAC or JWT signature does not match."""

    default_code = ErrorCode.INVALID_SIGNATURE


class InvalidAudienceError(BigCommerceError):
    """JWT audience is missing or is not this app's client id."""

    default_code = ErrorCode.INVALID_AUDIENCE


class TokenExpiredError(BigCommerceError):
    """JWT is past its expiry."""

    default_code = ErrorCode.TOKEN_EXPIRED


class MissingCredentialsError(BigCommerceError):
    """API call attempted without an access token or store hash."""

    default_code = ErrorCode.MISSING_CREDENTIALS


class TransportError(BigCommerceError):
    """HTTP request failed or returned an error status."""

    default_code = ErrorCode.TRANSPORT_ERROR

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        code: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, code=code, original_error=original_error)
        self.status_code = status_code
        self.response_body = response_body


class RateLimitError(TransportError):
    """API rate limit reached while fail_on_limit_reached is set."""

    default_code = ErrorCode.RATE_LIMITED

    def __init__(self, message: str, retry_after: float, response_body: str | None = None):
        super().__init__(message, status_code=429, response_body=response_body)
        self.retry_after = retry_after
