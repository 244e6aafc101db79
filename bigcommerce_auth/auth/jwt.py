"""JWT issuance and verification for app-context and customer-login tokens."""

import logging
import secrets
import time
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Optional

import jwt
from jwt.exceptions import (
    ExpiredSignatureError,
    InvalidAlgorithmError,
    InvalidTokenError,
    MissingRequiredClaimError,
)
from jwt.exceptions import InvalidAudienceError as JWTInvalidAudienceError
from jwt.exceptions import InvalidSignatureError as JWTInvalidSignatureError

from bigcommerce_auth.auth.crypto import RandomBytes, generate_nonce, is_ip_address
from bigcommerce_auth.errors import (
    InvalidArgumentError,
    InvalidAudienceError,
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)


logger = logging.getLogger(__name__)


# Algorithm for JWT signing and verification. Not configurable.
ALGORITHM = "HS256"

# Token expiration (24 hours)
EXPIRATION_SECONDS = 24 * 60 * 60

CUSTOMER_LOGIN_OPERATION = "customer_login"
DEFAULT_CHANNEL_ID = 1


@dataclass(frozen=True)
class AppContextClaims:
    """Claims mirroring the ``signed_payload_jwt`` of a load callback."""

    aud: str
    iss: str
    sub: str
    user: Any
    owner: Any
    url: str
    iat: int
    exp: int

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CustomerLoginClaims:
    """Claims for the storefront Customer Login API."""

    iss: str
    store_hash: Optional[str]
    customer_id: Any
    channel_id: int
    jti: str
    iat: int
    exp: int
    operation: str = CUSTOMER_LOGIN_OPERATION
    redirect_url: Optional[str] = None
    request_ip: Optional[str] = None

    def __post_init__(self) -> None:
        if self.request_ip is not None and not is_ip_address(self.request_ip):
            raise InvalidArgumentError(f"Invalid IP address: {self.request_ip!r}")

    def with_redirect_url(self, redirect_url: str) -> "CustomerLoginClaims":
        return replace(self, redirect_url=redirect_url)

    def with_request_ip(self, request_ip: str) -> "CustomerLoginClaims":
        return replace(self, request_ip=request_ip)

    def to_payload(self) -> dict[str, Any]:
        """Encodable claim dict; absent optional claims are left out."""
        return {key: value for key, value in asdict(self).items() if value is not None}


class TokenIssuer:
    """Signs and verifies HS256 JWTs with the app's client secret."""

    def __init__(
        self,
        client_id: str,
        secret: str,
        store_hash: Optional[str] = None,
        random_bytes: RandomBytes = secrets.token_bytes,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the issuer.

        Args:
            client_id: App client id, used as issuer and audience
            secret: App client secret, used as the HMAC key
            store_hash: Store hash for customer-login tokens
            random_bytes: Byte source for ``jti`` nonces
            clock: Returns the current Unix time in seconds
        """
        self.client_id = client_id
        self._secret = secret
        self.store_hash = store_hash
        self._random_bytes = random_bytes
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    def _sign(self, payload: dict[str, Any]) -> str:
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def build_app_context_claims(self, user: Any, context: str, url: Optional[str] = None) -> AppContextClaims:
        now = self._now()
        return AppContextClaims(
            aud=self.client_id,
            iss=self.client_id,
            sub=context,
            user=user,
            owner=user,
            url=url or "/",
            iat=now,
            exp=now + EXPIRATION_SECONDS,
        )

    def issue_app_context_token(self, user: Any, context: str, url: Optional[str] = None) -> str:
        """Create a JWT shaped like the load callback's ``signed_payload_jwt``.

        Lets the auth callback hand the app the same token format as a load
        callback, so both can share one handler.

        Args:
            user: The user object from the auth callback
            context: Store context, e.g. ``stores/abc123``
            url: App path to open, defaults to ``/``

        Returns:
            Encoded JWT valid for 24 hours
        """
        claims = self.build_app_context_claims(user, context, url)
        logger.debug("Issuing app context token for %s", context)
        return self._sign(claims.to_payload())

    def build_customer_login_claims(
        self,
        customer_id: Any,
        channel_id: int = DEFAULT_CHANNEL_ID,
        redirect_url: Optional[str] = None,
        request_ip: Optional[str] = None,
        issued_at: Optional[int] = None,
    ) -> CustomerLoginClaims:
        """Build customer-login claims.

        Raises:
            InvalidArgumentError: If request_ip is not an IP literal
        """
        iat = int(issued_at) if issued_at is not None else self._now()
        claims = CustomerLoginClaims(
            iss=self.client_id,
            store_hash=self.store_hash,
            customer_id=customer_id,
            channel_id=channel_id,
            jti=generate_nonce(self._random_bytes),
            iat=iat,
            exp=iat + EXPIRATION_SECONDS,
        )
        if redirect_url:
            claims = claims.with_redirect_url(redirect_url)
        if request_ip is not None:
            claims = claims.with_request_ip(request_ip)
        return claims

    def issue_customer_login_token(
        self,
        customer_id: Any,
        channel_id: int = DEFAULT_CHANNEL_ID,
        redirect_url: Optional[str] = None,
        request_ip: Optional[str] = None,
        issued_at: Optional[int] = None,
    ) -> str:
        """Create a JWT for the storefront Customer Login API.

        Args:
            customer_id: Storefront customer id
            channel_id: Channel the customer logs in to
            redirect_url: Relative storefront path to land on, e.g. ``/shop-all/``
            request_ip: Login is rejected unless it comes from this IP
            issued_at: Unix time to use for ``iat`` instead of the local clock

        Returns:
            Encoded JWT valid for 24 hours from ``iat``

        Raises:
            InvalidArgumentError: If request_ip is not an IP literal
        """
        claims = self.build_customer_login_claims(
            customer_id,
            channel_id=channel_id,
            redirect_url=redirect_url,
            request_ip=request_ip,
            issued_at=issued_at,
        )
        logger.debug(
            "Issuing customer login token for customer %s on channel %s",
            customer_id,
            channel_id,
        )
        return self._sign(claims.to_payload())

    def verify_token(self, token: str) -> dict[str, Any]:
        """Verify a JWT signed with the app secret.

        Signature, algorithm, audience and expiry are all checked.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidAudienceError: If ``aud`` is missing or not this client id
            InvalidSignatureError: If the signature or algorithm is wrong
            MalformedTokenError: If the token can't be decoded
        """
        if not token:
            raise MalformedTokenError("A token is required")

        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                audience=self.client_id,
                options={"require": ["exp"]},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired", original_error=e) from e
        except JWTInvalidAudienceError as e:
            raise InvalidAudienceError("Token audience is invalid", original_error=e) from e
        except MissingRequiredClaimError as e:
            if e.claim == "aud":
                raise InvalidAudienceError("Token has no audience", original_error=e) from e
            raise MalformedTokenError(f"Token is missing the {e.claim} claim", original_error=e) from e
        except (JWTInvalidSignatureError, InvalidAlgorithmError) as e:
            logger.warning("Rejected token with invalid signature or algorithm")
            raise InvalidSignatureError("Token signature is invalid", original_error=e) from e
        except InvalidTokenError as e:
            raise MalformedTokenError("Token is malformed", original_error=e) from e
