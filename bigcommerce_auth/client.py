"""BigCommerce OAuth2 authentication and API access."""

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from bigcommerce_auth.api.paths import build_api_headers, resolve_api_path, time_path
from bigcommerce_auth.api.request import Request
from bigcommerce_auth.auth.crypto import is_ip_address
from bigcommerce_auth.auth.jwt import DEFAULT_CHANNEL_ID, TokenIssuer
from bigcommerce_auth.auth.oauth import BigCommerceOAuth
from bigcommerce_auth.auth.signed_payload import verify_signed_payload
from bigcommerce_auth.config import BigCommerceConfig
from bigcommerce_auth.errors import (
    ConfigurationError,
    InvalidArgumentError,
    MissingCredentialsError,
    TransportError,
)


logger = logging.getLogger(__name__)


class BigCommerce:
    """Client for one BigCommerce app and, optionally, one store.

    Example:
        client = BigCommerce({
            "clientId": "hjasdfhj09sasd80dsf04dfhg90rsds",
            "secret": "odpdf83m40fmxcv0345cvfgh73bdwjc",
            "callback": "https://mysite.com/bigcommerce",
            "accessToken": "ly8cl3wwcyj12vpechm34fd20oqpnl",
            "storeHash": "x62tqn",
            "responseType": "json",
        })
        products = await client.get("/products")
    """

    def __init__(self, config: Union[BigCommerceConfig, Mapping[str, Any], None]):
        if config is None:
            raise ConfigurationError(
                "Config missing. The config object is required to make any call "
                "to the BigCommerce API"
            )

        if not isinstance(config, BigCommerceConfig):
            config = BigCommerceConfig.from_mapping(config)

        self.config = config
        self.api_version = config.api_version
        self._tokens = TokenIssuer(config.client_id, config.secret, config.store_hash)
        self._oauth = BigCommerceOAuth(config)

    # ==================================================================
    # Inbound verification
    # ==================================================================

    def verify_legacy_payload(self, signed_payload: str) -> dict[str, Any]:
        """Verify a legacy ``signed_payload`` (prefer verify_jwt)."""
        return verify_signed_payload(signed_payload, self.config.secret)

    verify = verify_legacy_payload

    def verify_jwt(self, signed_payload_jwt: str) -> dict[str, Any]:
        """Verify a ``signed_payload_jwt`` or a token from issue_app_context_token."""
        return self._tokens.verify_token(signed_payload_jwt)

    # ==================================================================
    # Outbound tokens
    # ==================================================================

    def issue_app_context_token(self, user: Any, context: str, url: Optional[str] = None) -> str:
        """Construct a JWT mimicking the load callback from auth callback data."""
        return self._tokens.issue_app_context_token(user, context, url)

    def issue_customer_login_token(
        self,
        customer_id: Any,
        channel_id: int = DEFAULT_CHANNEL_ID,
        redirect_url: Optional[str] = None,
        request_ip: Optional[str] = None,
    ) -> str:
        """Construct a Customer Login API JWT timestamped with the local clock."""
        return self._tokens.issue_customer_login_token(
            customer_id,
            channel_id=channel_id,
            redirect_url=redirect_url,
            request_ip=request_ip,
        )

    async def issue_customer_login_token_at_store_time(
        self,
        customer_id: Any,
        channel_id: int = DEFAULT_CHANNEL_ID,
        redirect_url: Optional[str] = None,
        request_ip: Optional[str] = None,
    ) -> str:
        """Construct a Customer Login API JWT timestamped with the store's clock.

        Avoids rejections caused by clock skew between this host and
        BigCommerce. Any error from the time lookup fails the whole call.
        """
        if request_ip is not None and not is_ip_address(request_ip):
            raise InvalidArgumentError(f"Invalid IP address: {request_ip!r}")

        issued_at = await self.get_time()
        return self._tokens.issue_customer_login_token(
            customer_id,
            channel_id=channel_id,
            redirect_url=redirect_url,
            request_ip=request_ip,
            issued_at=issued_at,
        )

    # ==================================================================
    # OAuth
    # ==================================================================

    async def authorize(self, query: Optional[Mapping[str, Any]]) -> Any:
        """Exchange the auth callback query for a permanent access token."""
        return await self._oauth.exchange_code(query)

    # ==================================================================
    # Store API
    # ==================================================================

    def _require_credentials(self) -> None:
        if not self.config.access_token or not self.config.store_hash:
            raise MissingCredentialsError(
                "The access token and store hash are required to call the "
                "BigCommerce API"
            )

    def create_api_request(self, response_type: Optional[str] = None) -> Request:
        self._require_credentials()
        return Request(
            self.config.api_host,
            headers=build_api_headers(
                self.config.client_id,
                self.config.access_token,
                response_type or self.config.response_type,
                self.config.headers,
            ),
            fail_on_limit_reached=self.config.fail_on_limit_reached,
            transport=self.config.transport,
        )

    async def request(self, method: str, path: str, data: Any = None) -> Any:
        """Call the store API at path using the configured API version.

        Raises:
            MissingCredentialsError: If access_token or store_hash is not set
            TransportError: If the request fails
        """
        request = self.create_api_request()
        full_path = resolve_api_path(
            self.api_version,
            self.config.store_hash,
            path,
            self.config.response_type,
        )
        return await request.run(method, full_path, data)

    async def get_time(self) -> int:
        """Fetch the store's current Unix time from the v2 time endpoint."""
        # The time endpoint is read as JSON regardless of response_type
        request = self.create_api_request(response_type="json")
        response = await request.run("GET", time_path(self.config.store_hash))

        if not isinstance(response, Mapping) or "time" not in response:
            raise TransportError(
                "Unexpected response from the time endpoint",
                response_body=str(response),
            )
        try:
            store_time = int(response["time"])
        except (TypeError, ValueError) as e:
            raise TransportError(
                f"Unexpected time value from the time endpoint: {response['time']!r}",
                response_body=str(response),
                original_error=e,
            ) from e

        logger.debug("Store %s reports time %s", self.config.store_hash, store_time)
        return store_time

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, data: Any = None) -> Any:
        return await self.request("POST", path, data)

    async def put(self, path: str, data: Any = None) -> Any:
        return await self.request("PUT", path, data)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
