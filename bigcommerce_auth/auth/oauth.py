"""BigCommerce OAuth 2.0 authorization code exchange."""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from bigcommerce_auth.api.request import Request
from bigcommerce_auth.config import BigCommerceConfig
from bigcommerce_auth.errors import InvalidArgumentError


logger = logging.getLogger(__name__)


TOKEN_PATH = "/oauth2/token"
GRANT_TYPE = "authorization_code"


class BigCommerceOAuth:
    """Exchanges auth callback codes for permanent store access tokens."""

    def __init__(self, config: BigCommerceConfig):
        self.config = config

    def build_token_request(self, query: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        """Build the token request body from the auth callback query.

        Args:
            query: Query parameters from the auth callback (code, scope, context)

        Raises:
            InvalidArgumentError: If query is missing
        """
        if query is None:
            raise InvalidArgumentError("The URL query parameters are required.")

        return {
            "client_id": self.config.client_id,
            "client_secret": self.config.secret,
            "redirect_uri": self.config.callback,
            "grant_type": GRANT_TYPE,
            "code": query.get("code"),
            "scope": query.get("scope"),
            "context": query.get("context"),
        }

    async def exchange_code(self, query: Optional[Mapping[str, Any]]) -> Any:
        """Exchange an authorization code for an access token.

        Args:
            query: Query parameters from the auth callback

        Returns:
            Parsed token response, including ``access_token`` and ``context``

        Raises:
            InvalidArgumentError: If query is missing
            TransportError: If the token exchange fails
        """
        payload = self.build_token_request(query)

        request = Request(
            self.config.login_host,
            fail_on_limit_reached=self.config.fail_on_limit_reached,
            transport=self.config.transport,
        )

        logger.info("Exchanging authorization code for context %s", payload["context"])
        return await request.run("POST", TOKEN_PATH, payload)
