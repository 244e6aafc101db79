"""HTTP transport for BigCommerce login and API hosts."""

import asyncio
import json
import logging
from typing import Any, Optional

import httpx

from bigcommerce_auth.errors import RateLimitError, TransportError


logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT = 30.0

# Seconds to wait when a 429 response has no X-Retry-After header
DEFAULT_RETRY_AFTER = 1.0


class Request:
    """Runs HTTP requests against a single BigCommerce host."""

    def __init__(
        self,
        hostname: str,
        headers: Optional[dict[str, str]] = None,
        fail_on_limit_reached: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the request runner.

        Args:
            hostname: Host to call, e.g. ``api.bigcommerce.com``. ``https://``
                is assumed when no scheme is given.
            headers: Headers sent with every request
            fail_on_limit_reached: Raise RateLimitError on 429 instead of
                waiting and retrying
            transport: Custom httpx transport (proxies, mocks)
            timeout: Per-request timeout in seconds
        """
        self.base_url = hostname if "://" in hostname else f"https://{hostname}"
        self.headers = dict(headers or {})
        self.fail_on_limit_reached = fail_on_limit_reached
        self.transport = transport
        self.timeout = timeout

    async def run(self, method: str, path: str, data: Any = None) -> Any:
        """Send a request and return the parsed response body.

        Args:
            method: HTTP method, case-insensitive
            path: Path relative to the host
            data: JSON-serializable request body

        Returns:
            Decoded JSON for JSON responses, text otherwise, or None if the
            body is empty

        Raises:
            RateLimitError: On 429 when fail_on_limit_reached is set
            TransportError: On network failure or an error status
        """
        method = method.upper()

        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            while True:
                logger.debug("Requesting %s %s%s", method, self.base_url, path)
                try:
                    response = await client.request(method, path, json=data)
                except httpx.HTTPError as e:
                    logger.error("Request %s %s failed: %s", method, path, e)
                    raise TransportError(
                        f"Request {method} {path} failed: {e}",
                        original_error=e,
                    ) from e

                if response.status_code != 429:
                    break

                retry_after = _retry_after(response)
                if self.fail_on_limit_reached:
                    raise RateLimitError(
                        "You have reached the rate limit for the BigCommerce API. "
                        f"Please retry in {retry_after} seconds.",
                        retry_after=retry_after,
                        response_body=response.text,
                    )

                logger.warning(
                    "Rate limit reached for the BigCommerce API, retrying in %s seconds",
                    retry_after,
                )
                await asyncio.sleep(retry_after)

        if response.status_code >= 400:
            logger.error(
                "Request %s %s returned %s", method, path, response.status_code
            )
            raise TransportError(
                f"Request returned error code: {response.status_code} "
                f"and body: {response.text}",
                status_code=response.status_code,
                response_body=response.text,
            )

        return _parse_body(response)


def _retry_after(response: httpx.Response) -> float:
    value = response.headers.get("X-Retry-After")
    if value is None:
        # Reset window reported in milliseconds
        value_ms = response.headers.get("X-Rate-Limit-Time-Reset-Ms")
        if value_ms is None:
            return DEFAULT_RETRY_AFTER
        try:
            return float(value_ms) / 1000
        except ValueError:
            return DEFAULT_RETRY_AFTER
    try:
        return float(value)
    except ValueError:
        return DEFAULT_RETRY_AFTER


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None

    content_type = response.headers.get("Content-Type", "")
    if "json" not in content_type:
        return response.text

    try:
        return response.json()
    except json.JSONDecodeError as e:
        raise TransportError(
            f"Unable to parse JSON response body: {e}",
            status_code=response.status_code,
            response_body=response.text,
            original_error=e,
        ) from e
