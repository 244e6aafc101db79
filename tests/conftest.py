"""Shared fixtures for BigCommerce auth tests."""

import json

import httpx
import pytest


CLIENT_ID = "hjasdfhj09sasd80dsf04dfhg90rsds"
SECRET = "odpdf83m40fmxcv0345cvfgh73bdwjc-test-secret"
ACCESS_TOKEN = "ly8cl3wwcyj12vpechm34fd20oqpnl"
STORE_HASH = "x62tqn"


class RecordingTransport(httpx.AsyncBaseTransport):
    """Transport that records requests and replays queued responses."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        return self.responses.pop(0)

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def config_values():
    """Config dict using the documented camelCase keys."""
    return {
        "logLevel": "info",
        "clientId": CLIENT_ID,
        "secret": SECRET,
        "callback": "https://mysite.com/bigcommerce",
        "accessToken": ACCESS_TOKEN,
        "storeHash": STORE_HASH,
        "responseType": "json",
    }


@pytest.fixture
def make_client(config_values):
    """Build a BigCommerce client wired to a recording transport."""
    from bigcommerce_auth import BigCommerce

    def _make(*responses: httpx.Response, **overrides):
        transport = RecordingTransport(*responses)
        values = {**config_values, "agent": transport, **overrides}
        return BigCommerce(values), transport

    return _make
