"""Tests for the BigCommerce client and its configuration."""

import time

import httpx
import jwt
import pytest

from tests.conftest import ACCESS_TOKEN, CLIENT_ID, SECRET, STORE_HASH


class TestBigCommerceConfig:
    """Tests for configuration loading."""

    def test_from_mapping_camel_case(self, config_values):
        """Test the documented camelCase keys are accepted."""
        from bigcommerce_auth.config import BigCommerceConfig

        config = BigCommerceConfig.from_mapping({
            **config_values,
            "apiVersion": "v3",
            "headers": {"Accept-Encoding": "*"},
            "loginUrl": "login.example.com",
            "apiUrl": "api.example.com",
            "failOnLimitReached": True,
        })

        assert config.client_id == CLIENT_ID
        assert config.secret == SECRET
        assert config.access_token == ACCESS_TOKEN
        assert config.store_hash == STORE_HASH
        assert config.api_version == "v3"
        assert config.headers == {"Accept-Encoding": "*"}
        assert config.login_host == "login.example.com"
        assert config.api_host == "api.example.com"
        assert config.fail_on_limit_reached is True

    def test_from_mapping_snake_case(self):
        """Test snake_case field names are accepted."""
        from bigcommerce_auth.config import BigCommerceConfig

        config = BigCommerceConfig.from_mapping({"client_id": "id", "secret": "s"})

        assert config.client_id == "id"
        assert config.api_version == "v2"
        assert config.response_type == "json"
        assert config.login_host == "login.bigcommerce.com"
        assert config.api_host == "api.bigcommerce.com"

    def test_from_mapping_missing_credentials(self):
        """Test missing client id or secret raises."""
        from bigcommerce_auth.config import BigCommerceConfig
        from bigcommerce_auth.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            BigCommerceConfig.from_mapping({"secret": "s"})
        with pytest.raises(ConfigurationError):
            BigCommerceConfig.from_mapping({"clientId": "id"})

    def test_invalid_response_type(self):
        """Test unknown response types are rejected."""
        from bigcommerce_auth.config import BigCommerceConfig
        from bigcommerce_auth.errors import ConfigurationError

        with pytest.raises(ConfigurationError, match="response_type"):
            BigCommerceConfig(client_id="id", secret="s", response_type="yaml")

    def test_config_is_frozen(self):
        """Test config can't be changed after construction."""
        import dataclasses
        from bigcommerce_auth.config import BigCommerceConfig

        headers = {"Accept-Encoding": "*"}
        config = BigCommerceConfig(client_id="id", secret="s", headers=headers)

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.access_token = "new"

        headers["X-Other"] = "1"
        assert "X-Other" not in config.headers

        with pytest.raises(TypeError):
            config.headers["X-Auth-Token"] = "other"
        assert "X-Auth-Token" not in config.headers

    def test_from_env(self, monkeypatch):
        """Test loading config from environment."""
        from bigcommerce_auth.config import BigCommerceConfig

        monkeypatch.setenv("BIGCOMMERCE_CLIENT_ID", "env-client")
        monkeypatch.setenv("BIGCOMMERCE_SECRET", "env-secret")
        monkeypatch.setenv("BIGCOMMERCE_STORE_HASH", "envhash")
        monkeypatch.setenv("BIGCOMMERCE_RESPONSE_TYPE", "xml")
        monkeypatch.setenv("BIGCOMMERCE_FAIL_ON_LIMIT_REACHED", "true")

        config = BigCommerceConfig.from_env()

        assert config.client_id == "env-client"
        assert config.secret == "env-secret"
        assert config.store_hash == "envhash"
        assert config.response_type == "xml"
        assert config.fail_on_limit_reached is True

    def test_from_env_missing(self, monkeypatch):
        """Test that missing environment variables raise."""
        from bigcommerce_auth.config import BigCommerceConfig
        from bigcommerce_auth.errors import ConfigurationError

        monkeypatch.delenv("BIGCOMMERCE_CLIENT_ID", raising=False)
        monkeypatch.setenv("BIGCOMMERCE_SECRET", "env-secret")

        with pytest.raises(ConfigurationError, match="BIGCOMMERCE_CLIENT_ID"):
            BigCommerceConfig.from_env()


class TestBigCommerce:
    """Tests for the client facade."""

    def test_missing_config(self):
        """Test construction without config raises."""
        from bigcommerce_auth import BigCommerce
        from bigcommerce_auth.errors import ConfigurationError

        with pytest.raises(ConfigurationError, match="Config missing"):
            BigCommerce(None)

    def test_accepts_config_object(self):
        """Test construction from a BigCommerceConfig."""
        from bigcommerce_auth import BigCommerce, BigCommerceConfig

        config = BigCommerceConfig(client_id=CLIENT_ID, secret=SECRET)
        client = BigCommerce(config)

        assert client.config is config
        assert client.api_version == "v2"

    def test_verify_legacy_payload(self, make_client):
        """Test the legacy payload is verified with the client secret."""
        from bigcommerce_auth.auth.signed_payload import sign_payload

        client, _ = make_client()
        payload = {"context": "stores/x62tqn", "user": {"id": 1}}

        assert client.verify_legacy_payload(sign_payload(payload, SECRET)) == payload
        assert client.verify(sign_payload(payload, SECRET)) == payload

    def test_verify_legacy_payload_wrong_secret(self, make_client):
        """Test a payload signed with another secret is rejected."""
        from bigcommerce_auth.auth.signed_payload import sign_payload
        from bigcommerce_auth.errors import InvalidSignatureError

        client, _ = make_client()

        with pytest.raises(InvalidSignatureError):
            client.verify_legacy_payload(sign_payload({"a": 1}, "another-secret-0123456789abcdef"))

    def test_app_context_token_roundtrip(self, make_client):
        """Test issue_app_context_token output passes verify_jwt."""
        client, _ = make_client()
        user = {"id": 9, "email": "owner@example.com"}

        claims = client.verify_jwt(client.issue_app_context_token(user, "stores/x62tqn", "/orders"))

        assert claims["user"] == user
        assert claims["owner"] == user
        assert claims["sub"] == "stores/x62tqn"
        assert claims["url"] == "/orders"

    def test_verify_jwt_other_app(self, make_client):
        """Test a token issued by another app is rejected."""
        from bigcommerce_auth import BigCommerce
        from bigcommerce_auth.errors import InvalidAudienceError

        client, _ = make_client()
        other = BigCommerce({"clientId": "other-client", "secret": SECRET})

        with pytest.raises(InvalidAudienceError):
            client.verify_jwt(other.issue_app_context_token({"id": 1}, "stores/x62tqn"))

    def test_customer_login_token(self, make_client):
        """Test the customer login token uses the configured store."""
        client, _ = make_client()

        token = client.issue_customer_login_token(42, 3, redirect_url="/cart.php")
        claims = jwt.decode(token, SECRET, algorithms=["HS256"])

        assert claims["store_hash"] == STORE_HASH
        assert claims["customer_id"] == 42
        assert claims["channel_id"] == 3
        assert claims["redirect_url"] == "/cart.php"

    def test_customer_login_token_invalid_ip(self, make_client):
        """Test an invalid IP fails token issuance."""
        from bigcommerce_auth.errors import InvalidArgumentError

        client, _ = make_client()

        with pytest.raises(InvalidArgumentError):
            client.issue_customer_login_token(42, 3, request_ip="999.999.999.999")

    @pytest.mark.asyncio
    async def test_customer_login_token_at_store_time(self, make_client):
        """Test the store clock is used for iat."""
        store_time = int(time.time()) - 120
        client, transport = make_client(
            httpx.Response(200, json={"time": store_time}),
            responseType="xml",
            apiVersion="v3",
        )

        token = await client.issue_customer_login_token_at_store_time(42, request_ip="::1")
        claims = jwt.decode(token, SECRET, algorithms=["HS256"])

        assert claims["iat"] == store_time
        assert claims["exp"] == store_time + 24 * 60 * 60
        assert claims["request_ip"] == "::1"

        sent = transport.requests[0]
        assert sent.url.path == f"/stores/{STORE_HASH}/v2/time"
        assert sent.headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_customer_login_token_at_store_time_invalid_ip(self, make_client):
        """Test an invalid IP fails before the time lookup."""
        from bigcommerce_auth.errors import InvalidArgumentError

        client, transport = make_client()

        with pytest.raises(InvalidArgumentError):
            await client.issue_customer_login_token_at_store_time(42, request_ip="not-an-ip")
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_customer_login_token_at_store_time_transport_error(self, make_client):
        """Test a failed time lookup fails token issuance."""
        from bigcommerce_auth.errors import TransportError

        client, _ = make_client(httpx.Response(500, text="Internal Server Error"))

        with pytest.raises(TransportError):
            await client.issue_customer_login_token_at_store_time(42)

    @pytest.mark.asyncio
    async def test_get_time_unexpected_response(self, make_client):
        """Test a time response without a time field raises."""
        from bigcommerce_auth.errors import TransportError

        client, _ = make_client(httpx.Response(200, json={"status": "ok"}))

        with pytest.raises(TransportError, match="time endpoint"):
            await client.get_time()

    @pytest.mark.asyncio
    async def test_get_time_non_numeric(self, make_client):
        """Test a non-numeric time value raises a transport error."""
        from bigcommerce_auth.errors import TransportError

        client, _ = make_client(httpx.Response(200, json={"time": "soon"}))

        with pytest.raises(TransportError, match="time value") as exc_info:
            await client.get_time()
        assert isinstance(exc_info.value.original_error, ValueError)

    @pytest.mark.asyncio
    async def test_authorize(self, make_client):
        """Test the auth callback query is exchanged for a token."""
        token_response = {
            "access_token": "g3y3ab5mtiqqe1t0lfo6uvkqrxpbtx",
            "scope": "store_v2_orders",
            "user": {"id": 24654, "email": "merchant@example.com"},
            "context": "stores/x62tqn",
        }
        client, transport = make_client(httpx.Response(200, json=token_response))

        result = await client.authorize({
            "code": "qr6h3thvbvag2ffq",
            "scope": "store_v2_orders",
            "context": "stores/x62tqn",
        })

        assert result == token_response
        sent = transport.requests[0]
        assert sent.url.host == "login.bigcommerce.com"
        assert sent.url.path == "/oauth2/token"
        assert "X-Auth-Token" not in sent.headers
        assert transport.last_json["client_id"] == CLIENT_ID
        assert transport.last_json["client_secret"] == SECRET
        assert transport.last_json["redirect_uri"] == "https://mysite.com/bigcommerce"
        assert transport.last_json["code"] == "qr6h3thvbvag2ffq"

    @pytest.mark.asyncio
    async def test_authorize_missing_query(self, make_client):
        """Test authorize without a query raises before any request."""
        from bigcommerce_auth.errors import InvalidArgumentError

        client, transport = make_client()

        with pytest.raises(InvalidArgumentError, match="query"):
            await client.authorize(None)
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_get(self, make_client):
        """Test GET builds the versioned path and auth headers."""
        client, transport = make_client(httpx.Response(200, json=[{"id": 1}]))

        result = await client.get("/products?limit=5")

        assert result == [{"id": 1}]
        sent = transport.requests[0]
        assert sent.method == "GET"
        assert sent.url.host == "api.bigcommerce.com"
        assert sent.url.path == f"/stores/{STORE_HASH}/v2/products"
        assert sent.url.params["limit"] == "5"
        assert sent.headers["Accept"] == "application/json"
        assert sent.headers["X-Auth-Client"] == CLIENT_ID
        assert sent.headers["X-Auth-Token"] == ACCESS_TOKEN

    @pytest.mark.asyncio
    async def test_get_xml(self, make_client):
        """Test xml responses use the .xml path and Accept header."""
        client, transport = make_client(
            httpx.Response(200, text="<products/>", headers={"Content-Type": "application/xml"}),
            responseType="xml",
        )

        result = await client.get("/products")

        assert result == "<products/>"
        sent = transport.requests[0]
        assert sent.url.path == f"/stores/{STORE_HASH}/v2/products.xml"
        assert sent.headers["Accept"] == "application/xml"

    @pytest.mark.asyncio
    async def test_v3_and_custom_headers(self, make_client):
        """Test v3 paths and header overrides."""
        client, transport = make_client(
            httpx.Response(200, json={"data": []}),
            apiVersion="v3",
            apiUrl="http://localhost:9000",
            headers={"Accept-Encoding": "*"},
        )

        await client.get("/catalog/products")

        sent = transport.requests[0]
        assert str(sent.url) == f"http://localhost:9000/stores/{STORE_HASH}/v3/catalog/products"
        assert sent.headers["Accept-Encoding"] == "*"

    @pytest.mark.asyncio
    async def test_post_put_delete(self, make_client):
        """Test write verbs send their bodies."""
        client, transport = make_client(
            httpx.Response(201, json={"id": 5}),
            httpx.Response(200, json={"id": 5, "name": "Cap"}),
            httpx.Response(204),
        )

        assert await client.post("/products", {"name": "Hat"}) == {"id": 5}
        assert await client.put("/products/5", {"name": "Cap"}) == {"id": 5, "name": "Cap"}
        assert await client.delete("/products/5") is None

        methods = [r.method for r in transport.requests]
        assert methods == ["POST", "PUT", "DELETE"]
        assert transport.requests[1].url.path == f"/stores/{STORE_HASH}/v2/products/5"
        assert transport.requests[2].content == b""

    @pytest.mark.asyncio
    async def test_get_without_access_token(self, make_client, config_values):
        """Test API calls need an access token."""
        from bigcommerce_auth import BigCommerce
        from bigcommerce_auth.errors import MissingCredentialsError
        from tests.conftest import RecordingTransport

        transport = RecordingTransport()
        values = {k: v for k, v in config_values.items() if k != "accessToken"}
        client = BigCommerce({**values, "agent": transport})

        with pytest.raises(MissingCredentialsError):
            await client.get("/products")
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_get_without_store_hash(self, make_client):
        """Test API calls need a store hash."""
        from bigcommerce_auth.errors import MissingCredentialsError

        client, transport = make_client(storeHash=None)

        with pytest.raises(MissingCredentialsError):
            await client.delete("/products/1")
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_rate_limit_propagates(self, make_client):
        """Test rate limit errors reach the caller when configured."""
        from bigcommerce_auth.errors import RateLimitError

        client, _ = make_client(
            httpx.Response(429, headers={"X-Retry-After": "30"}),
            failOnLimitReached=True,
        )

        with pytest.raises(RateLimitError) as exc_info:
            await client.get("/orders")

        assert exc_info.value.retry_after == 30
