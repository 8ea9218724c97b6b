"""Contract tests for the HTTP surface: status codes, media types and bodies."""

from unittest.mock import patch

import pytest
from starlette.testclient import TestClient

from paydemo import __version__
from paydemo.main import create_app
from paydemo.models.config import Settings
from paydemo.tools.stripe_api import StripeToolError
from tests.fixtures.webhook_payloads import create_event_payload, encode_payload, sign


@pytest.fixture
def client(settings: Settings) -> TestClient:
    """Client for an app with a vendor API key configured."""
    return TestClient(create_app(settings))


@pytest.fixture
def unconfigured_client(webhook_secret: str) -> TestClient:
    """Client for an app without a vendor API key."""
    return TestClient(create_app(Settings(webhook_secret=webhook_secret)))


class TestWebhookContract:
    """Contract tests for POST /webhook."""

    def test_success_body(self, client: TestClient, webhook_secret: str) -> None:
        """Test 200 with exactly {"received": true} as JSON."""
        body = encode_payload(create_event_payload())

        response = client.post(
            "/webhook", content=body, headers={"Stripe-Signature": sign(body, webhook_secret)}
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"received": True}

    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("t=abc,v1=00", "Malformed signature header"),
            ("t=1700000000", "Malformed signature header"),
            ("garbage", "Malformed signature header"),
        ],
    )
    def test_malformed_header_body(self, client: TestClient, header: str, expected: str) -> None:
        """Test 400 text bodies for malformed headers."""
        response = client.post("/webhook", content=b"{}", headers={"Stripe-Signature": header})

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == expected

    def test_mismatch_body(self, client: TestClient) -> None:
        """Test 400 text body for a wrong signature."""
        body = b"{}"

        response = client.post(
            "/webhook", content=body, headers={"Stripe-Signature": sign(body, "whsec_nope")}
        )

        assert response.status_code == 400
        assert response.text == "Invalid signature"

    def test_get_not_allowed(self, client: TestClient) -> None:
        """Test that the webhook only accepts POST."""
        response = client.get("/webhook")

        assert response.status_code == 405


class TestServiceRoutes:
    """Contract tests for the informational routes."""

    def test_index(self, client: TestClient) -> None:
        """Test the plain-text index route."""
        response = client.get("/")

        assert response.status_code == 200
        assert response.text == "paydemo api server is running"

    def test_hello(self, client: TestClient) -> None:
        """Test the UI connectivity route."""
        response = client.get("/api/hello")

        assert response.json() == {"message": "Hello paydemo!"}

    def test_health(self, client: TestClient) -> None:
        """Test the health check."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "version": __version__,
            "payments_enabled": True,
        }

    def test_cors_preflight(self, client: TestClient) -> None:
        """Test that the browser UI can call the API cross-origin."""
        response = client.options(
            "/api/products",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers


class TestProductContract:
    """Contract tests for POST /api/products."""

    def test_create_product(self, client: TestClient) -> None:
        """Test 201 with product and price ids."""
        with patch("paydemo.main.create_product") as mock_create:
            mock_create.return_value = {"product_id": "prod_1", "price_id": "price_1"}

            response = client.post("/api/products", json={"name": "T-shirt", "unit_amount": 2000})

        assert response.status_code == 201
        assert response.json() == {"product_id": "prod_1", "price_id": "price_1"}
        request = mock_create.call_args[0][1]
        assert request.name == "T-shirt"
        assert request.currency == "usd"

    def test_invalid_body(self, client: TestClient) -> None:
        """Test 400 with an error object for invalid input."""
        response = client.post("/api/products", json={"name": "", "unit_amount": 2000})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"

    def test_invalid_json(self, client: TestClient) -> None:
        """Test 400 for a body that is not JSON."""
        response = client.post("/api/products", content=b"{not json")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"

    def test_provider_failure(self, client: TestClient) -> None:
        """Test 502 when the provider call fails."""
        with patch("paydemo.main.create_product", side_effect=StripeToolError("create failed")):
            response = client.post("/api/products", json={"name": "Mug", "unit_amount": 900})

        assert response.status_code == 502
        assert response.json()["error"] == "provider_error"

    def test_not_configured(self, unconfigured_client: TestClient) -> None:
        """Test 503 when no vendor API key is configured."""
        response = unconfigured_client.post(
            "/api/products", json={"name": "Mug", "unit_amount": 900}
        )

        assert response.status_code == 503
        assert response.json()["error"] == "not_configured"


class TestCheckoutContract:
    """Contract tests for POST /api/checkout-sessions."""

    def test_create_session(self, client: TestClient, settings: Settings) -> None:
        """Test 201 with the session id and hosted URL."""
        with patch("paydemo.main.create_checkout_session") as mock_create:
            mock_create.return_value = {"id": "cs_1", "url": "https://checkout.example/cs_1"}

            response = client.post("/api/checkout-sessions", json={"price_id": "price_123"})

        assert response.status_code == 201
        assert response.json() == {"id": "cs_1", "url": "https://checkout.example/cs_1"}
        args = mock_create.call_args[0]
        assert args[1].quantity == 1
        assert args[2] == settings.success_url
        assert args[3] == settings.cancel_url

    def test_invalid_price(self, client: TestClient) -> None:
        """Test 400 for an id that is not a price id."""
        response = client.post("/api/checkout-sessions", json={"price_id": "prod_123"})

        assert response.status_code == 400
        assert "price" in response.json()["message"]

    def test_not_configured(self, unconfigured_client: TestClient) -> None:
        """Test 503 when no vendor API key is configured."""
        response = unconfigured_client.post(
            "/api/checkout-sessions", json={"price_id": "price_123"}
        )

        assert response.status_code == 503
