import pytest
from fastapi.testclient import TestClient

from app.core.deps import get_rate_engine, get_rate_limiter
from app.core.exceptions import ProviderConfigurationError, ProviderTimeoutError
from app.core.rate_limit import RateLimiter
from app.main import app
from app.services.providers.estimate import EstimateRateProvider
from app.services.shipping.cache import RateCache
from app.services.shipping.engine import RateQuoteEngine

CART = {
    "cep": "20040-020",
    "products": [
        {"id": "p1", "price": 4990, "quantity": 2, "weight": 0.3, "width": 10, "height": 4, "length": 20},
        {"id": 7, "price": 2990, "quantity": 1, "weight": 0.2, "dimensions": "15x3x20"},
    ],
}


class FailingProvider:
    name = "failing"
    estimated = False

    def __init__(self, error):
        self.error = error

    async def quote(self, request):
        raise self.error


def _engine(provider=None):
    provider = provider or EstimateRateProvider(breakpoints_kg=[0.1, 1.0, 5.0], base_prices=[1200, 1800, 2500, 4500])
    return RateQuoteEngine(provider=provider, from_zip="01310100", cache=RateCache(ttl_seconds=300))


@pytest.fixture
def limiter():
    return RateLimiter(limit=3, window_seconds=60)


@pytest.fixture
def client(limiter):
    engine = _engine()
    app.dependency_overrides[get_rate_engine] = lambda: engine
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_calculate_returns_ranked_estimate(client):
    response = client.post("/api/shipping/calculate", json=CART)
    assert response.status_code == 200
    body = response.json()

    assert body["success"] is True
    assert body["fromZip"] == "01310100"
    assert body["toZip"] == "20040020"
    assert body["estimated"] is True
    prices = [option["price"] for option in body["options"]]
    assert prices == sorted(prices)
    assert [option["isCheapest"] for option in body["options"]] == [True, False, False]
    first = body["options"][0]
    assert {"originalPrice", "deliveryTime", "deliveryRange", "companyId", "currency"} <= set(first)
    assert "X-Request-ID" in response.headers


def test_calculate_rejects_invalid_cep(client):
    response = client.post("/api/shipping/calculate", json={**CART, "cep": "00000-000"})
    assert response.status_code == 400
    assert "postal code" in response.json()["error"]


def test_calculate_rejects_empty_cart(client):
    response = client.post("/api/shipping/calculate", json={"cep": "20040020", "products": []})
    assert response.status_code == 400
    assert response.json()["error"] == "Cart is empty"


def test_calculate_names_product_missing_dimensions(client):
    cart = {"cep": "20040020", "products": [{"id": "sku-9", "quantity": 1, "weight": 0.5}]}
    response = client.post("/api/shipping/calculate", json=cart)
    assert response.status_code == 400
    assert "sku-9" in response.json()["error"]


def test_calculate_is_rate_limited_per_client(client):
    headers = {"X-Forwarded-For": "203.0.113.9"}
    statuses = [client.post("/api/shipping/calculate", json=CART, headers=headers).status_code for _ in range(4)]
    assert statuses == [200, 200, 200, 429]

    other = client.post("/api/shipping/calculate", json=CART, headers={"X-Forwarded-For": "203.0.113.10"})
    assert other.status_code == 200


def test_rate_limited_response_shape(client):
    headers = {"X-Real-IP": "198.51.100.1"}
    for _ in range(3):
        client.post("/api/shipping/calculate", json=CART, headers=headers)
    response = client.post("/api/shipping/calculate", json=CART, headers=headers)
    assert response.status_code == 429
    assert "error" in response.json()
    assert "Retry-After" in response.headers


@pytest.mark.parametrize(
    "error,status_code",
    [(ProviderTimeoutError("read timeout"), 503), (ProviderConfigurationError("upstream status 401"), 500)],
)
def test_provider_failures_are_generic(client, error, status_code):
    app.dependency_overrides[get_rate_engine] = lambda: _engine(FailingProvider(error))
    response = client.post("/api/shipping/calculate", json=CART)
    assert response.status_code == status_code
    body = response.json()
    assert body["error"]
    assert "401" not in body["error"]
    assert "stack" not in body


@pytest.mark.parametrize(
    "zip_code,valid,clean",
    [("20040-020", True, "20040020"), ("1234", False, "1234"), ("99999-999", False, "99999999")],
)
def test_validate_zip_code(client, zip_code, valid, clean):
    response = client.get("/api/shipping/calculate", params={"zipCode": zip_code})
    assert response.status_code == 200
    assert response.json() == {"valid": valid, "zipCode": clean}


def test_validate_zip_code_requires_parameter(client):
    response = client.get("/api/shipping/calculate")
    assert response.status_code == 400


def test_generate_pix(client):
    payload = {"amount": 199.9, "customer": {"name": "Ana", "email": "ana@example.com", "phone": "11999999999"}}
    response = client.post("/api/pix/generate", json=payload)
    assert response.status_code == 200
    body = response.json()

    assert body["success"] is True
    pix = body["pix"]
    assert pix["qrCode"].startswith("data:image/png;base64,")
    assert "5406199.90" in pix["copyPaste"]
    assert pix["copyPaste"][-8:-4] == "6304"
    assert pix["amount"] == 199.9
    assert pix["description"] == "Order - Ana"
    assert pix["expiresAt"]


@pytest.mark.parametrize("payload", [{"customer": {"name": "Ana"}}, {"amount": 10}, {"amount": -5, "customer": {"name": "Ana"}}])
def test_generate_pix_rejects_bad_input(client, payload):
    response = client.post("/api/pix/generate", json=payload)
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_generate_pix_without_customer_name(client):
    response = client.post("/api/pix/generate", json={"amount": 10, "customer": {"email": "ana@example.com"}})
    assert response.status_code == 200
    assert response.json()["pix"]["description"] == "Order"


@pytest.mark.parametrize("amount", ["abc", [10], {"value": 10}])
def test_generate_pix_malformed_amount(client, amount):
    response = client.post("/api/pix/generate", json={"amount": amount, "customer": {"name": "Ana"}})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"].startswith("Invalid request")
    assert "detail" not in body


def test_calculate_malformed_body(client):
    cart = {"cep": CART["cep"], "products": [dict(CART["products"][0], quantity="two")]}
    response = client.post("/api/shipping/calculate", json=cart)
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request body"
    assert "quantity" in body["details"]
    assert "detail" not in body


def test_generate_pix_unexpected_failure(client, monkeypatch):
    def broken_renderer(payload):
        raise RuntimeError("encoder exploded")

    monkeypatch.setattr("app.services.pix.service.render_qr_code", broken_renderer)
    response = client.post("/api/pix/generate", json={"amount": 10, "customer": {"name": "Ana"}})
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Internal server error"}


def test_calculate_unexpected_failure(client):
    app.dependency_overrides[get_rate_engine] = lambda: _engine(FailingProvider(RuntimeError("boom")))
    response = client.post("/api/shipping/calculate", json=CART)
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Internal error while calculating shipping"
    assert "boom" not in body["error"]
    assert "stack" not in body
