import pytest
import requests

from agent_x402.core.errors import ConfigError
from agent_x402.core.facilitator import FacilitatorClient
from agent_x402.core.payloads import create_payment_payload

from conftest import FACILITATOR_URL, StubSigner, request_json

VERIFY_URL = f"{FACILITATOR_URL}/verify"
SETTLE_URL = f"{FACILITATOR_URL}/settle"


@pytest.fixture
def payload(requirements, network):
    return create_payment_payload(requirements, StubSigner(), network, now=1_000)


@pytest.fixture
def client(session):
    return FacilitatorClient(FACILITATOR_URL, session=session)


@pytest.mark.parametrize("url", ["ftp://bad", "facilitator.test", ""])
def test_rejects_non_http_urls(url):
    with pytest.raises(ConfigError, match="Invalid facilitator URL"):
        FacilitatorClient(url)


def test_strips_trailing_slash():
    assert FacilitatorClient("https://fac.test/").url == "https://fac.test"


def test_verify_posts_normalised_body(adapter, client, payload, requirements):
    adapter.add("POST", VERIFY_URL, (200, {"isValid": True, "payer": "0xDDD"}))

    result = client.verify(payload, requirements)

    assert result.is_valid is True
    assert result.payer == "0xDDD"
    assert result.invalid_reason is None

    (call,) = adapter.calls_to(VERIFY_URL)
    assert call.headers["Content-Type"] == "application/json"
    assert "Authorization" not in call.headers
    body = request_json(call)
    auth = body["paymentPayload"]["payload"]["authorization"]
    assert auth["validAfter"] == "0"
    assert auth["validBefore"] == "4600"
    assert auth["value"] == "1000000"
    assert body["paymentRequirements"] == requirements.to_dict()


def test_bearer_token_and_timeout(adapter, session, payload, requirements):
    adapter.add("POST", VERIFY_URL, (200, {"isValid": True}))
    client = FacilitatorClient(FACILITATOR_URL, "secret", session=session, timeout=5)

    client.verify(payload, requirements)

    assert adapter.calls[0].headers["Authorization"] == "Bearer secret"
    assert adapter.send_kwargs[0]["timeout"] == 5


def test_verify_snake_case_response(adapter, client, payload, requirements):
    adapter.add("POST", VERIFY_URL, (200, {"is_valid": False, "invalid_reason": "expired"}))

    result = client.verify(payload, requirements)

    assert result.is_valid is False
    assert result.invalid_reason == "expired"


def test_verify_http_error_does_not_raise(adapter, client, payload, requirements):
    adapter.add("POST", VERIFY_URL, (500, {"error": "boom"}))

    result = client.verify(payload, requirements)

    assert result.is_valid is False
    assert result.invalid_reason == "HTTP 500: Internal Server Error"


def test_verify_network_error_does_not_raise(adapter, client, payload, requirements):
    def handler(request):
        raise requests.ConnectionError("connection refused")

    adapter.add("POST", VERIFY_URL, handler)

    result = client.verify(payload, requirements)

    assert result.is_valid is False
    assert result.invalid_reason == "Network error: connection refused"


def test_verify_invalid_json_is_reported_as_network_error(adapter, client, payload, requirements):
    def handler(request):
        response = requests.Response()
        response.status_code = 200
        response.reason = "OK"
        response._content = b"<html>not json</html>"
        response.encoding = "utf-8"
        return response

    adapter.add("POST", VERIFY_URL, handler)

    result = client.verify(payload, requirements)

    assert result.is_valid is False
    assert result.invalid_reason.startswith("Network error: ")


def test_settle_success(adapter, client, payload, requirements):
    adapter.add(
        "POST",
        SETTLE_URL,
        (200, {"success": True, "transaction": "0xEEE", "network": "fuji", "payer": "0xDDD"}),
    )

    result = client.settle(payload, requirements)

    assert result.success is True
    assert result.transaction == "0xEEE"
    assert result.network == "fuji"
    assert result.payer == "0xDDD"
    assert request_json(adapter.calls[0])["paymentPayload"]["token"] == requirements.asset


def test_settle_transaction_hash_alias_and_network_fallback(adapter, client, payload, requirements):
    adapter.add("POST", SETTLE_URL, (200, {"success": True, "transactionHash": "0xFFF"}))

    result = client.settle(payload, requirements)

    assert result.transaction == "0xFFF"
    assert result.network == requirements.network


def test_settle_error_reason_alias(adapter, client, payload, requirements):
    adapter.add("POST", SETTLE_URL, (200, {"success": False, "error_reason": "nonce used"}))

    result = client.settle(payload, requirements)

    assert result.success is False
    assert result.error_reason == "nonce used"


def test_settle_http_error_does_not_raise(adapter, client, payload, requirements):
    adapter.add("POST", SETTLE_URL, (502, {}))

    result = client.settle(payload, requirements)

    assert result.success is False
    assert result.network == requirements.network
    assert result.error_reason == "HTTP 502: Bad Gateway"


def test_settle_network_error_does_not_raise(adapter, client, payload, requirements):
    def handler(request):
        raise requests.Timeout("read timed out")

    adapter.add("POST", SETTLE_URL, handler)

    result = client.settle(payload, requirements)

    assert result.success is False
    assert result.network == requirements.network
    assert result.error_reason == "Network error: read timed out"


@pytest.mark.parametrize("status, reason", [(304, "Not Modified"), (302, "Found")])
def test_redirect_statuses_are_http_failures(adapter, client, payload, requirements, status, reason):
    adapter.add("POST", VERIFY_URL, (status, {}))
    adapter.add("POST", SETTLE_URL, (status, {"success": True, "transaction": "0xEEE"}))

    verification = client.verify(payload, requirements)
    settlement = client.settle(payload, requirements)

    assert verification.is_valid is False
    assert verification.invalid_reason == f"HTTP {status}: {reason}"
    assert settlement.success is False
    assert settlement.error_reason == f"HTTP {status}: {reason}"
