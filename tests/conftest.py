import json
from typing import Any, Callable, Dict, List, Tuple, Union

import pytest
import requests
from requests.adapters import BaseAdapter

from agent_x402.core.http import json_response
from agent_x402.core.networks import NetworkConfig, X402Settings
from agent_x402.core.signer import LocalAccountSigner
from agent_x402.core.types import PaymentRequirements

# Well-known development key (hardhat account #0).
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
PAYEE = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
RELAYER = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
TOKEN = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"

FACILITATOR_URL = "http://facilitator.test"
RESOURCE_URL = "http://resource.test/data"

HandlerResult = Union[Tuple[int, Any], requests.Response]
Handler = Callable[[requests.PreparedRequest], HandlerResult]


class StubAdapter(BaseAdapter):
    """Routes requests to in-process handlers and records every call."""

    def __init__(self) -> None:
        super().__init__()
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.calls: List[requests.PreparedRequest] = []
        self.send_kwargs: List[Dict[str, Any]] = []

    def add(self, method: str, url: str, handler: Union[Handler, Tuple[int, Any]]) -> None:
        if not callable(handler):
            fixed = handler
            handler = lambda request: fixed  # noqa: E731
        self.routes[(method.upper(), url)] = handler

    def calls_to(self, url: str) -> List[requests.PreparedRequest]:
        return [call for call in self.calls if call.url == url]

    def send(self, request, **kwargs):
        self.calls.append(request)
        self.send_kwargs.append(kwargs)
        handler = self.routes.get((request.method, request.url))
        if handler is None:
            return json_response(404, {"error": "no route"}, url=request.url, request=request)
        result = handler(request)
        if isinstance(result, requests.Response):
            result.request = request
            result.url = request.url
            return result
        status, body = result
        return json_response(status, body, url=request.url, request=request)

    def close(self) -> None:
        pass


def request_json(request: requests.PreparedRequest) -> Any:
    return json.loads(request.body)


class StubSigner:
    def __init__(self, address: str = "0xDDD", signature: str = "0x" + "ab" * 65) -> None:
        self._address = address
        self._signature = signature
        self.signed: List[Dict[str, Any]] = []

    @property
    def address(self) -> str:
        return self._address

    def sign_typed_data(self, typed_data):
        self.signed.append(typed_data)
        return self._signature


class FailingSigner(StubSigner):
    def sign_typed_data(self, typed_data):
        raise RuntimeError("user rejected signature")


@pytest.fixture
def adapter() -> StubAdapter:
    return StubAdapter()


@pytest.fixture
def session(adapter: StubAdapter) -> requests.Session:
    sess = requests.Session()
    sess.mount("http://", adapter)
    sess.mount("https://", adapter)
    return sess


@pytest.fixture
def network() -> NetworkConfig:
    return NetworkConfig(
        name="test",
        chain_id=43113,
        x402=X402Settings(
            facilitator_url=FACILITATOR_URL,
            domain_name="A402",
            domain_version="1",
        ),
    )


@pytest.fixture
def local_signer() -> LocalAccountSigner:
    return LocalAccountSigner(TEST_PRIVATE_KEY)


@pytest.fixture
def scenario_requirements_body() -> Dict[str, Any]:
    return {
        "scheme": "exact",
        "network": "test",
        "asset": "0xAAA",
        "payTo": "0xBBB",
        "maxAmountRequired": "1000000",
        "maxTimeoutSeconds": 3600,
        "relayerContract": "0xCCC",
    }


@pytest.fixture
def requirements() -> PaymentRequirements:
    return PaymentRequirements(
        network="test",
        asset=TOKEN,
        pay_to=PAYEE,
        max_amount_required="1000000",
        max_timeout_seconds=3600,
        relayer_contract=RELAYER,
        description="Premium data",
    )
