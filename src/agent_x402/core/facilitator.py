"""
HTTP client for an x402 facilitator's ``/verify`` and ``/settle`` endpoints.

Neither call raises: HTTP failures, transport errors and domain rejections all
come back as a populated :class:`VerifyResponse` or :class:`SettleResponse`
whose reason string tells them apart (``"HTTP 500: ..."``,
``"Network error: ..."`` or the facilitator's own reason).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .errors import ConfigError
from .payloads import build_facilitator_request
from .types import PaymentPayload, PaymentRequirements, SettleResponse, VerifyResponse

__all__ = ["DEFAULT_TIMEOUT_SECONDS", "FacilitatorClient"]

DEFAULT_TIMEOUT_SECONDS = 30.0


class _HTTPStatusFailure(Exception):
    def __init__(self, response: requests.Response) -> None:
        super().__init__(f"HTTP {response.status_code}: {response.reason or ''}")


class FacilitatorClient:
    """
    Stateless client for a remote x402 facilitator.
    """

    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if not url.startswith(("http://", "https://")):
            raise ConfigError(f"Invalid facilitator URL: {url}")
        self.url = url[:-1] if url.endswith("/") else url
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"FacilitatorClient(url={self.url!r})"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _post_json(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.url}{path}"
        response = self.session.post(
            url,
            json=body,
            headers=self._headers(),
            timeout=self.timeout,
        )
        if not 200 <= response.status_code < 300:
            raise _HTTPStatusFailure(response)
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a JSON object from {url}, got {type(payload).__name__}")
        return payload

    def verify(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> VerifyResponse:
        logging.info("Submitting payment for verification to %s/verify", self.url)
        body = build_facilitator_request(payload, requirements)
        try:
            data = self._post_json("/verify", body)
        except _HTTPStatusFailure as exc:
            logging.warning("Facilitator verify rejected the request: %s", exc)
            return VerifyResponse(is_valid=False, invalid_reason=str(exc))
        except (requests.RequestException, ValueError) as exc:
            logging.warning("Facilitator verify failed: %s", exc)
            return VerifyResponse(is_valid=False, invalid_reason=f"Network error: {exc}")
        return VerifyResponse.from_mapping(data)

    def settle(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> SettleResponse:
        logging.info("Submitting payment for settlement to %s/settle", self.url)
        body = build_facilitator_request(payload, requirements)
        try:
            data = self._post_json("/settle", body)
        except _HTTPStatusFailure as exc:
            logging.warning("Facilitator settle rejected the request: %s", exc)
            return SettleResponse(
                success=False,
                network=requirements.network,
                error_reason=str(exc),
            )
        except (requests.RequestException, ValueError) as exc:
            logging.warning("Facilitator settle failed: %s", exc)
            return SettleResponse(
                success=False,
                network=requirements.network,
                error_reason=f"Network error: {exc}",
            )
        return SettleResponse.from_mapping(data, default_network=requirements.network)
