"""
Payment-aware HTTP requests.

:func:`x402_fetch` issues a request and, only when the server answers with
402 Payment Required, signs an authorisation, has the facilitator verify and
settle it, and re-issues the request once with the settlement transaction in
the ``x402-payment`` header.

Protocol failures come back as synthetic JSON responses (500 for a 402 without
requirements or a failed settlement, 402 for a rejected authorisation). Signer
errors are raised.
"""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Any, Dict, Optional

import requests
from requests.structures import CaseInsensitiveDict

from .facilitator import FacilitatorClient
from .networks import NetworkConfig
from .payloads import create_payment_payload
from .signer import Signer
from .types import PaymentRequirements

__all__ = ["PAYMENT_HEADER", "json_response", "x402_fetch"]

PAYMENT_HEADER = "x402-payment"


def json_response(
    status: int,
    body: Any,
    *,
    url: Optional[str] = None,
    request: Optional[requests.PreparedRequest] = None,
) -> requests.Response:
    """
    Build a :class:`requests.Response` carrying ``body`` as JSON.
    """
    response = requests.Response()
    response.status_code = status
    try:
        response.reason = HTTPStatus(status).phrase
    except ValueError:
        response.reason = ""
    response.headers = CaseInsensitiveDict({"Content-Type": "application/json"})
    response._content = json.dumps(body).encode("utf-8")
    response.encoding = "utf-8"
    response.url = url or ""
    response.request = request
    return response


def _extract_requirements(response: requests.Response) -> Optional[PaymentRequirements]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None

    raw = body.get("paymentRequirements") or body.get("requirements")
    if not raw:
        return None
    try:
        return PaymentRequirements.from_mapping(raw)
    except ValueError as exc:
        logging.warning("Ignoring malformed payment requirements: %s", exc)
        return None


def _error_response(status: int, message: str, original: requests.Response) -> requests.Response:
    return json_response(
        status,
        {"error": message},
        url=original.url,
        request=original.request,
    )


def x402_fetch(
    method: str,
    url: str,
    *,
    signer: Signer,
    network: NetworkConfig,
    facilitator: FacilitatorClient,
    session: Optional[requests.Session] = None,
    **request_kwargs: Any,
) -> requests.Response:
    """
    Perform ``method url`` and pay for it if the server demands payment.

    ``request_kwargs`` are passed to :meth:`requests.Session.request` for both
    the original and the paid attempt. Exactly one paid retry is made; its
    response is returned unmodified, even if it is another 402.
    """
    if session is None:
        with requests.Session() as owned:
            return _pay_and_retry(
                owned, method, url, signer, network, facilitator, request_kwargs
            )
    return _pay_and_retry(
        session, method, url, signer, network, facilitator, request_kwargs
    )


def _pay_and_retry(
    session: requests.Session,
    method: str,
    url: str,
    signer: Signer,
    network: NetworkConfig,
    facilitator: FacilitatorClient,
    request_kwargs: Dict[str, Any],
) -> requests.Response:
    first = session.request(method, url, **request_kwargs)
    if first.status_code != 402:
        return first

    logging.info("%s %s requires payment", method.upper(), url)
    requirements = _extract_requirements(first)
    if requirements is None:
        logging.warning("402 from %s did not include payment requirements", url)
        return _error_response(500, "402 without payment requirements", first)

    payload = create_payment_payload(requirements, signer, network)

    verification = facilitator.verify(payload, requirements)
    if not verification.is_valid:
        logging.warning("Payment rejected by facilitator: %s", verification.invalid_reason)
        return _error_response(
            402,
            f"x402 verify failed: {verification.invalid_reason}",
            first,
        )

    settlement = facilitator.settle(payload, requirements)
    if not settlement.success or not settlement.transaction:
        logging.warning("Payment settlement failed: %s", settlement.error_reason)
        return _error_response(
            500,
            f"x402 settle failed: {settlement.error_reason}",
            first,
        )

    logging.info(
        "Payment settled on %s. Transaction hash: %s",
        settlement.network,
        settlement.transaction,
    )

    headers: Dict[str, str] = dict(request_kwargs.pop("headers", None) or {})
    headers[PAYMENT_HEADER] = settlement.transaction
    return session.request(method, url, headers=headers, **request_kwargs)
