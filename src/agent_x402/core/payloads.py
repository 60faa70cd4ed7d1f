"""
Helpers for constructing and signing x402 payment payloads.
"""

from __future__ import annotations

import secrets
import time
from typing import Any, Dict, List, Optional

from hexbytes import HexBytes

from .networks import NetworkConfig
from .signer import Signer
from .types import Authorization, PaymentPayload, PaymentRequirements

__all__ = [
    "EIP712_DOMAIN_TYPES",
    "TRANSFER_WITH_AUTHORIZATION_TYPES",
    "build_facilitator_request",
    "build_typed_data",
    "create_payment_payload",
]

EIP712_DOMAIN_TYPES: List[Dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

# Field order defines the struct hash checked by the verifying contract.
TRANSFER_WITH_AUTHORIZATION_TYPES: List[Dict[str, str]] = [
    {"name": "from", "type": "address"},
    {"name": "to", "type": "address"},
    {"name": "value", "type": "uint256"},
    {"name": "validAfter", "type": "uint256"},
    {"name": "validBefore", "type": "uint256"},
    {"name": "nonce", "type": "bytes32"},
]


def _check_requirements(requirements: PaymentRequirements) -> None:
    if requirements.max_timeout_seconds <= 0:
        raise ValueError("maxTimeoutSeconds must be greater than zero")
    if not requirements.pay_to:
        raise ValueError("payTo must not be empty")
    if not requirements.relayer_contract:
        raise ValueError("relayerContract must not be empty")


def build_typed_data(
    authorization: Authorization,
    network: NetworkConfig,
    verifying_contract: str,
) -> Dict[str, Any]:
    """
    Build the EIP-712 ``TransferWithAuthorization`` document for ``authorization``.
    """
    return {
        "types": {
            "EIP712Domain": list(EIP712_DOMAIN_TYPES),
            "TransferWithAuthorization": list(TRANSFER_WITH_AUTHORIZATION_TYPES),
        },
        "primaryType": "TransferWithAuthorization",
        "domain": {
            "name": network.domain_name,
            "version": network.domain_version,
            "chainId": network.chain_id,
            "verifyingContract": verifying_contract,
        },
        "message": {
            "from": authorization.from_address,
            "to": authorization.to,
            "value": int(authorization.value),
            "validAfter": authorization.valid_after,
            "validBefore": authorization.valid_before,
            "nonce": HexBytes(authorization.nonce),
        },
    }


def create_payment_payload(
    requirements: PaymentRequirements,
    signer: Signer,
    network: NetworkConfig,
    *,
    now: Optional[int] = None,
    nonce: Optional[bytes] = None,
) -> PaymentPayload:
    """
    Construct and sign a payment authorisation satisfying ``requirements``.

    The authorisation is valid immediately (``validAfter = 0``) until
    ``now + maxTimeoutSeconds`` and carries a fresh 32-byte random nonce.
    Whatever the signer raises is propagated unchanged.
    """
    _check_requirements(requirements)

    now = int(time.time()) if now is None else now
    nonce_bytes = nonce if nonce is not None else secrets.token_bytes(32)
    if len(nonce_bytes) != 32:
        raise ValueError("nonce must be exactly 32 bytes")

    authorization = Authorization(
        from_address=signer.address,
        to=requirements.pay_to,
        value=requirements.max_amount_required,
        valid_after=0,
        valid_before=now + requirements.max_timeout_seconds,
        nonce="0x" + nonce_bytes.hex(),
    )
    typed_data = build_typed_data(authorization, network, requirements.relayer_contract)
    signature = signer.sign_typed_data(typed_data)
    if not signature:
        raise ValueError("signer returned an empty signature")

    return PaymentPayload(
        network=requirements.network,
        token=requirements.asset,
        authorization=authorization,
        signature=signature,
    )


def build_facilitator_request(
    payload: PaymentPayload,
    requirements: PaymentRequirements,
) -> Dict[str, Any]:
    """
    Build the body posted to ``/verify`` and ``/settle``.

    Numeric authorisation fields are sent as decimal strings.
    """
    body = payload.to_dict()
    authorization = body["payload"]["authorization"]
    for key in ("value", "validAfter", "validBefore"):
        authorization[key] = str(authorization[key])
    return {
        "paymentPayload": body,
        "paymentRequirements": requirements.to_dict(),
    }
