"""
Wire-level records exchanged during an x402 payment.

Every record mirrors the camelCase JSON used by resource servers and
facilitators; ``to_dict`` produces that shape and ``from_mapping`` parses it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

__all__ = [
    "SCHEME_EXACT",
    "X402_VERSION",
    "Authorization",
    "PaymentPayload",
    "PaymentRequirements",
    "SettleResponse",
    "VerifyResponse",
]

SCHEME_EXACT = "exact"
X402_VERSION = 1

_REQUIRED_REQUIREMENT_KEYS = (
    "network",
    "asset",
    "payTo",
    "maxAmountRequired",
    "maxTimeoutSeconds",
    "relayerContract",
)


def _decimal_amount(raw: Any) -> str:
    # base units only; floats and fractional strings are rejected
    if isinstance(raw, bool) or not isinstance(raw, (int, str)):
        raise ValueError(f"maxAmountRequired must be a decimal integer, got {raw!r}")
    text = str(raw).strip()
    if not text.isdigit() or not text.isascii():
        raise ValueError(f"maxAmountRequired must be a decimal integer, got {raw!r}")
    return str(int(text))


@dataclass(frozen=True)
class PaymentRequirements:
    """
    Terms a resource server attaches to an HTTP 402 response.
    """

    network: str
    asset: str
    pay_to: str
    max_amount_required: str
    max_timeout_seconds: int
    relayer_contract: str
    description: Optional[str] = None
    resource: Optional[str] = None
    scheme: str = SCHEME_EXACT

    @classmethod
    def from_mapping(cls, values: Any) -> "PaymentRequirements":
        if not isinstance(values, Mapping):
            raise ValueError("payment requirements must be a JSON object")

        missing = [key for key in _REQUIRED_REQUIREMENT_KEYS if values.get(key) in (None, "")]
        if missing:
            raise ValueError(
                f"payment requirements missing required fields: {', '.join(missing)}"
            )

        try:
            max_timeout_seconds = int(values["maxTimeoutSeconds"])
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"maxTimeoutSeconds must be an integer, got {values['maxTimeoutSeconds']!r}"
            ) from exc
        if max_timeout_seconds <= 0:
            raise ValueError(
                f"maxTimeoutSeconds must be greater than zero, got {max_timeout_seconds}"
            )

        return cls(
            scheme=str(values.get("scheme") or SCHEME_EXACT),
            network=str(values["network"]),
            asset=str(values["asset"]),
            pay_to=str(values["payTo"]),
            max_amount_required=_decimal_amount(values["maxAmountRequired"]),
            max_timeout_seconds=max_timeout_seconds,
            relayer_contract=str(values["relayerContract"]),
            description=values.get("description"),
            resource=values.get("resource"),
        )

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "scheme": self.scheme,
            "network": self.network,
            "asset": self.asset,
            "payTo": self.pay_to,
            "maxAmountRequired": self.max_amount_required,
            "maxTimeoutSeconds": self.max_timeout_seconds,
            "relayerContract": self.relayer_contract,
        }
        if self.description is not None:
            body["description"] = self.description
        if self.resource is not None:
            body["resource"] = self.resource
        return body


@dataclass(frozen=True)
class Authorization:
    """
    The ``TransferWithAuthorization`` message covered by the payer's signature.
    """

    from_address: str
    to: str
    value: str
    valid_after: int
    valid_before: int
    nonce: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_address,
            "to": self.to,
            "value": self.value,
            "validAfter": self.valid_after,
            "validBefore": self.valid_before,
            "nonce": self.nonce,
        }


@dataclass(frozen=True)
class PaymentPayload:
    network: str
    token: str
    authorization: Authorization
    signature: str
    x402_version: int = X402_VERSION
    scheme: str = SCHEME_EXACT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x402Version": self.x402_version,
            "scheme": self.scheme,
            "network": self.network,
            "token": self.token,
            "payload": {
                "authorization": self.authorization.to_dict(),
                "signature": self.signature,
            },
        }


def _pick(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = payload.get(key)
        if value:
            return value
    return None


@dataclass(frozen=True)
class VerifyResponse:
    is_valid: bool
    payer: Optional[str] = None
    invalid_reason: Optional[str] = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "VerifyResponse":
        return cls(
            is_valid=bool(_pick(payload, "isValid", "is_valid")),
            payer=payload.get("payer"),
            invalid_reason=_pick(payload, "invalidReason", "invalid_reason"),
        )

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"isValid": self.is_valid}
        if self.payer is not None:
            body["payer"] = self.payer
        if self.invalid_reason is not None:
            body["invalidReason"] = self.invalid_reason
        return body


@dataclass(frozen=True)
class SettleResponse:
    success: bool
    network: str
    transaction: Optional[str] = None
    payer: Optional[str] = None
    error_reason: Optional[str] = None

    @classmethod
    def from_mapping(
        cls,
        payload: Mapping[str, Any],
        *,
        default_network: str,
    ) -> "SettleResponse":
        return cls(
            success=bool(payload.get("success")),
            transaction=_pick(payload, "transaction", "transactionHash"),
            network=_pick(payload, "network") or default_network,
            payer=payload.get("payer"),
            error_reason=_pick(payload, "errorReason", "error_reason"),
        )

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": self.success, "network": self.network}
        if self.transaction is not None:
            body["transaction"] = self.transaction
        if self.payer is not None:
            body["payer"] = self.payer
        if self.error_reason is not None:
            body["errorReason"] = self.error_reason
        return body
