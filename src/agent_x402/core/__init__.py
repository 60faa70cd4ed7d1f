"""
Core primitives that implement the x402 payment-authorisation flow.
"""

from .config import (
    ClientConfig,
    ClientParameters,
    PRESET_NETWORKS,
    load_client_config,
)
from .environment import ClientEnvironment, build_environment, load_env_file
from .errors import ConfigError
from .facilitator import DEFAULT_TIMEOUT_SECONDS, FacilitatorClient
from .http import PAYMENT_HEADER, json_response, x402_fetch
from .networks import (
    AVALANCHE,
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    FUJI,
    NetworkConfig,
    NetworkRegistry,
    X402Settings,
    avalanche_registry,
)
from .payloads import (
    TRANSFER_WITH_AUTHORIZATION_TYPES,
    build_facilitator_request,
    build_typed_data,
    create_payment_payload,
)
from .signer import LocalAccountSigner, Signer
from .types import (
    Authorization,
    PaymentPayload,
    PaymentRequirements,
    SettleResponse,
    VerifyResponse,
)

__all__ = [
    "AVALANCHE",
    "Authorization",
    "ClientConfig",
    "ClientEnvironment",
    "ClientParameters",
    "ConfigError",
    "DEFAULT_DOMAIN_NAME",
    "DEFAULT_DOMAIN_VERSION",
    "DEFAULT_TIMEOUT_SECONDS",
    "FUJI",
    "FacilitatorClient",
    "LocalAccountSigner",
    "NetworkConfig",
    "NetworkRegistry",
    "PAYMENT_HEADER",
    "PRESET_NETWORKS",
    "PaymentPayload",
    "PaymentRequirements",
    "SettleResponse",
    "Signer",
    "TRANSFER_WITH_AUTHORIZATION_TYPES",
    "VerifyResponse",
    "X402Settings",
    "avalanche_registry",
    "build_environment",
    "build_facilitator_request",
    "build_typed_data",
    "create_payment_payload",
    "json_response",
    "load_client_config",
    "load_env_file",
    "x402_fetch",
]
