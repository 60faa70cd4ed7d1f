"""
Public facade for the agent x402 client package.

The module re-exports the most useful pieces for integrators so they can
``from agent_x402 import ...`` without navigating the package.
"""

from .api import AgentClient, create_agent_client
from .core import (
    AVALANCHE,
    FUJI,
    PAYMENT_HEADER,
    Authorization,
    ClientConfig,
    ClientEnvironment,
    ClientParameters,
    ConfigError,
    FacilitatorClient,
    LocalAccountSigner,
    NetworkConfig,
    NetworkRegistry,
    PaymentPayload,
    PaymentRequirements,
    SettleResponse,
    Signer,
    VerifyResponse,
    X402Settings,
    avalanche_registry,
    build_environment,
    create_payment_payload,
    load_client_config,
    load_env_file,
    x402_fetch,
)

__all__ = (
    "AVALANCHE",
    "AgentClient",
    "Authorization",
    "ClientConfig",
    "ClientEnvironment",
    "ClientParameters",
    "ConfigError",
    "FUJI",
    "FacilitatorClient",
    "LocalAccountSigner",
    "NetworkConfig",
    "NetworkRegistry",
    "PAYMENT_HEADER",
    "PaymentPayload",
    "PaymentRequirements",
    "SettleResponse",
    "Signer",
    "VerifyResponse",
    "X402Settings",
    "avalanche_registry",
    "build_environment",
    "create_agent_client",
    "create_payment_payload",
    "load_client_config",
    "load_env_file",
    "x402_fetch",
)
