"""
Public, high-level helpers for paying for HTTP resources over x402.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import requests

from .core.config import ClientConfig, ClientParameters, load_client_config
from .core.errors import ConfigError
from .core.facilitator import DEFAULT_TIMEOUT_SECONDS, FacilitatorClient
from .core.http import x402_fetch
from .core.networks import NetworkConfig, NetworkRegistry
from .core.payloads import create_payment_payload
from .core.signer import Signer
from .core.types import PaymentPayload, PaymentRequirements

__all__ = ["AgentClient", "create_agent_client"]


class AgentClient:
    """
    Ties a network registry, a signer and an HTTP session together.
    """

    def __init__(
        self,
        registry: NetworkRegistry,
        signer: Optional[Signer] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.registry = registry
        self.signer = signer
        self.session = session or requests.Session()
        self.timeout = timeout

    def get_network(self, network: Optional[str] = None) -> NetworkConfig:
        return self.registry.get(network)

    def get_signer(self) -> Signer:
        if self.signer is None:
            raise ConfigError(
                "No signer configured. Provide X402_PRIVATE_KEY or pass a Signer explicitly."
            )
        return self.signer

    def get_facilitator(self, network: Optional[str] = None) -> FacilitatorClient:
        cfg = self.get_network(network)
        if cfg.x402 is None or not cfg.x402.facilitator_url:
            raise ConfigError(f"x402 facilitator URL not configured for {cfg.name}")
        return FacilitatorClient(
            cfg.x402.facilitator_url,
            cfg.x402.api_key,
            session=self.session,
            timeout=self.timeout,
        )

    def create_payment_payload(
        self,
        requirements: PaymentRequirements,
        network: Optional[str] = None,
    ) -> PaymentPayload:
        return create_payment_payload(
            requirements,
            self.get_signer(),
            self.get_network(network),
        )

    def fetch(
        self,
        method: str,
        url: str,
        network: Optional[str] = None,
        **request_kwargs: Any,
    ) -> requests.Response:
        """
        Request ``url``, paying through the network's facilitator on a 402.
        """
        return x402_fetch(
            method,
            url,
            signer=self.get_signer(),
            network=self.get_network(network),
            facilitator=self.get_facilitator(network),
            session=self.session,
            **request_kwargs,
        )


def create_agent_client(
    *,
    config: Optional[ClientConfig] = None,
    signer: Optional[Signer] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[ClientParameters] = None,
    **explicit: Any,
) -> AgentClient:
    """
    Construct an :class:`AgentClient`.

    Callers can either supply a ready-made :class:`ClientConfig` or let the
    helper assemble one from environment data. An explicit ``signer`` takes
    precedence over the configured private key.
    """
    if config is not None:
        extras = (overrides, base, parameters, *explicit.values())
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built ClientConfig or individual parameters, not both."
            )
        cfg = config
    else:
        cfg = load_client_config(
            env_file=env_file,
            overrides=overrides,
            base=base,
            parameters=parameters,
            **explicit,
        )
    return AgentClient(
        cfg.registry(),
        signer or cfg.signer(),
        session=session,
        timeout=cfg.request_timeout_seconds,
    )
