"""
Named network definitions and the registry used to look them up.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from .errors import ConfigError

__all__ = [
    "AVALANCHE",
    "DEFAULT_DOMAIN_NAME",
    "DEFAULT_DOMAIN_VERSION",
    "FUJI",
    "NetworkConfig",
    "NetworkRegistry",
    "X402Settings",
    "avalanche_registry",
]

DEFAULT_DOMAIN_NAME = "B402"
DEFAULT_DOMAIN_VERSION = "1"


@dataclass(frozen=True)
class X402Settings:
    """
    Facilitator and EIP-712 domain settings for a single network.

    Only ``facilitator_url``, ``api_key``, ``domain_name`` and
    ``domain_version`` feed the payment flow. ``default_token`` and
    ``verifying_contract`` describe the deployment for callers and tooling;
    signatures always use the ``relayerContract`` of the payment requirements
    as the verifying contract.
    """

    facilitator_url: str
    default_token: Optional[str] = None
    domain_name: Optional[str] = None
    domain_version: Optional[str] = None
    verifying_contract: Optional[str] = None
    api_key: Optional[str] = None


@dataclass(frozen=True)
class NetworkConfig:
    """
    A chain the client can pay on.

    ``rpc_url`` and ``explorer_url`` are informational; the client never
    talks to the chain directly.
    """

    name: str
    chain_id: int
    rpc_url: Optional[str] = None
    explorer_url: Optional[str] = None
    x402: Optional[X402Settings] = None

    @property
    def domain_name(self) -> str:
        if self.x402 is not None and self.x402.domain_name:
            return self.x402.domain_name
        return DEFAULT_DOMAIN_NAME

    @property
    def domain_version(self) -> str:
        if self.x402 is not None and self.x402.domain_version:
            return self.x402.domain_version
        return DEFAULT_DOMAIN_VERSION

    def with_x402(self, **changes: Optional[str]) -> "NetworkConfig":
        """
        Return a copy with the given :class:`X402Settings` fields replaced.

        ``None`` values are ignored so callers can pass optional overrides
        straight through.
        """
        updates = {key: value for key, value in changes.items() if value is not None}
        if not updates:
            return self
        if self.x402 is None:
            if "facilitator_url" not in updates:
                raise ConfigError(
                    f"Network {self.name} has no x402 settings; a facilitator URL is required"
                )
            return replace(self, x402=X402Settings(**updates))
        return replace(self, x402=replace(self.x402, **updates))


@dataclass
class NetworkRegistry:
    networks: Dict[str, NetworkConfig] = field(default_factory=dict)
    default_network: Optional[str] = None

    @classmethod
    def of(cls, *networks: NetworkConfig, default: Optional[str] = None) -> "NetworkRegistry":
        registry = cls({net.name: net for net in networks}, default)
        if default is None and len(networks) == 1:
            registry.default_network = networks[0].name
        return registry

    def get(self, network: Optional[str] = None) -> NetworkConfig:
        key = network or self.default_network
        if not key:
            raise ConfigError("No network specified and no default network configured")
        try:
            return self.networks[key]
        except KeyError as exc:
            raise ConfigError(f"Unknown network: {key}") from exc

    def register(self, network: NetworkConfig) -> None:
        self.networks[network.name] = network


FUJI = NetworkConfig(
    name="fuji",
    chain_id=43113,
    rpc_url="https://api.avax-test.network/ext/bc/C/rpc",
    explorer_url="https://testnet.snowtrace.io",
    x402=X402Settings(
        facilitator_url="https://testnet.0xgasless.com",
        default_token="0x40dAE5db31DD56F1103Dd9153bd806E00A2f07BA",
        domain_name="A402",
        domain_version="1",
        verifying_contract="0x8BD697733c31293Be2327026d01aE393Ab2675C4",
    ),
)

AVALANCHE = NetworkConfig(
    name="avalanche",
    chain_id=43114,
    rpc_url="https://api.avax.network/ext/bc/C/rpc",
    explorer_url="https://snowtrace.io",
    x402=X402Settings(
        facilitator_url="https://x402.0xgasless.com",
        default_token="0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E",
        domain_name="A402",
        domain_version="1",
        verifying_contract="0x457Db7ceBAdaF6A043AcE833de95C46E982cEdC8",
    ),
)


def avalanche_registry(default: str = "fuji") -> NetworkRegistry:
    """Registry holding both Avalanche presets, defaulting to Fuji."""
    return NetworkRegistry.of(FUJI, AVALANCHE, default=default)
