"""
Configuration objects and helpers for the x402 client.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

from eth_account import Account
from eth_utils import is_hex_address, to_checksum_address

from .environment import ClientEnvironment, build_environment
from .errors import ConfigError
from .facilitator import DEFAULT_TIMEOUT_SECONDS
from .networks import AVALANCHE, FUJI, NetworkConfig, NetworkRegistry, X402Settings
from .signer import LocalAccountSigner

__all__ = [
    "ClientConfig",
    "ClientParameters",
    "ConfigError",
    "PRESET_NETWORKS",
    "load_client_config",
]

PRESET_NETWORKS: Dict[str, NetworkConfig] = {
    FUJI.name: FUJI,
    AVALANCHE.name: AVALANCHE,
}

DEFAULT_NETWORK = FUJI.name

_PRIVATE_KEY_ENV_KEYS = ("X402_PRIVATE_KEY", "PRIVATE_KEY", "AGENT_PRIVATE_KEY")
_DEFAULT_TOKEN_ENV_KEYS = ("X402_DEFAULT_TOKEN", "DEFAULT_TOKEN")

_PARAMETER_TO_ENV_KEY = {
    "private_key": "X402_PRIVATE_KEY",
    "network": "X402_NETWORK",
    "chain_id": "X402_CHAIN_ID",
    "rpc_url": "X402_RPC_URL",
    "facilitator_url": "X402_FACILITATOR_URL",
    "facilitator_api_key": "X402_FACILITATOR_API_KEY",
    "default_token": "X402_DEFAULT_TOKEN",
    "domain_name": "X402_DOMAIN_NAME",
    "domain_version": "X402_DOMAIN_VERSION",
    "verifying_contract": "X402_VERIFYING_CONTRACT",
    "request_timeout_seconds": "X402_REQUEST_TIMEOUT_SECONDS",
}


@dataclass(frozen=True)
class ClientParameters:
    """
    Explicit parameter bundle for constructing :class:`ClientConfig`.

    Values set here win over the environment and any ``.env`` file.
    """

    private_key: Optional[str] = None
    network: Optional[str] = None
    chain_id: Optional[int | str] = None
    rpc_url: Optional[str] = None
    facilitator_url: Optional[str] = None
    facilitator_api_key: Optional[str] = None
    default_token: Optional[str] = None
    domain_name: Optional[str] = None
    domain_version: Optional[str] = None
    verifying_contract: Optional[str] = None
    request_timeout_seconds: Optional[float | int | str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = str(value)
        return overrides


def _normalize_private_key(raw_key: str) -> str:
    key = raw_key.strip()
    if not key:
        raise ConfigError("X402_PRIVATE_KEY must not be empty")
    if not key.startswith("0x"):
        key = "0x" + key
    if len(key) != 66:
        raise ConfigError("X402_PRIVATE_KEY must be 32 bytes (64 hex chars)")
    try:
        Account.from_key(key)
    except Exception as exc:  # noqa: BLE001
        raise ConfigError(f"X402_PRIVATE_KEY is not a valid private key: {exc}") from exc
    return key


def _normalize_address(raw_address: str, field_name: str) -> str:
    value = raw_address.strip()
    if not value:
        raise ConfigError(f"{field_name} must not be empty")
    if not value.startswith("0x"):
        value = "0x" + value
    if not is_hex_address(value):
        raise ConfigError(f"{field_name} is not a valid EVM address")

    return to_checksum_address(value)


def _normalize_url(raw_url: str, field_name: str) -> str:
    url = raw_url.strip().rstrip("/")
    if not url.startswith(("http://", "https://")):
        raise ConfigError(f"{field_name} must start with http:// or https://, got '{raw_url}'")
    return url


def _parse_chain_id(raw: str) -> int:
    try:
        chain_id = int(raw, 0)
    except ValueError as exc:
        raise ConfigError(f"X402_CHAIN_ID must be an integer, got '{raw}'") from exc
    if chain_id <= 0:
        raise ConfigError("X402_CHAIN_ID must be greater than zero")
    return chain_id


def _parse_timeout(raw: str) -> float:
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ConfigError(
            f"X402_REQUEST_TIMEOUT_SECONDS must be a number, got '{raw}'"
        ) from exc
    if timeout <= 0:
        raise ConfigError("X402_REQUEST_TIMEOUT_SECONDS must be greater than zero")
    return timeout


def _build_network(environment: ClientEnvironment) -> NetworkConfig:
    name = (environment.get("X402_NETWORK") or DEFAULT_NETWORK).strip()
    preset = PRESET_NETWORKS.get(name)

    chain_id_raw = environment.get("X402_CHAIN_ID")
    if preset is None and chain_id_raw is None:
        raise ConfigError(
            f"X402_CHAIN_ID must be provided for network '{name}' "
            f"(known networks: {', '.join(sorted(PRESET_NETWORKS))})"
        )

    network = preset or NetworkConfig(name=name, chain_id=_parse_chain_id(chain_id_raw))
    if preset is not None and chain_id_raw is not None:
        network = replace(network, chain_id=_parse_chain_id(chain_id_raw))

    rpc_url = environment.get("X402_RPC_URL")
    if rpc_url:
        network = replace(network, rpc_url=_normalize_url(rpc_url, "X402_RPC_URL"))

    facilitator_url = environment.get("X402_FACILITATOR_URL")
    default_token = environment.first(*_DEFAULT_TOKEN_ENV_KEYS)
    verifying_contract = environment.get("X402_VERIFYING_CONTRACT")

    return network.with_x402(
        facilitator_url=(
            _normalize_url(facilitator_url, "X402_FACILITATOR_URL")
            if facilitator_url
            else None
        ),
        api_key=environment.get("X402_FACILITATOR_API_KEY") or None,
        default_token=(
            _normalize_address(default_token, "X402_DEFAULT_TOKEN")
            if default_token
            else None
        ),
        domain_name=environment.get("X402_DOMAIN_NAME") or None,
        domain_version=environment.get("X402_DOMAIN_VERSION") or None,
        verifying_contract=(
            _normalize_address(verifying_contract, "X402_VERIFYING_CONTRACT")
            if verifying_contract
            else None
        ),
    )


@dataclass(frozen=True)
class ClientConfig:
    network: NetworkConfig
    private_key: Optional[str] = None
    request_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __repr__(self) -> str:
        key = "<redacted>" if self.private_key else None
        return (
            f"ClientConfig(network={self.network!r}, private_key={key!r}, "
            f"request_timeout_seconds={self.request_timeout_seconds!r})"
        )

    @property
    def x402(self) -> Optional[X402Settings]:
        return self.network.x402

    @property
    def payer_address(self) -> Optional[str]:
        if self.private_key is None:
            return None
        return Account.from_key(self.private_key).address

    def signer(self) -> Optional[LocalAccountSigner]:
        if self.private_key is None:
            return None
        return LocalAccountSigner(self.private_key)

    def registry(self) -> NetworkRegistry:
        """
        Registry with the built-in presets plus the configured network as default.
        """
        registry = NetworkRegistry(dict(PRESET_NETWORKS), default_network=self.network.name)
        registry.register(self.network)
        return registry

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "ClientConfig":
        environment = (
            values if isinstance(values, ClientEnvironment) else ClientEnvironment(values)
        )

        raw_key = environment.first(*_PRIVATE_KEY_ENV_KEYS)
        private_key = _normalize_private_key(raw_key) if raw_key is not None else None

        timeout_raw = environment.get("X402_REQUEST_TIMEOUT_SECONDS")
        timeout = _parse_timeout(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_SECONDS

        return cls(
            network=_build_network(environment),
            private_key=private_key,
            request_timeout_seconds=timeout,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        parameters: Optional[ClientParameters] = None,
        **explicit: Any,
    ) -> "ClientConfig":
        unknown = set(explicit) - set(_PARAMETER_TO_ENV_KEY)
        if unknown:
            raise TypeError(f"Unknown client parameter(s): {', '.join(sorted(unknown))}")

        merged_overrides = dict(overrides or {})
        if parameters is not None:
            merged_overrides.update(parameters.as_overrides())
        merged_overrides.update(ClientParameters(**explicit).as_overrides())

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment)


def load_client_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[ClientParameters] = None,
    **explicit: Any,
) -> ClientConfig:
    """
    Convenience wrapper that mirrors :meth:`ClientConfig.from_env`.

    The configuration can be provided through environment variables, a
    ``.env`` file, keyword arguments named after :class:`ClientParameters`
    fields, or any combination of the three.
    """
    return ClientConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        **explicit,
    )
