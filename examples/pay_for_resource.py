"""
Minimal script that uses the public API to fetch an x402-protected resource.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Tuple

from agent_x402 import ConfigError, create_agent_client, load_client_config


def _override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _build_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch a paid resource using the SDK API")
    parser.add_argument("url", help="x402-protected resource to request")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing X402_* settings",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument(
        "--private-key",
        help="Provide the payer's private key without relying on environment data",
    )
    parser.add_argument(
        "--network",
        help="Network preset or custom name (default: fuji)",
    )
    parser.add_argument(
        "--facilitator-url",
        help="Override the facilitator base URL",
    )
    parser.add_argument(
        "--domain-name",
        help="Override the EIP-712 domain name used for signing",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    possible_values = {
        "private_key": args.private_key,
        "network": args.network,
        "facilitator_url": args.facilitator_url,
        "domain_name": args.domain_name,
    }
    parameter_kwargs = {key: value for key, value in possible_values.items() if value is not None}

    try:
        config = load_client_config(
            env_file=args.env_file,
            overrides=_build_overrides(args.set or ()),
            **parameter_kwargs,
        )
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    client = create_agent_client(config=config)
    logging.info("Requesting %s on network %s", args.url, config.network.name)

    response = client.fetch("GET", args.url)
    if not response.ok:
        logging.error("Request failed with %s: %s", response.status_code, response.text)
        return 1

    logging.info("Resource returned %s", response.status_code)
    print(response.text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
