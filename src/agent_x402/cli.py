"""
Command-line interface for exercising the x402 client.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence, Tuple

from .api import AgentClient, create_agent_client
from .core.config import ClientConfig, load_client_config
from .core.errors import ConfigError
from .core.types import PaymentRequirements, SettleResponse


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _header(value: str) -> Tuple[str, str]:
    if ":" not in value:
        raise argparse.ArgumentTypeError("Headers must look like NAME:VALUE")
    name, val = value.split(":", 1)
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError("Header name must not be empty")
    return name, val.strip()


def _collect_pairs(pairs: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    collected: Dict[str, str] = {}
    for key, value in pairs:
        collected[key] = value
    return collected


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-x402",
        description="Pay for HTTP resources with x402 payment authorisations",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing X402_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
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
        "--network",
        default=None,
        help="Network name to use (default: the configured X402_NETWORK)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    pay = commands.add_parser(
        "pay",
        help="Sign, verify and settle a payment for a requirements document",
    )
    pay.add_argument(
        "requirements",
        help="JSON file holding payment requirements or a 402 response body",
    )
    pay.add_argument(
        "--verify-only",
        action="store_true",
        help="Submit the payload to /verify but skip settlement",
    )

    fetch = commands.add_parser(
        "fetch",
        help="Request a URL, paying for it if the server answers 402",
    )
    fetch.add_argument("url", help="Resource to request")
    fetch.add_argument("--method", default="GET", help="HTTP method (default: GET)")
    fetch.add_argument(
        "--header",
        action="append",
        type=_header,
        metavar="NAME:VALUE",
        default=None,
        help="Extra request header; may be repeated",
    )
    fetch.add_argument("--data", default=None, help="Request body")
    return parser


def _load_requirements(path: str) -> PaymentRequirements:
    document: Any = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(document, dict):
        document = (
            document.get("paymentRequirements")
            or document.get("requirements")
            or document
        )
    return PaymentRequirements.from_mapping(document)


def _run_pay(client: AgentClient, args: argparse.Namespace) -> int:
    try:
        requirements = _load_requirements(args.requirements)
    except (OSError, ValueError) as exc:
        logging.error("Could not read payment requirements: %s", exc)
        return 1

    facilitator = client.get_facilitator(args.network)
    try:
        payload = client.create_payment_payload(requirements, args.network)
    except ConfigError:
        raise
    except ValueError as exc:
        logging.error("Cannot authorise payment: %s", exc)
        return 1

    verify_response = facilitator.verify(payload, requirements)
    if not verify_response.is_valid:
        logging.error("Payment rejected: %s", verify_response.invalid_reason)
        return 1

    logging.info(
        "Facilitator accepted payment payload for payer %s", verify_response.payer
    )

    if args.verify_only:
        logging.info("Skipping settlement because --verify-only was requested")
        return 0

    return _handle_settlement(facilitator.settle(payload, requirements))


def _handle_settlement(settlement: SettleResponse) -> int:
    if not settlement.success or not settlement.transaction:
        logging.error("Settlement failed: %s", settlement.error_reason)
        return 1

    logging.info(
        "Payment settled on %s. Transaction hash: %s",
        settlement.network,
        settlement.transaction,
    )
    return 0


def _run_fetch(client: AgentClient, args: argparse.Namespace) -> int:
    response = client.fetch(
        args.method,
        args.url,
        network=args.network,
        headers=_collect_pairs(args.header or ()),
        data=args.data,
    )
    logging.info("%s %s -> %s", args.method.upper(), args.url, response.status_code)
    sys.stdout.write(response.text)
    if not response.text.endswith("\n"):
        sys.stdout.write("\n")
    return 0 if response.ok else 1


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_pairs(args.set or ())

    try:
        config: ClientConfig = load_client_config(env_file=args.env_file, overrides=overrides)
        client = create_agent_client(config=config)
        if args.command == "pay":
            return _run_pay(client, args)
        return _run_fetch(client, args)
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1


def main() -> None:
    sys.exit(run_cli())
