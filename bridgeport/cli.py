#!/usr/bin/env python3
"""Command line front end for inspecting Across routes and running a transfer"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from .config import settings
from .core.catalog import Environment, RouteCatalog, build_default_catalog
from .core.errors import BridgeportError
from .core.session import TransferSession
from .core.transfer import ExecutionProgress, TransferExecutor
from .logging_config import setup_logging
from .providers.across import AcrossProvider
from .providers.evm import JsonRpcClient, JsonRpcWallet, build_rpc_resolver


def print_progress(progress: ExecutionProgress) -> None:
    hashes = progress.tx_hashes
    line = f"approval={progress.approval.value:<8} bridge={progress.bridge.value:<8}"
    if hashes.approval:
        line += f" approvalTx={hashes.approval}"
    if hashes.bridge:
        line += f" bridgeTx={hashes.bridge}"
    if progress.done:
        line += " ✅ done"
    print(line)


async def cli_chains(catalog: RouteCatalog, env: Environment) -> None:
    chains = await catalog.list_chains(env)
    print(f"🔗 {len(chains)} chains on {env.value}")
    for chain in chains:
        suffix = " (testnet)" if catalog.registry.is_testnet(chain.chain_id) else ""
        print(f"{chain.chain_id:>12}  {chain.name}{suffix}")


async def cli_tokens(catalog: RouteCatalog, env: Environment, origin: int) -> None:
    tokens = await catalog.list_tokens(env, origin)
    print(f"🪙 {len(tokens)} tokens from chain {origin}")
    for token in tokens:
        print(f"{token.key:<52} {token.symbol:<10} {token.address or 'native'}")


async def cli_destinations(catalog: RouteCatalog, env: Environment, origin: int, token_key: str) -> None:
    destinations = await catalog.list_destinations(env, origin, token_key)
    print(f"🎯 {len(destinations)} destinations for {token_key} from chain {origin}")
    for chain in destinations:
        print(f"{chain.chain_id:>12}  {chain.name}")


async def cli_routes(
    catalog: RouteCatalog,
    env: Environment,
    origin: Optional[int] = None,
    destination: Optional[int] = None,
) -> None:
    routes = await catalog.get_raw_routes(env)
    if origin is not None:
        routes = tuple(r for r in routes if r.origin_chain_id == origin)
    if destination is not None:
        routes = tuple(r for r in routes if r.destination_chain_id == destination)

    print(f"rawRouteCount: {len(routes)}")
    if routes:
        sample = routes[0].model_dump(by_alias=True)
        print("firstRouteSample:", json.dumps(sample, indent=2))


async def cli_transfer(catalog: RouteCatalog, env: Environment, args: argparse.Namespace) -> bool:
    executor = TransferExecutor(
        AcrossProvider(),
        build_rpc_resolver(),
        registry=catalog.registry,
    )
    session = TransferSession(catalog, executor, environment=env)
    wallet = JsonRpcWallet(JsonRpcClient(args.signer_url))

    await session.select_environment(env)
    await session.select_origin_chain(args.origin)
    await session.select_token(args.token)
    session.select_destination(args.destination)
    session.set_amount(args.amount)
    session.set_recipient(args.recipient)

    if session.preview() is None:
        print(f"error: {session.error_message}")
        return False

    print(f"🌉 Bridging {args.amount} {args.token} {args.origin} -> {args.destination}")
    session.on_progress(print_progress)
    result = await session.submit(wallet)
    if result is None:
        print(f"error: {session.error_message}")
        return False
    if not result.is_success:
        print(f"error: bridge transaction {result.bridge_hash} reverted")
        return False
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bridgeport cross-chain transfer CLI")
    parser.add_argument(
        "--env",
        choices=[e.value for e in Environment],
        default=settings.default_environment,
        help="Aggregator environment (default: %(default)s)",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("chains", help="List chains with at least one route")

    tokens_parser = subparsers.add_parser("tokens", help="List tokens bridgeable from a chain")
    tokens_parser.add_argument("origin", type=int, help="Origin chain id")

    dest_parser = subparsers.add_parser("destinations", help="List destinations for an origin token")
    dest_parser.add_argument("origin", type=int, help="Origin chain id")
    dest_parser.add_argument("token", help="Token key (native or erc20:0x...)")

    routes_parser = subparsers.add_parser("routes", help="Inspect the raw route table")
    routes_parser.add_argument("--origin", type=int, help="Filter by origin chain id")
    routes_parser.add_argument("--destination", type=int, help="Filter by destination chain id")

    transfer_parser = subparsers.add_parser("transfer", help="Bridge tokens through a JSON-RPC signer")
    transfer_parser.add_argument("--origin", type=int, required=True)
    transfer_parser.add_argument("--destination", type=int, required=True)
    transfer_parser.add_argument("--token", required=True, help="Token key (native or erc20:0x...)")
    transfer_parser.add_argument("--amount", required=True, help="Human-readable amount, e.g. 0.01")
    transfer_parser.add_argument("--recipient", required=True, help="Destination EVM address")
    transfer_parser.add_argument("--signer-url", required=True, help="JSON-RPC endpoint that signs transactions")

    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args.log_level)
    env = Environment(args.env)
    catalog = build_default_catalog()

    try:
        if args.command == "chains":
            await cli_chains(catalog, env)
        elif args.command == "tokens":
            await cli_tokens(catalog, env, args.origin)
        elif args.command == "destinations":
            await cli_destinations(catalog, env, args.origin, args.token)
        elif args.command == "routes":
            await cli_routes(catalog, env, args.origin, args.destination)
        elif args.command == "transfer":
            return 0 if await cli_transfer(catalog, env, args) else 1
    except BridgeportError as e:
        print(f"error: {e.message}")
        return 1
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
