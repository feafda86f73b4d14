"""Shared fixtures: a testnet route table and in-memory wallet / chain doubles."""

from typing import Any, Dict, List, Optional

import pytest

from bridgeport.core.catalog import Environment, RouteCache, RouteCatalog, parse_routes
from bridgeport.core.transfer import BridgeOutcome, Receipt, RpcResolver

BASE_SEPOLIA = 84532
SEPOLIA = 11155111
ARBITRUM_SEPOLIA = 421614
UNKNOWN_CHAIN = 999001

WETH_BASE_SEPOLIA = "0x4200000000000000000000000000000000000006"
USDC_BASE_SEPOLIA = "0x036CbD53842c5426634e7929541eC2318f3dCF7e"
USDC_SEPOLIA = "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238"
USDC_ARBITRUM_SEPOLIA = "0x75faf114eafb1BDbe2F0316DF893fd58CE46AA4d"

DEPOSITOR = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
SPOKE_POOL = "0x3333333333333333333333333333333333333333"


def route_records() -> List[Dict[str, Any]]:
    return [
        {
            "originChainId": BASE_SEPOLIA,
            "destinationChainId": SEPOLIA,
            "originToken": WETH_BASE_SEPOLIA,
            "destinationToken": "0xfFf9976782d46CC05630D1f6eBAb18b2324d6B14",
            "originTokenSymbol": "ETH",
            "destinationTokenSymbol": "WETH",
            "isNative": True,
        },
        {
            "originChainId": BASE_SEPOLIA,
            "destinationChainId": SEPOLIA,
            "originToken": USDC_BASE_SEPOLIA,
            "destinationToken": USDC_SEPOLIA,
            "originTokenSymbol": "USDC",
            "destinationTokenSymbol": "USDC",
            "isNative": False,
        },
        {
            "originChainId": BASE_SEPOLIA,
            "destinationChainId": ARBITRUM_SEPOLIA,
            "originToken": USDC_BASE_SEPOLIA,
            "destinationToken": USDC_ARBITRUM_SEPOLIA,
            "originTokenSymbol": "USDC",
            "destinationTokenSymbol": "USDC",
            "isNative": False,
        },
        {
            "originChainId": BASE_SEPOLIA,
            "destinationChainId": UNKNOWN_CHAIN,
            "originToken": USDC_BASE_SEPOLIA,
            "destinationToken": "0x4444444444444444444444444444444444444444",
            "originTokenSymbol": "USDC",
            "isNative": False,
        },
        {
            "originChainId": SEPOLIA,
            "destinationChainId": BASE_SEPOLIA,
            "originToken": "0xfFf9976782d46CC05630D1f6eBAb18b2324d6B14",
            "destinationToken": WETH_BASE_SEPOLIA,
            "isNative": True,
        },
    ]


class StaticRouteSource:
    """Route source returning canned payloads and counting calls."""

    def __init__(self, payload: Any = None):
        self.payload = payload if payload is not None else route_records()
        self.calls: List[Environment] = []

    async def available_routes(self, environment: Environment) -> Any:
        self.calls.append(environment)
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeWallet:
    """Records every wallet interaction; hashes are handed out in order."""

    def __init__(self, account: str = DEPOSITOR, hashes: Optional[List[str]] = None):
        self.account = account
        self.hashes = list(hashes or ["0xaaa1", "0xbbb2", "0xccc3"])
        self.sent: List[Dict[str, Any]] = []
        self.switched: List[int] = []
        self.account_requests = 0

    async def request_accounts(self) -> str:
        self.account_requests += 1
        return self.account

    async def switch_chain(self, chain_id: int) -> None:
        self.switched.append(chain_id)

    async def send_transaction(self, tx: Dict[str, Any]) -> str:
        self.sent.append(tx)
        return self.hashes[len(self.sent) - 1]

    @property
    def calls(self) -> int:
        return self.account_requests + len(self.switched) + len(self.sent)


class FakeChainRpc:
    """Receipt source keyed by tx hash; unknown hashes succeed."""

    def __init__(
        self,
        outcomes: Optional[Dict[str, BridgeOutcome]] = None,
        decimals: Optional[Dict[str, int]] = None,
    ):
        self.outcomes = outcomes or {}
        self.decimals = decimals or {}
        self.waited: List[str] = []

    async def wait_for_receipt(self, tx_hash: str) -> Receipt:
        self.waited.append(tx_hash)
        return Receipt(tx_hash=tx_hash, status=self.outcomes.get(tx_hash, BridgeOutcome.SUCCESS), block_number=1)

    async def token_decimals(self, token_address: str) -> Optional[int]:
        return self.decimals.get(token_address.lower())


def swap_tx(value: Optional[str] = None) -> Dict[str, Any]:
    tx = {
        "chainId": BASE_SEPOLIA,
        "to": SPOKE_POOL,
        "data": "0xdeadbeef",
        "gas": "210000",
        "maxFeePerGas": "1500000000",
        "maxPriorityFeePerGas": "1000000",
    }
    if value is not None:
        tx["value"] = value
    return tx


def approval_tx() -> Dict[str, Any]:
    return {"chainId": BASE_SEPOLIA, "to": USDC_BASE_SEPOLIA, "data": "0x095ea7b3"}


@pytest.fixture
def route_source() -> StaticRouteSource:
    return StaticRouteSource()


@pytest.fixture
def catalog(route_source: StaticRouteSource) -> RouteCatalog:
    return RouteCatalog(route_source, cache=RouteCache(ttl_seconds=300))


@pytest.fixture
def testnet_routes():
    return parse_routes(route_records()).routes


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture
def chain_rpc() -> FakeChainRpc:
    return FakeChainRpc()


@pytest.fixture
def rpc_resolver(chain_rpc: FakeChainRpc) -> RpcResolver:
    return RpcResolver(clients={BASE_SEPOLIA: chain_rpc, SEPOLIA: chain_rpc})
