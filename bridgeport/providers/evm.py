"""
EVM JSON-RPC adapters.

``RpcChainClient`` satisfies ``ChainRpc`` and ``TokenMetadataReader`` for one
chain. ``JsonRpcWallet`` satisfies ``Wallet`` against a signer endpoint that
accepts ``eth_sendTransaction`` (a browser wallet bridge or a dev node with
unlocked accounts).
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from typing import Any, Dict, List, Mapping, Optional

import httpx

from ..config import settings
from ..core.errors import ChainConfirmationError, WalletError
from ..core.transfer.capabilities import RpcResolver
from ..core.transfer.models import BridgeOutcome, Receipt

logger = logging.getLogger(__name__)

# keccak256("decimals()")[:4]
DECIMALS_SELECTOR = "0x313ce567"

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001


class JsonRpcError(Exception):
    """The endpoint answered with a JSON-RPC error object."""

    def __init__(self, method: str, error: Any):
        self.method = method
        self.code = error.get("code") if isinstance(error, dict) else None
        self.rpc_message = error.get("message") if isinstance(error, dict) else str(error)
        super().__init__(f"RPC error from {method}: {self.rpc_message} (code={self.code})")


class JsonRpcClient:
    """Minimal JSON-RPC 2.0 client over HTTP."""

    def __init__(
        self,
        url: str,
        *,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout_s = timeout_s if timeout_s is not None else settings.request_timeout_seconds
        self._transport = transport
        self._ids = itertools.count(1)

    async def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(self._ids),
        }

        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()
            result = response.json()

        if not isinstance(result, dict):
            raise JsonRpcError(method, "non-object response")
        if result.get("error") is not None:
            raise JsonRpcError(method, result["error"])
        return result.get("result")


def _parse_quantity(value: Any) -> Optional[int]:
    if not isinstance(value, str) or not value.startswith("0x"):
        return None
    try:
        return int(value, 16)
    except ValueError:
        return None


class RpcChainClient:
    """Receipt polling and ERC-20 metadata for one chain."""

    def __init__(
        self,
        chain_id: int,
        rpc: JsonRpcClient,
        *,
        poll_interval_s: Optional[float] = None,
        timeout_s: Optional[float] = None,
    ) -> None:
        self.chain_id = chain_id
        self._rpc = rpc
        self.poll_interval_s = (
            poll_interval_s if poll_interval_s is not None else settings.receipt_poll_interval_seconds
        )
        self.timeout_s = timeout_s if timeout_s is not None else settings.receipt_timeout_seconds

    async def wait_for_receipt(self, tx_hash: str) -> Receipt:
        """Poll ``eth_getTransactionReceipt`` until the transaction is mined.

        Raises:
            ChainConfirmationError: RPC failure or no receipt within ``timeout_s``
        """
        deadline = time.monotonic() + self.timeout_s

        while True:
            try:
                raw = await self._rpc.call("eth_getTransactionReceipt", [tx_hash])
            except (httpx.HTTPError, JsonRpcError, ValueError) as exc:
                raise ChainConfirmationError(
                    f"Receipt lookup failed for {tx_hash}: {exc}",
                    chain_id=self.chain_id,
                    tx_hash=tx_hash,
                ) from exc

            if isinstance(raw, dict) and raw.get("status") is not None:
                return self._to_receipt(tx_hash, raw)

            if time.monotonic() >= deadline:
                raise ChainConfirmationError(
                    f"Confirmation timeout after {self.timeout_s}s for {tx_hash}",
                    chain_id=self.chain_id,
                    tx_hash=tx_hash,
                )
            await asyncio.sleep(self.poll_interval_s)

    def _to_receipt(self, tx_hash: str, raw: Dict[str, Any]) -> Receipt:
        status = _parse_quantity(raw.get("status"))
        if status not in (0, 1):
            raise ChainConfirmationError(
                f"Unrecognised receipt status {raw.get('status')!r} for {tx_hash}",
                chain_id=self.chain_id,
                tx_hash=tx_hash,
            )
        return Receipt(
            tx_hash=tx_hash,
            status=BridgeOutcome.SUCCESS if status == 1 else BridgeOutcome.REVERTED,
            block_number=_parse_quantity(raw.get("blockNumber")),
            gas_used=_parse_quantity(raw.get("gasUsed")),
        )

    async def token_decimals(self, token_address: str) -> Optional[int]:
        """Read ERC-20 ``decimals()``; ``None`` when the call fails or returns nothing usable."""
        try:
            result = await self._rpc.call(
                "eth_call",
                [{"to": token_address, "data": DECIMALS_SELECTOR}, "latest"],
            )
        except (httpx.HTTPError, JsonRpcError, ValueError) as exc:
            logger.debug("decimals() failed for %s on chain %d: %s", token_address, self.chain_id, exc)
            return None

        if not isinstance(result, str) or result in ("0x", ""):
            return None
        decimals = _parse_quantity(result)
        if decimals is None or decimals > 255:
            return None
        return decimals


class JsonRpcWallet:
    """EIP-1193 style signer reached over JSON-RPC."""

    def __init__(self, rpc: JsonRpcClient) -> None:
        self._rpc = rpc

    async def _call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        try:
            return await self._rpc.call(method, params)
        except JsonRpcError as exc:
            raise WalletError(
                exc.rpc_message or f"Wallet rejected {method}",
                user_rejected=exc.code == USER_REJECTED_CODE,
                details={"method": method, "code": exc.code},
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise WalletError(f"Wallet unreachable during {method}: {exc}", details={"method": method}) from exc

    async def request_accounts(self) -> str:
        accounts = await self._call("eth_requestAccounts")
        if not accounts:
            raise WalletError("No account connected")
        return accounts[0]

    async def switch_chain(self, chain_id: int) -> None:
        await self._call("wallet_switchEthereumChain", [{"chainId": hex(chain_id)}])

    async def send_transaction(self, tx: Dict[str, Any]) -> str:
        tx_hash = await self._call("eth_sendTransaction", [tx])
        if not isinstance(tx_hash, str) or not tx_hash:
            raise WalletError("Wallet returned no transaction hash")
        return tx_hash


def build_rpc_resolver(
    rpc_urls: Optional[Mapping[int, str]] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RpcResolver:
    """Resolver over the configured ``rpc_urls``; unknown chains fail with ``ChainConfirmationError``."""
    urls = dict(rpc_urls if rpc_urls is not None else settings.rpc_urls)
    clients = {
        chain_id: RpcChainClient(chain_id, JsonRpcClient(url, transport=transport))
        for chain_id, url in urls.items()
    }
    return RpcResolver(clients=clients)
