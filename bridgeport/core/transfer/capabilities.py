"""Interfaces the executor needs from the outside world."""

from typing import Any, Callable, Dict, Mapping, Optional, Protocol, runtime_checkable

from ..errors import ChainConfirmationError
from .models import Receipt


@runtime_checkable
class Wallet(Protocol):
    """EVM signer capable of sending transactions on behalf of the user."""

    async def request_accounts(self) -> str:
        """Return the connected account address."""
        ...

    async def switch_chain(self, chain_id: int) -> None:
        ...

    async def send_transaction(self, tx: Dict[str, Any]) -> str:
        """Submit ``tx`` and return its hash."""
        ...


@runtime_checkable
class ChainRpc(Protocol):
    """Read access to one chain."""

    async def wait_for_receipt(self, tx_hash: str) -> Receipt:
        ...


@runtime_checkable
class TokenMetadataReader(Protocol):
    """Optional extension of ``ChainRpc`` for on-chain ERC-20 metadata."""

    async def token_decimals(self, token_address: str) -> Optional[int]:
        ...


RpcFactory = Callable[[int], ChainRpc]


class RpcResolver:
    """Hands out a ``ChainRpc`` per chain id, created lazily and reused."""

    def __init__(
        self,
        factory: Optional[RpcFactory] = None,
        *,
        clients: Optional[Mapping[int, ChainRpc]] = None,
    ) -> None:
        self._factory = factory
        self._clients: Dict[int, ChainRpc] = dict(clients or {})

    def for_chain(self, chain_id: int) -> ChainRpc:
        client = self._clients.get(chain_id)
        if client is not None:
            return client
        if self._factory is None:
            raise ChainConfirmationError(
                f"Missing RPC mapping for chainId={chain_id}",
                chain_id=chain_id,
            )
        client = self._factory(chain_id)
        self._clients[chain_id] = client
        return client
