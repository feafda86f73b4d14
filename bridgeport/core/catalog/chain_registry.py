"""Static chain registry: chain id -> display name and native currency metadata.

The registry is fixed at process start. Chains the aggregator can bridge to but
that are absent here are intentionally invisible to catalog consumers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

CHAIN_METADATA: Dict[int, Dict[str, Any]] = {
    # Mainnets
    1: {'name': 'Ethereum', 'native_symbol': 'ETH'},
    10: {'name': 'OP Mainnet', 'native_symbol': 'ETH'},
    56: {'name': 'BNB Smart Chain', 'native_symbol': 'BNB'},
    130: {'name': 'Unichain', 'native_symbol': 'ETH'},
    137: {'name': 'Polygon', 'native_symbol': 'POL'},
    232: {'name': 'Lens', 'native_symbol': 'GHO'},
    288: {'name': 'Boba Network', 'native_symbol': 'ETH'},
    324: {'name': 'ZKsync Era', 'native_symbol': 'ETH'},
    480: {'name': 'World Chain', 'native_symbol': 'ETH'},
    690: {'name': 'Redstone', 'native_symbol': 'ETH'},
    1135: {'name': 'Lisk', 'native_symbol': 'ETH'},
    1868: {'name': 'Soneium Mainnet', 'native_symbol': 'ETH'},
    8453: {'name': 'Base', 'native_symbol': 'ETH'},
    34443: {'name': 'Mode Mainnet', 'native_symbol': 'ETH'},
    42161: {'name': 'Arbitrum One', 'native_symbol': 'ETH'},
    57073: {'name': 'Ink', 'native_symbol': 'ETH'},
    59144: {'name': 'Linea Mainnet', 'native_symbol': 'ETH'},
    81457: {'name': 'Blast', 'native_symbol': 'ETH'},
    534352: {'name': 'Scroll', 'native_symbol': 'ETH'},
    7777777: {'name': 'Zora', 'native_symbol': 'ETH'},
    # Testnets
    919: {'name': 'Mode Testnet', 'native_symbol': 'ETH', 'testnet': True},
    1301: {'name': 'Unichain Sepolia', 'native_symbol': 'ETH', 'testnet': True},
    4202: {'name': 'Lisk Sepolia', 'native_symbol': 'ETH', 'testnet': True},
    59141: {'name': 'Linea Sepolia Testnet', 'native_symbol': 'ETH', 'testnet': True},
    80002: {'name': 'Polygon Amoy', 'native_symbol': 'POL', 'testnet': True},
    84532: {'name': 'Base Sepolia', 'native_symbol': 'ETH', 'testnet': True},
    421614: {'name': 'Arbitrum Sepolia', 'native_symbol': 'ETH', 'testnet': True},
    534351: {'name': 'Scroll Sepolia', 'native_symbol': 'ETH', 'testnet': True},
    763373: {'name': 'Ink Sepolia', 'native_symbol': 'ETH', 'testnet': True},
    11155111: {'name': 'Sepolia', 'native_symbol': 'ETH', 'testnet': True},
    11155420: {'name': 'OP Sepolia', 'native_symbol': 'ETH', 'testnet': True},
    168587773: {'name': 'Blast Sepolia', 'native_symbol': 'ETH', 'testnet': True},
    999999999: {'name': 'Zora Sepolia', 'native_symbol': 'ETH', 'testnet': True},
}

DEFAULT_NATIVE_SYMBOL = 'ETH'
DEFAULT_NATIVE_DECIMALS = 18


class ChainRegistry:
    """Pure, synchronous lookups over a fixed chain table.

    Usage:
        registry = ChainRegistry()
        registry.display_name(84532)   # "Base Sepolia"
        registry.display_name(999001)  # None -> excluded from catalog output
    """

    def __init__(
        self,
        metadata: Optional[Mapping[int, Mapping[str, Any]]] = None,
        *,
        extra_names: Optional[Mapping[int, str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        base = CHAIN_METADATA if metadata is None else metadata
        self._chains: Dict[int, Dict[str, Any]] = {
            int(chain_id): dict(details) for chain_id, details in base.items()
        }
        for chain_id, name in (extra_names or {}).items():
            entry = self._chains.setdefault(int(chain_id), {})
            entry['name'] = name
        if extra_names:
            self._logger.debug("Chain registry extended with %d configured chains", len(extra_names))

    def display_name(self, chain_id: int) -> Optional[str]:
        """Human-readable name, or None when the chain is unknown."""
        chain = self._chains.get(chain_id)
        if not chain:
            return None
        return chain.get('name') or None

    def native_symbol(self, chain_id: int) -> str:
        chain = self._chains.get(chain_id) or {}
        return chain.get('native_symbol', DEFAULT_NATIVE_SYMBOL)

    def native_decimals(self, chain_id: int) -> int:
        chain = self._chains.get(chain_id) or {}
        try:
            return int(chain.get('native_decimals', DEFAULT_NATIVE_DECIMALS))
        except (TypeError, ValueError):
            return DEFAULT_NATIVE_DECIMALS

    def is_testnet(self, chain_id: int) -> bool:
        chain = self._chains.get(chain_id) or {}
        return bool(chain.get('testnet', False))


def build_default_registry() -> ChainRegistry:
    """Registry seeded with the static table plus any configured extras."""
    from ...config import settings

    return ChainRegistry(extra_names=settings.extra_chain_names)
