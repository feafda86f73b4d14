"""RouteCatalog derives chain, token and destination lists from the aggregator's route table."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Dict, List, Optional, Protocol, Tuple

from ..errors import MalformedCatalogResponse
from .cache import RouteCache
from .chain_registry import ChainRegistry
from .identity import route_matches_token, token_key_for_route
from .models import DEFAULT_TOKEN_DECIMALS, Chain, Environment, MalformedShape, Route, Token
from .normalize import parse_routes


class RouteSource(Protocol):
    def available_routes(self, environment: Environment) -> Awaitable[Any]: ...


class RouteCatalog:
    """Read-side view over the cached route set for each environment.

    The catalog owns its ``RouteCache`` exclusively; construct one per process
    and pass it in so tests and callers can share or reset it explicitly.
    """

    def __init__(
        self,
        source: RouteSource,
        *,
        cache: Optional[RouteCache] = None,
        registry: Optional[ChainRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._source = source
        self._cache = cache or RouteCache()
        self._registry = registry or ChainRegistry()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def registry(self) -> ChainRegistry:
        return self._registry

    @property
    def cache(self) -> RouteCache:
        return self._cache

    async def _load(self, environment: Environment) -> Tuple[Route, ...]:
        payload = await self._source.available_routes(environment)
        parsed = parse_routes(payload)
        if isinstance(parsed, MalformedShape):
            self._logger.warning("Route table rejected for %s: %s", environment.value, parsed.reason)
            raise MalformedCatalogResponse(parsed.reason, details={"environment": environment.value})
        self._logger.info(
            "Route catalog refreshed for %s: %d routes (%d dropped)",
            environment.value,
            len(parsed.routes),
            parsed.dropped,
        )
        return parsed.routes

    async def get_raw_routes(
        self,
        environment: Environment,
        *,
        force_refresh: bool = False,
    ) -> Tuple[Route, ...]:
        return await self._cache.get_or_load(environment, self._load, force=force_refresh)

    def invalidate(self, environment: Environment) -> None:
        self._cache.invalidate(environment)

    def _to_chains(self, chain_ids: set[int]) -> List[Chain]:
        chains: List[Chain] = []
        for chain_id in sorted(chain_ids):
            name = self._registry.display_name(chain_id)
            if name is None:
                continue
            chains.append(Chain(chain_id=chain_id, name=name))
        return chains

    async def list_chains(self, environment: Environment) -> List[Chain]:
        routes = await self.get_raw_routes(environment)
        chain_ids: set[int] = set()
        for route in routes:
            chain_ids.add(route.origin_chain_id)
            chain_ids.add(route.destination_chain_id)
        return self._to_chains(chain_ids)

    async def list_tokens(self, environment: Environment, origin_chain_id: int) -> List[Token]:
        routes = await self.get_raw_routes(environment)
        tokens: Dict[str, Token] = {}

        for route in routes:
            if route.origin_chain_id != origin_chain_id:
                continue
            key = token_key_for_route(route)
            if key in tokens:
                continue
            if route.is_native:
                symbol = route.origin_token_symbol or self._registry.native_symbol(origin_chain_id)
            else:
                symbol = route.origin_token_symbol or "UNKNOWN"
            tokens[key] = Token(
                key=key,
                symbol=symbol,
                chain_id=origin_chain_id,
                is_native=route.is_native,
                address=None if route.is_native else route.origin_token,
                decimals=DEFAULT_TOKEN_DECIMALS,
            )

        return sorted(
            tokens.values(),
            key=lambda t: (not t.is_native, t.symbol.casefold(), t.key),
        )

    async def list_destinations(
        self,
        environment: Environment,
        origin_chain_id: int,
        token_key: str,
    ) -> List[Chain]:
        routes = await self.get_raw_routes(environment)
        destination_ids = {
            route.destination_chain_id
            for route in routes
            if route.origin_chain_id == origin_chain_id and route_matches_token(route, token_key)
        }
        return self._to_chains(destination_ids)


def build_default_catalog() -> RouteCatalog:
    from ...config import settings
    from ...providers.across import AcrossProvider
    from .chain_registry import build_default_registry

    return RouteCatalog(
        AcrossProvider(),
        cache=RouteCache(ttl_seconds=settings.route_cache_ttl_seconds),
        registry=build_default_registry(),
    )
