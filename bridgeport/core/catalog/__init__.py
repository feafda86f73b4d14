"""Route catalog: discovery and caching of bridgeable (chain, token, destination) combinations."""

from .cache import CacheEntry, RouteCache
from .chain_registry import ChainRegistry, build_default_registry
from .identity import TokenIdentity, erc20_key, parse_token_key, route_matches_token, token_key_for_route
from .models import (
    DEFAULT_TOKEN_DECIMALS,
    NATIVE_TOKEN_KEY,
    Chain,
    Environment,
    MalformedShape,
    Route,
    RoutesParsed,
    Token,
)
from .normalize import parse_routes
from .service import RouteCatalog, build_default_catalog

__all__ = [
    "CacheEntry",
    "RouteCache",
    "ChainRegistry",
    "build_default_registry",
    "TokenIdentity",
    "erc20_key",
    "parse_token_key",
    "route_matches_token",
    "token_key_for_route",
    "DEFAULT_TOKEN_DECIMALS",
    "NATIVE_TOKEN_KEY",
    "Chain",
    "Environment",
    "MalformedShape",
    "Route",
    "RoutesParsed",
    "Token",
    "parse_routes",
    "RouteCatalog",
    "build_default_catalog",
]
