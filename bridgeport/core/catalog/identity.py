"""Token identity keys: the one stable handle for a token across lookups and execution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..errors import ErrorKind, ValidationError
from .models import ERC20_KEY_PREFIX, NATIVE_TOKEN_KEY, Route


@dataclass(frozen=True)
class TokenIdentity:
    is_native: bool
    address: Optional[str] = None  # lowercase, ERC-20 only

    @property
    def key(self) -> str:
        if self.is_native:
            return NATIVE_TOKEN_KEY
        return f"{ERC20_KEY_PREFIX}{self.address}"


def erc20_key(address: str) -> str:
    return f"{ERC20_KEY_PREFIX}{address.strip().lower()}"


def token_key_for_route(route: Route) -> str:
    """Identity key of the origin token a route carries."""
    if route.is_native:
        return NATIVE_TOKEN_KEY
    return erc20_key(route.origin_token)


def parse_token_key(key: str) -> TokenIdentity:
    if not key:
        raise ValidationError(ErrorKind.MISSING_TOKEN, "Missing token")
    if key == NATIVE_TOKEN_KEY:
        return TokenIdentity(is_native=True)
    if key.startswith(ERC20_KEY_PREFIX):
        address = key[len(ERC20_KEY_PREFIX):].strip().lower()
        if address:
            return TokenIdentity(is_native=False, address=address)
    raise ValidationError(
        ErrorKind.MISSING_TOKEN,
        f"Unrecognised token key {key!r}",
        details={"token_key": key},
    )


def route_matches_token(route: Route, key: str) -> bool:
    """True when ``route`` moves the token identified by ``key`` out of its origin chain."""
    try:
        identity = parse_token_key(key)
    except ValidationError:
        return False
    if identity.is_native:
        return route.is_native
    return not route.is_native and route.origin_token.lower() == identity.address
