"""Typed models used by the route catalog."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator


NATIVE_TOKEN_KEY = "native"
ERC20_KEY_PREFIX = "erc20:"
DEFAULT_TOKEN_DECIMALS = 18


class Environment(str, Enum):
    """Aggregator deployment a session talks to (production or test)."""

    MAINNET = "mainnet"
    TESTNET = "testnet"


class Route(BaseModel):
    """A bridgeable (origin chain, origin token) -> (destination chain, destination token) pair.

    Field typing is strict: a record advertising ``"8453"`` as a chain id or a
    token address as anything other than a string is rejected during
    normalization rather than coerced.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    origin_chain_id: StrictInt = Field(alias="originChainId")
    destination_chain_id: StrictInt = Field(alias="destinationChainId")
    origin_token: StrictStr = Field(alias="originToken")
    destination_token: StrictStr = Field(alias="destinationToken")
    origin_token_symbol: Optional[str] = Field(default=None, alias="originTokenSymbol")
    destination_token_symbol: Optional[str] = Field(default=None, alias="destinationTokenSymbol")
    is_native: bool = Field(default=False, alias="isNative")

    @field_validator("origin_token_symbol", "destination_token_symbol", mode="before")
    @classmethod
    def _symbol_or_none(cls, value: Any) -> Optional[str]:
        # Optional metadata never disqualifies a route
        return value if isinstance(value, str) and value else None

    @field_validator("is_native", mode="before")
    @classmethod
    def _truthy(cls, value: Any) -> bool:
        return bool(value)


@dataclass(frozen=True)
class Chain:
    chain_id: int
    name: str


@dataclass(frozen=True)
class Token:
    key: str
    symbol: str
    chain_id: int
    is_native: bool
    address: Optional[str] = None
    decimals: int = DEFAULT_TOKEN_DECIMALS


@dataclass(frozen=True)
class RoutesParsed:
    """Normalization succeeded; ``dropped`` counts records that failed typing."""

    routes: Tuple[Route, ...]
    dropped: int = 0


@dataclass(frozen=True)
class MalformedShape:
    """The payload matched none of the known envelopes."""

    reason: str


ParseResult = Union[RoutesParsed, MalformedShape]
