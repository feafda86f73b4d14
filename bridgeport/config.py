import os

from pathlib import Path
from typing import Any, Dict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

# Per-chain RPC variables used by older deployments, folded into ``rpc_urls``.
LEGACY_RPC_ENV_VARS: Dict[str, int] = {
    "RPC_SEPOLIA": 11155111,
    "RPC_BASE_SEPOLIA": 84532,
    "RPC_OP_SEPOLIA": 11155420,
    "RPC_ARBITRUM_SEPOLIA": 421614,
    "RPC_POLYGON_AMOY": 80002,
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up per-chain RPC variables not present in ``rpc_urls``."""

        super().model_post_init(__context)

        merged = dict(self.rpc_urls)
        for env_name, chain_id in LEGACY_RPC_ENV_VARS.items():
            value = os.getenv(env_name)
            if value and chain_id not in merged:
                merged[chain_id] = value
        if merged != self.rpc_urls:
            object.__setattr__(self, "rpc_urls", merged)

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="auto", description="Log renderer: json, console or auto (console at DEBUG)")

    # Across aggregator
    across_mainnet_base_url: str = Field(
        default="https://app.across.to/api",
        description="Across API base URL for the mainnet environment",
    )
    across_testnet_base_url: str = Field(
        default="https://testnet.across.to/api",
        description="Across API base URL for the testnet environment",
    )
    request_timeout_seconds: int = Field(default=20, description="Aggregator request timeout")
    swap_slippage: str = Field(default="auto", description="Slippage directive sent with swap requests")

    # Route catalog
    route_cache_ttl_seconds: int = Field(default=300, description="Route table cache TTL in seconds")
    default_environment: str = Field(default="testnet", description="Environment selected on startup")
    extra_chain_names: Dict[int, str] = Field(
        default_factory=dict,
        description="Additional chainId -> display name entries for the chain registry",
    )

    # Chain RPC
    rpc_urls: Dict[int, str] = Field(
        default_factory=dict,
        description="JSON-RPC endpoint per origin chain id",
    )
    receipt_poll_interval_seconds: float = Field(default=2.0, description="Receipt polling interval")
    receipt_timeout_seconds: int = Field(default=300, description="Give up waiting for a receipt after this")


settings = Settings()
