"""
Transfer models and types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..catalog.models import Environment


@dataclass(frozen=True)
class TransferIntent:
    """What the user asked for. Unvalidated until it passes through the planner."""
    environment: Environment
    origin_chain_id: Optional[int]
    destination_chain_id: Optional[int]
    token_key: str
    amount: str                                 # Human-entered decimal string
    recipient: str


class StepKind(str, Enum):
    ACROSS = "across"                           # Bridge via aggregator


@dataclass(frozen=True)
class TransferStep:
    kind: StepKind
    required_wallet: str
    origin_chain_id: int
    destination_chain_id: int
    token_key: str


@dataclass(frozen=True)
class TransferPlan:
    """Ordered steps; single-hop today, kept as a sequence for multi-hop plans."""
    steps: Tuple[TransferStep, ...]


class BridgeOutcome(str, Enum):
    SUCCESS = "success"
    REVERTED = "reverted"


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    status: BridgeOutcome
    block_number: Optional[int] = None
    gas_used: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status == BridgeOutcome.SUCCESS


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError("boolean is not a quantity")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    return int(text, 16) if text.lower().startswith("0x") else int(text)


class TransactionDescriptor(BaseModel):
    """A transaction the aggregator wants the depositor to send.

    Quantities arrive as decimal strings and are held as ints.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    chain_id: Optional[int] = Field(default=None, alias="chainId")
    to: Optional[str] = None
    data: Optional[str] = None
    value: Optional[int] = None
    gas: Optional[int] = None
    max_fee_per_gas: Optional[int] = Field(default=None, alias="maxFeePerGas")
    max_priority_fee_per_gas: Optional[int] = Field(default=None, alias="maxPriorityFeePerGas")

    @field_validator("value", "gas", "max_fee_per_gas", "max_priority_fee_per_gas", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> Optional[int]:
        return _to_int(value)

    @property
    def is_complete(self) -> bool:
        return bool(self.to) and bool(self.data)

    def to_wallet_request(
        self,
        from_address: str,
        chain_id: int,
        *,
        value: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Hex-encoded ``eth_sendTransaction`` params."""
        send_value = value if value is not None else (self.value or 0)
        tx: Dict[str, Any] = {
            "from": from_address,
            "to": self.to,
            "data": self.data,
            "value": hex(send_value),
            "chainId": hex(chain_id),
        }
        if self.gas is not None:
            tx["gas"] = hex(self.gas)
        if self.max_fee_per_gas is not None:
            tx["maxFeePerGas"] = hex(self.max_fee_per_gas)
        if self.max_priority_fee_per_gas is not None:
            tx["maxPriorityFeePerGas"] = hex(self.max_priority_fee_per_gas)
        return tx


class PayloadToken(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    address: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None


class SwapApproval(BaseModel):
    """Execution payload returned by ``/swap/approval``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    approval_tx: Optional[TransactionDescriptor] = Field(default=None, alias="approvalTx")
    swap_tx: Optional[TransactionDescriptor] = Field(default=None, alias="swapTx")
    input_token: Optional[PayloadToken] = Field(default=None, alias="inputToken")

    @property
    def has_approval(self) -> bool:
        return self.approval_tx is not None and self.approval_tx.is_complete

    @property
    def reported_input_decimals(self) -> Optional[int]:
        if self.input_token is None:
            return None
        return self.input_token.decimals


@dataclass
class ExecutionResult:
    approval_submitted: bool
    bridge_hash: str
    bridge_outcome: BridgeOutcome
    approval_hash: Optional[str] = None
    amount_raw: int = 0
    decimals: int = 18
    depositor: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.bridge_outcome == BridgeOutcome.SUCCESS
