"""
Transfer planning and execution.

Usage:
    from bridgeport.core.transfer import TransferExecutor, build_plan

    plan = build_plan(intent)
    result = await executor.execute(plan, intent, wallet, routes, tokens, tracker=tracker)
"""

from .amount import amount_to_raw, parse_amount, raw_to_amount
from .capabilities import ChainRpc, RpcResolver, TokenMetadataReader, Wallet
from .executor import TransferExecutor, find_route
from .models import (
    BridgeOutcome,
    ExecutionResult,
    PayloadToken,
    Receipt,
    StepKind,
    SwapApproval,
    TransactionDescriptor,
    TransferIntent,
    TransferPlan,
    TransferStep,
)
from .planner import REQUIRED_WALLET_EVM, build_plan
from .progress import (
    ExecutionProgress,
    InvalidTransitionError,
    ProgressStep,
    ProgressTracker,
    StepStatus,
    TxHashes,
)

__all__ = [
    # Amounts
    "amount_to_raw",
    "parse_amount",
    "raw_to_amount",
    # Capabilities
    "ChainRpc",
    "RpcResolver",
    "TokenMetadataReader",
    "Wallet",
    # Executor
    "TransferExecutor",
    "find_route",
    # Models
    "BridgeOutcome",
    "ExecutionResult",
    "PayloadToken",
    "Receipt",
    "StepKind",
    "SwapApproval",
    "TransactionDescriptor",
    "TransferIntent",
    "TransferPlan",
    "TransferStep",
    # Planner
    "REQUIRED_WALLET_EVM",
    "build_plan",
    # Progress
    "ExecutionProgress",
    "InvalidTransitionError",
    "ProgressStep",
    "ProgressTracker",
    "StepStatus",
    "TxHashes",
]
