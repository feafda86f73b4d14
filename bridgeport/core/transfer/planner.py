"""Builds a TransferPlan from a user's TransferIntent.

Only shape validation happens here. Route existence, balances and allowances
can change between planning and submission, so they are checked at execution.
"""

from __future__ import annotations

from ..errors import ErrorKind, ValidationError
from .amount import parse_amount
from .models import StepKind, TransferIntent, TransferPlan, TransferStep

REQUIRED_WALLET_EVM = "evm"


def build_plan(intent: TransferIntent) -> TransferPlan:
    if not intent.origin_chain_id or not intent.destination_chain_id:
        raise ValidationError(ErrorKind.MISSING_CHAIN, "Missing chains")

    if not intent.token_key:
        raise ValidationError(ErrorKind.MISSING_TOKEN, "Missing token")

    if parse_amount(intent.amount) <= 0:
        raise ValidationError(
            ErrorKind.INVALID_AMOUNT,
            "Invalid amount",
            details={"amount": intent.amount},
        )

    step = TransferStep(
        kind=StepKind.ACROSS,
        required_wallet=REQUIRED_WALLET_EVM,
        origin_chain_id=intent.origin_chain_id,
        destination_chain_id=intent.destination_chain_id,
        token_key=intent.token_key,
    )
    return TransferPlan(steps=(step,))
