"""
Error Taxonomy

Every failure the engine reports to a caller is a ``BridgeportError`` carrying
an ``ErrorKind``. The session layer recovers these at its boundary and turns
them into a user-facing message; anything else is a bug and propagates.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Machine-readable error kinds."""

    CATALOG_FETCH = "catalog_fetch"
    MALFORMED_CATALOG_RESPONSE = "malformed_catalog_response"
    QUOTE_REQUEST = "quote_request"

    # Validation
    MISSING_CHAIN = "missing_chain"
    MISSING_TOKEN = "missing_token"
    INVALID_AMOUNT = "invalid_amount"
    ZERO_AMOUNT = "zero_amount"
    INVALID_RECIPIENT = "invalid_recipient"
    UNSUPPORTED_PLAN = "unsupported_plan"
    DECIMALS_MISMATCH = "decimals_mismatch"

    # Execution
    NO_MATCHING_ROUTE = "no_matching_route"
    MISSING_EXECUTION_PAYLOAD = "missing_execution_payload"
    WALLET = "wallet"
    CHAIN_CONFIRMATION = "chain_confirmation"
    EXECUTION_REVERTED = "execution_reverted"


VALIDATION_KINDS = frozenset({
    ErrorKind.MISSING_CHAIN,
    ErrorKind.MISSING_TOKEN,
    ErrorKind.INVALID_AMOUNT,
    ErrorKind.ZERO_AMOUNT,
    ErrorKind.INVALID_RECIPIENT,
    ErrorKind.UNSUPPORTED_PLAN,
    ErrorKind.DECIMALS_MISMATCH,
})


class BridgeportError(Exception):
    """Base class for all engine errors."""

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[ErrorKind] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        elif not hasattr(self, "kind"):
            raise TypeError(f"{type(self).__name__} requires an error kind")
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": dict(self.details),
        }


class AggregatorError(BridgeportError):
    """Network or HTTP failure talking to the bridge aggregator."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        kind: Optional[ErrorKind] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = dict(details or {})
        if status_code is not None:
            merged["status_code"] = status_code
        super().__init__(message, kind=kind, details=merged)
        self.status_code = status_code


class CatalogFetchError(AggregatorError):
    """The route table could not be fetched."""

    kind = ErrorKind.CATALOG_FETCH


class QuoteRequestError(AggregatorError):
    """The execution payload request failed at the HTTP level."""

    kind = ErrorKind.QUOTE_REQUEST


class MalformedCatalogResponse(BridgeportError):
    """The route table arrived in a shape we do not recognise."""

    kind = ErrorKind.MALFORMED_CATALOG_RESPONSE


class ValidationError(BridgeportError):
    """User input rejected before any on-chain interaction."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        if kind not in VALIDATION_KINDS:
            raise ValueError(f"{kind.value} is not a validation error kind")
        super().__init__(message, kind=kind, details=details)


class NoMatchingRoute(BridgeportError):
    kind = ErrorKind.NO_MATCHING_ROUTE

    def __init__(
        self,
        origin_chain_id: int,
        destination_chain_id: int,
        token_key: str,
    ):
        super().__init__(
            "No matching route for selected (source, destination, token).",
            details={
                "origin_chain_id": origin_chain_id,
                "destination_chain_id": destination_chain_id,
                "token_key": token_key,
            },
        )


class MissingExecutionPayload(BridgeportError):
    kind = ErrorKind.MISSING_EXECUTION_PAYLOAD


class WalletError(BridgeportError):
    """No wallet, user rejection, or a chain the wallet cannot switch to."""

    kind = ErrorKind.WALLET

    def __init__(
        self,
        message: str,
        *,
        user_rejected: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.user_rejected = user_rejected


class ChainConfirmationError(BridgeportError):
    """Waiting for a receipt failed (RPC error, timeout, missing endpoint)."""

    kind = ErrorKind.CHAIN_CONFIRMATION

    def __init__(
        self,
        message: str,
        *,
        chain_id: Optional[int] = None,
        tx_hash: Optional[str] = None,
    ):
        details: Dict[str, Any] = {}
        if chain_id is not None:
            details["chain_id"] = chain_id
        if tx_hash is not None:
            details["tx_hash"] = tx_hash
        super().__init__(message, details=details)
        self.chain_id = chain_id
        self.tx_hash = tx_hash


class ExecutionRevertedError(BridgeportError):
    """A transaction that aborts the flow was mined but reverted.

    Only raised for the approval step. A reverted bridge transaction is
    reported through ``BridgeOutcome.REVERTED`` instead.
    """

    kind = ErrorKind.EXECUTION_REVERTED

    def __init__(self, step: str, tx_hash: str, chain_id: int):
        super().__init__(
            f"{step.capitalize()} transaction {tx_hash} reverted",
            details={"step": step, "tx_hash": tx_hash, "chain_id": chain_id},
        )
        self.step = step
        self.tx_hash = tx_hash
        self.chain_id = chain_id
