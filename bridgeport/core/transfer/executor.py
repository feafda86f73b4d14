"""
Transfer executor for the approval + bridge transaction flow.

Handles one submission end to end:
- Route resolution against a freshly fetched route set
- Amount conversion using the best known token decimals
- Execution payload request from the aggregator
- Optional approval transaction, confirmed before anything else happens
- Bridge transaction and its on-chain outcome
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Sequence, Tuple, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ...config import settings
from ...logging_config import transfer_log_context
from ..catalog.chain_registry import ChainRegistry
from ..catalog.identity import route_matches_token
from ..catalog.models import DEFAULT_TOKEN_DECIMALS, Environment, Route, Token
from ..errors import (
    BridgeportError,
    ChainConfirmationError,
    ErrorKind,
    ExecutionRevertedError,
    MissingExecutionPayload,
    NoMatchingRoute,
    ValidationError,
    WalletError,
)
from .amount import amount_to_raw, raw_to_amount
from .capabilities import ChainRpc, RpcResolver, TokenMetadataReader, Wallet
from .models import (
    ExecutionResult,
    Receipt,
    SwapApproval,
    TransactionDescriptor,
    TransferIntent,
    TransferPlan,
    TransferStep,
)
from .planner import REQUIRED_WALLET_EVM
from .progress import ProgressStep, ProgressTracker

T = TypeVar("T")


class SwapPayloadSource(Protocol):
    def swap_approval(
        self,
        environment: Environment,
        *,
        amount: str,
        input_token: str,
        output_token: str,
        origin_chain_id: int,
        destination_chain_id: int,
        depositor: str,
        recipient: Optional[str] = None,
        trade_type: str = "exactInput",
        slippage: Optional[str] = None,
    ) -> Awaitable[Dict[str, Any]]: ...


def find_route(
    routes: Sequence[Route],
    origin_chain_id: int,
    destination_chain_id: int,
    token_key: str,
) -> Route:
    for route in routes:
        if route.origin_chain_id != origin_chain_id:
            continue
        if route.destination_chain_id != destination_chain_id:
            continue
        if route_matches_token(route, token_key):
            return route
    raise NoMatchingRoute(origin_chain_id, destination_chain_id, token_key)


class TransferExecutor:
    """
    Submits a planned transfer through a wallet and waits for the origin chain.

    The approval transaction (when the aggregator asks for one) must confirm
    successfully before the bridge transaction is sent; a revert or failure
    there aborts the whole submission.
    """

    def __init__(
        self,
        aggregator: SwapPayloadSource,
        rpc: RpcResolver,
        *,
        registry: Optional[ChainRegistry] = None,
        slippage: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._aggregator = aggregator
        self._rpc = rpc
        self._registry = registry or ChainRegistry()
        self._slippage = slippage or settings.swap_slippage
        self._logger = logger or logging.getLogger(__name__)

    async def execute(
        self,
        plan: TransferPlan,
        intent: TransferIntent,
        wallet: Wallet,
        routes: Sequence[Route],
        tokens: Sequence[Token],
        *,
        tracker: Optional[ProgressTracker] = None,
    ) -> ExecutionResult:
        """
        Execute a planned transfer.

        Args:
            plan: Output of the planner
            intent: The intent the plan was built from (amount, recipient, environment)
            wallet: Signer used for both transactions
            routes: Route set fetched for this submission
            tokens: Catalog tokens for the origin chain
            tracker: Fresh progress tracker to report into; one is created if omitted

        Returns:
            ExecutionResult with transaction hashes and the bridge outcome

        Raises:
            BridgeportError: Any failure; running steps are marked as error first
        """
        tracker = tracker or ProgressTracker()
        tracker.start()

        step = plan.steps[0] if plan.steps else None
        with transfer_log_context(
            environment=intent.environment.value,
            origin_chain_id=step.origin_chain_id if step else None,
            destination_chain_id=step.destination_chain_id if step else None,
            token_key=step.token_key if step else None,
        ):
            try:
                return await self._run(plan, intent, wallet, routes, tokens, tracker)
            except Exception as exc:
                message = exc.message if isinstance(exc, BridgeportError) else (str(exc) or "Execution failed")
                tracker.fail(message)
                self._logger.warning("Transfer execution failed: %s", message)
                raise

    def _single_step(self, plan: TransferPlan) -> TransferStep:
        if len(plan.steps) != 1:
            raise ValidationError(
                ErrorKind.UNSUPPORTED_PLAN,
                f"Only single-step plans are supported (got {len(plan.steps)})",
            )
        step = plan.steps[0]
        if step.required_wallet != REQUIRED_WALLET_EVM:
            raise ValidationError(
                ErrorKind.UNSUPPORTED_PLAN,
                f"Unsupported wallet requirement {step.required_wallet!r}",
            )
        return step

    async def _run(
        self,
        plan: TransferPlan,
        intent: TransferIntent,
        wallet: Wallet,
        routes: Sequence[Route],
        tokens: Sequence[Token],
        tracker: ProgressTracker,
    ) -> ExecutionResult:
        step = self._single_step(plan)
        origin = step.origin_chain_id

        # Route, RPC and amount problems surface before the wallet is touched
        route = find_route(routes, origin, step.destination_chain_id, step.token_key)
        rpc = self._rpc.for_chain(origin)
        decimals = await self._resolve_decimals(route, step.token_key, tokens, rpc)
        amount_raw = amount_to_raw(intent.amount, decimals)

        depositor = await self._wallet_call("request accounts", wallet.request_accounts)
        if not depositor:
            raise WalletError("No account connected")
        await self._wallet_call("switch chain", lambda: wallet.switch_chain(origin))

        payload, swap_tx, amount_raw, decimals = await self._request_payload(
            intent, step, route, depositor, amount_raw, decimals
        )

        approval_hash: Optional[str] = None
        if payload.has_approval:
            tracker.begin(ProgressStep.APPROVAL)
            approval_hash = await self._send(wallet, payload.approval_tx, depositor, origin)
            tracker.record_hash(ProgressStep.APPROVAL, approval_hash)
            receipt = await self._confirm(rpc, approval_hash, origin)
            if not receipt.is_success:
                raise ExecutionRevertedError("approval", approval_hash, origin)
            tracker.succeed(ProgressStep.APPROVAL)
        else:
            tracker.skip_approval()

        tracker.begin(ProgressStep.BRIDGE)
        if swap_tx.value is not None:
            value = swap_tx.value
        else:
            value = amount_raw if route.is_native else 0
        bridge_hash = await self._send(wallet, swap_tx, depositor, origin, value=value)
        tracker.record_hash(ProgressStep.BRIDGE, bridge_hash)
        receipt = await self._confirm(rpc, bridge_hash, origin)

        if receipt.is_success:
            tracker.succeed(ProgressStep.BRIDGE)
        else:
            tracker.fail_step(ProgressStep.BRIDGE, f"Bridge transaction {bridge_hash} reverted")

        self._logger.info(
            "Bridge of %s (raw %d) finished: %s",
            raw_to_amount(amount_raw, decimals),
            amount_raw,
            receipt.status.value,
        )
        return ExecutionResult(
            approval_submitted=approval_hash is not None,
            approval_hash=approval_hash,
            bridge_hash=bridge_hash,
            bridge_outcome=receipt.status,
            amount_raw=amount_raw,
            decimals=decimals,
            depositor=depositor,
        )

    async def _resolve_decimals(
        self,
        route: Route,
        token_key: str,
        tokens: Sequence[Token],
        rpc: ChainRpc,
    ) -> int:
        token = next((t for t in tokens if t.key == token_key), None)
        if route.is_native:
            if token is not None:
                return token.decimals
            return self._registry.native_decimals(route.origin_chain_id)

        if isinstance(rpc, TokenMetadataReader):
            onchain = await rpc.token_decimals(route.origin_token)
            if isinstance(onchain, int) and not isinstance(onchain, bool) and onchain >= 0:
                return onchain
        return token.decimals if token is not None else DEFAULT_TOKEN_DECIMALS

    async def _fetch_payload(
        self,
        intent: TransferIntent,
        step: TransferStep,
        route: Route,
        depositor: str,
        amount_raw: int,
    ) -> SwapApproval:
        body = await self._aggregator.swap_approval(
            intent.environment,
            amount=str(amount_raw),
            input_token=route.origin_token,
            output_token=route.destination_token,
            origin_chain_id=step.origin_chain_id,
            destination_chain_id=step.destination_chain_id,
            depositor=depositor,
            recipient=intent.recipient or None,
            trade_type="exactInput",
            slippage=self._slippage,
        )
        try:
            return SwapApproval.model_validate(body)
        except PydanticValidationError as exc:
            raise MissingExecutionPayload(
                "Across /swap/approval returned an unreadable payload",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    async def _request_payload(
        self,
        intent: TransferIntent,
        step: TransferStep,
        route: Route,
        depositor: str,
        amount_raw: int,
        decimals: int,
    ) -> Tuple[SwapApproval, TransactionDescriptor, int, int]:
        payload = await self._fetch_payload(intent, step, route, depositor, amount_raw)

        reported = payload.reported_input_decimals
        if reported is not None and reported != decimals:
            self._logger.warning(
                "Aggregator reports %d decimals for %s, amount was scaled with %d; re-quoting",
                reported,
                route.origin_token,
                decimals,
            )
            decimals = reported
            amount_raw = amount_to_raw(intent.amount, decimals)
            payload = await self._fetch_payload(intent, step, route, depositor, amount_raw)
            again = payload.reported_input_decimals
            if again is not None and again != decimals:
                raise ValidationError(
                    ErrorKind.DECIMALS_MISMATCH,
                    "Aggregator token decimals changed between requests",
                    details={"first": decimals, "second": again},
                )

        swap_tx = payload.swap_tx
        if swap_tx is None or not swap_tx.is_complete:
            raise MissingExecutionPayload("Across /swap/approval did not return swapTx")
        return payload, swap_tx, amount_raw, decimals

    async def _wallet_call(self, action: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await call()
        except BridgeportError:
            raise
        except Exception as exc:
            raise WalletError(f"Wallet failed to {action}: {exc}") from exc

    async def _send(
        self,
        wallet: Wallet,
        tx: TransactionDescriptor,
        depositor: str,
        chain_id: int,
        *,
        value: Optional[int] = None,
    ) -> str:
        request = tx.to_wallet_request(depositor, chain_id, value=value)
        tx_hash = await self._wallet_call("send transaction", lambda: wallet.send_transaction(request))
        if not tx_hash:
            raise WalletError("Wallet returned no transaction hash")
        self._logger.info("Submitted transaction %s on chain %d", tx_hash, chain_id)
        return tx_hash

    async def _confirm(self, rpc: ChainRpc, tx_hash: str, chain_id: int) -> Receipt:
        try:
            receipt = await rpc.wait_for_receipt(tx_hash)
        except BridgeportError:
            raise
        except Exception as exc:
            raise ChainConfirmationError(
                f"Failed waiting for receipt of {tx_hash}: {exc}",
                chain_id=chain_id,
                tx_hash=tx_hash,
            ) from exc
        self._logger.info("Transaction %s confirmed with status %s", tx_hash, receipt.status.value)
        return receipt
