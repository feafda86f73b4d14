"""
Transfer Session

Headless controller for one user's transfer form. Each selection cascades
into the dependent lists below it:

    environment -> chains -> (origin) tokens -> (token) destinations

Lists are loaded asynchronously. Every stage has a generation counter; a load
that finishes after its stage was reset is dropped instead of overwriting
newer state. A submission is a stage of its own: once any selection resets
execution, the running submit stops writing progress, result and error.
Engine errors are caught at this boundary and exposed through ``error``.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

from ..config import settings
from .catalog.models import Chain, Environment, Token
from .catalog.service import RouteCatalog
from .errors import BridgeportError, ErrorKind, ValidationError
from .transfer.capabilities import Wallet
from .transfer.executor import TransferExecutor
from .transfer.models import ExecutionResult, TransferIntent, TransferPlan
from .transfer.planner import build_plan
from .transfer.progress import ExecutionProgress, ProgressTracker

T = TypeVar("T")

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def is_evm_address(value: str) -> bool:
    return bool(_EVM_ADDRESS_RE.match((value or "").strip()))


class Stage(str, Enum):
    CHAINS = "chains"
    TOKENS = "tokens"
    DESTINATIONS = "destinations"
    EXECUTION = "execution"


class StageGuard:
    """Monotonic generation counter per pipeline stage."""

    def __init__(self) -> None:
        self._generations: Dict[Stage, int] = {stage: 0 for stage in Stage}

    def advance(self, *stages: Stage) -> None:
        for stage in stages:
            self._generations[stage] += 1

    def current(self, stage: Stage) -> int:
        return self._generations[stage]

    def is_current(self, stage: Stage, generation: int) -> bool:
        return self._generations[stage] == generation


@dataclass
class LoadingFlags:
    chains: bool = False
    tokens: bool = False
    destinations: bool = False
    submitting: bool = False


@dataclass
class SessionSelection:
    origin_chain_id: Optional[int] = None
    token_key: str = ""
    destination_chain_id: Optional[int] = None
    amount: str = ""
    recipient: str = ""


class TransferSession:
    """
    State holder driving the catalog, planner and executor for one form.

    Usage:
        session = TransferSession(catalog, executor)
        await session.select_environment(Environment.TESTNET)
        await session.select_origin_chain(84532)
        await session.select_token("native")
        session.select_destination(11155111)
        session.set_amount("0.01")
        session.set_recipient("0x...")
        if session.preview():
            result = await session.submit(wallet)
    """

    def __init__(
        self,
        catalog: RouteCatalog,
        executor: TransferExecutor,
        *,
        environment: Optional[Environment] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.catalog = catalog
        self.executor = executor
        self.logger = logger or logging.getLogger(__name__)
        self.environment = environment or Environment(settings.default_environment)

        self.guard = StageGuard()
        self.loading = LoadingFlags()
        self.selection = SessionSelection()

        self.chains: List[Chain] = []
        self.tokens: List[Token] = []
        self.destinations: List[Chain] = []
        self.plan: Optional[TransferPlan] = None
        self.progress: ExecutionProgress = ExecutionProgress()
        self.result: Optional[ExecutionResult] = None
        self.error: Optional[BridgeportError] = None
        self._progress_listeners: List[Callable[[ExecutionProgress], None]] = []

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error is not None else None

    # =========================================================================
    # Resets
    # =========================================================================

    def _reset_execution(self) -> None:
        self.guard.advance(Stage.EXECUTION)
        self.loading.submitting = False
        self.plan = None
        self.result = None
        self.progress = ExecutionProgress()

    def _reset_destinations(self) -> None:
        self.guard.advance(Stage.DESTINATIONS)
        self.destinations = []
        self.selection.destination_chain_id = None
        self.loading.destinations = False

    def _reset_tokens(self) -> None:
        self.guard.advance(Stage.TOKENS)
        self.tokens = []
        self.selection.token_key = ""
        self.loading.tokens = False
        self._reset_destinations()

    # =========================================================================
    # Loading
    # =========================================================================

    async def _load(self, stage: Stage, loader: Awaitable[T]) -> Optional[T]:
        """Await ``loader`` for ``stage``; ``None`` if it failed or went stale."""
        generation = self.guard.current(stage)
        setattr(self.loading, stage.value, True)
        try:
            value = await loader
        except BridgeportError as exc:
            if self.guard.is_current(stage, generation):
                self.error = exc
                setattr(self.loading, stage.value, False)
                self.logger.warning("Failed to load %s: %s", stage.value, exc.message)
            return None

        if not self.guard.is_current(stage, generation):
            self.logger.debug("Discarding stale %s result (generation %d)", stage.value, generation)
            return None
        setattr(self.loading, stage.value, False)
        return value

    async def select_environment(self, environment: Environment) -> None:
        """Switch environments, clearing every selection, and load chains."""
        previous = self.environment
        if previous != environment:
            self.catalog.invalidate(previous)
        self.environment = environment

        self.guard.advance(Stage.CHAINS)
        self.chains = []
        self._reset_tokens()
        self.selection = SessionSelection()
        self._reset_execution()
        self.error = None

        chains = await self._load(Stage.CHAINS, self.catalog.list_chains(environment))
        if chains is not None:
            self.chains = chains

    async def select_origin_chain(self, chain_id: Optional[int]) -> None:
        self._reset_tokens()
        self._reset_execution()
        self.error = None
        self.selection.origin_chain_id = chain_id
        if chain_id is None:
            return

        tokens = await self._load(Stage.TOKENS, self.catalog.list_tokens(self.environment, chain_id))
        if tokens is not None:
            self.tokens = tokens

    async def select_token(self, token_key: str) -> None:
        self._reset_destinations()
        self._reset_execution()
        self.error = None
        self.selection.token_key = token_key
        origin = self.selection.origin_chain_id
        if origin is None or not token_key:
            return

        destinations = await self._load(
            Stage.DESTINATIONS,
            self.catalog.list_destinations(self.environment, origin, token_key),
        )
        if destinations is not None:
            self.destinations = destinations

    def select_destination(self, chain_id: Optional[int]) -> None:
        self._reset_execution()
        self.selection.destination_chain_id = chain_id

    def set_amount(self, amount: str) -> None:
        self._reset_execution()
        self.selection.amount = amount

    def set_recipient(self, recipient: str) -> None:
        self._reset_execution()
        self.selection.recipient = recipient

    # =========================================================================
    # Plan & submit
    # =========================================================================

    def _intent(self) -> TransferIntent:
        s = self.selection
        return TransferIntent(
            environment=self.environment,
            origin_chain_id=s.origin_chain_id,
            destination_chain_id=s.destination_chain_id,
            token_key=s.token_key,
            amount=s.amount.strip(),
            recipient=s.recipient.strip(),
        )

    def preview(self) -> Optional[TransferPlan]:
        """Validate the current selections and build a plan; ``None`` on validation failure."""
        self.error = None
        self._reset_execution()
        intent = self._intent()
        try:
            plan = build_plan(intent)
            if not is_evm_address(intent.recipient):
                raise ValidationError(ErrorKind.INVALID_RECIPIENT, "Invalid EVM address")
        except BridgeportError as exc:
            self.error = exc
            return None
        self.plan = plan
        return plan

    async def submit(self, wallet: Wallet) -> Optional[ExecutionResult]:
        """Execute the previewed plan. Progress is mirrored into ``progress`` as it changes."""
        if self.plan is None:
            self.logger.debug("Submit ignored: no plan")
            return None
        if self.loading.submitting:
            self.logger.debug("Submit ignored: already submitting")
            return None

        plan = self.plan
        intent = self._intent()
        tokens: Sequence[Token] = list(self.tokens)

        self.error = None
        self.result = None
        self.loading.submitting = True
        generation = self.guard.current(Stage.EXECUTION)
        tracker = ProgressTracker()
        tracker.subscribe(lambda progress: self._on_progress(generation, progress))
        try:
            routes = await self.catalog.get_raw_routes(intent.environment, force_refresh=True)
            result = await self.executor.execute(plan, intent, wallet, routes, tokens, tracker=tracker)
        except BridgeportError as exc:
            if self.guard.is_current(Stage.EXECUTION, generation):
                self.error = exc
                if tracker.progress.error is None:
                    # Route refresh failed before the executor took over
                    self.progress = ExecutionProgress(error=exc.message)
            else:
                self.logger.info("Superseded submission failed: %s", exc.message)
            return None
        finally:
            if self.guard.is_current(Stage.EXECUTION, generation):
                self.loading.submitting = False

        if not self.guard.is_current(Stage.EXECUTION, generation):
            self.logger.info("Superseded submission finished with bridge tx %s", result.bridge_hash)
            return result
        self.result = result
        return result

    def on_progress(self, listener: Callable[[ExecutionProgress], None]) -> None:
        """Register a callback invoked with every progress snapshot during submit."""
        self._progress_listeners.append(listener)

    def _on_progress(self, generation: int, progress: ExecutionProgress) -> None:
        if not self.guard.is_current(Stage.EXECUTION, generation):
            return
        self.progress = progress
        for listener in self._progress_listeners:
            listener(progress)

    def snapshot(self) -> Dict[str, object]:
        s = self.selection
        return {
            "environment": self.environment.value,
            "chains": [c.chain_id for c in self.chains],
            "tokens": [t.key for t in self.tokens],
            "destinations": [c.chain_id for c in self.destinations],
            "selection": {
                "origin_chain_id": s.origin_chain_id,
                "token_key": s.token_key,
                "destination_chain_id": s.destination_chain_id,
                "amount": s.amount,
                "recipient": s.recipient,
            },
            "has_plan": self.plan is not None,
            "progress": self.progress.to_dict(),
            "error": self.error.to_dict() if self.error is not None else None,
        }
