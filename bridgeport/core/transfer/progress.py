"""
Transfer Progress State Machine

Tracks the approval and bridge steps of one submission. Each step moves
idle -> running -> success | error and never leaves a terminal state. The
bridge step can only start once approval has succeeded, so a failed approval
structurally rules out the bridge transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Set


class StepStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


class ProgressStep(str, Enum):
    APPROVAL = "approval"
    BRIDGE = "bridge"


TERMINAL_STATUSES = frozenset({StepStatus.SUCCESS, StepStatus.ERROR})


class InvalidTransitionError(Exception):
    """Raised when a step is asked to move somewhere its current status forbids."""

    def __init__(
        self,
        step: ProgressStep,
        from_status: StepStatus,
        to_status: StepStatus,
        message: Optional[str] = None,
    ):
        self.step = step
        self.from_status = from_status
        self.to_status = to_status
        self.message = message or (
            f"Cannot move {step.value} from {from_status.value} to {to_status.value}"
        )
        super().__init__(self.message)


@dataclass(frozen=True)
class TxHashes:
    approval: Optional[str] = None
    bridge: Optional[str] = None


@dataclass(frozen=True)
class ExecutionProgress:
    """Immutable snapshot handed to renderers."""

    started: bool = False
    approval: StepStatus = StepStatus.IDLE
    bridge: StepStatus = StepStatus.IDLE
    done: bool = False
    tx_hashes: TxHashes = field(default_factory=TxHashes)
    error: Optional[str] = None

    def status_of(self, step: ProgressStep) -> StepStatus:
        return self.approval if step == ProgressStep.APPROVAL else self.bridge

    def to_dict(self) -> Dict[str, object]:
        return {
            "started": self.started,
            "approval": self.approval.value,
            "bridge": self.bridge.value,
            "done": self.done,
            "tx_hashes": {
                "approval": self.tx_hashes.approval,
                "bridge": self.tx_hashes.bridge,
            },
            "error": self.error,
        }


ProgressListener = Callable[[ExecutionProgress], None]


class ProgressTracker:
    """
    Owns the progress of exactly one submission.

    A retry must allocate a new tracker; once started, a tracker is never reset.
    """

    TRANSITIONS: Dict[StepStatus, Set[StepStatus]] = {
        StepStatus.IDLE: {StepStatus.RUNNING},
        StepStatus.RUNNING: {StepStatus.SUCCESS, StepStatus.ERROR},
        StepStatus.SUCCESS: set(),
        StepStatus.ERROR: set(),
    }

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._progress = ExecutionProgress()
        self._listeners: List[ProgressListener] = []

    @property
    def progress(self) -> ExecutionProgress:
        return self._progress

    @property
    def is_terminal(self) -> bool:
        p = self._progress
        if p.bridge in TERMINAL_STATUSES:
            return True
        return p.approval == StepStatus.ERROR

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)
        listener(self._progress)

    def _publish(self, progress: ExecutionProgress) -> None:
        self._progress = progress
        for listener in self._listeners:
            try:
                listener(progress)
            except Exception as e:
                self.logger.error(f"Progress listener error: {e}")

    def _move(self, step: ProgressStep, to_status: StepStatus, **changes: object) -> None:
        current = self._progress.status_of(step)
        if to_status not in self.TRANSITIONS[current]:
            raise InvalidTransitionError(step, current, to_status)
        self.logger.debug("Transfer step %s: %s -> %s", step.value, current.value, to_status.value)
        self._publish(replace(self._progress, **{step.value: to_status}, **changes))

    def start(self) -> None:
        if self._progress.started:
            raise InvalidTransitionError(
                ProgressStep.APPROVAL,
                self._progress.approval,
                self._progress.approval,
                message="Progress already started; allocate a new tracker to retry",
            )
        self._publish(replace(self._progress, started=True))

    def begin(self, step: ProgressStep) -> None:
        if not self._progress.started:
            raise InvalidTransitionError(step, StepStatus.IDLE, StepStatus.RUNNING, message="Progress not started")
        if step == ProgressStep.BRIDGE and self._progress.approval != StepStatus.SUCCESS:
            raise InvalidTransitionError(
                step,
                self._progress.bridge,
                StepStatus.RUNNING,
                message=f"Bridge cannot start while approval is {self._progress.approval.value}",
            )
        self._move(step, StepStatus.RUNNING)

    def skip_approval(self) -> None:
        """No approval transaction was needed; treat the step as already succeeded."""
        if self._progress.approval != StepStatus.IDLE:
            raise InvalidTransitionError(ProgressStep.APPROVAL, self._progress.approval, StepStatus.SUCCESS)
        self._publish(replace(self._progress, approval=StepStatus.SUCCESS))

    def record_hash(self, step: ProgressStep, tx_hash: str) -> None:
        if self._progress.status_of(step) != StepStatus.RUNNING:
            raise InvalidTransitionError(
                step,
                self._progress.status_of(step),
                StepStatus.RUNNING,
                message=f"Cannot record a hash for {step.value} outside of running",
            )
        hashes = replace(self._progress.tx_hashes, **{step.value: tx_hash})
        self._publish(replace(self._progress, tx_hashes=hashes))

    def succeed(self, step: ProgressStep) -> None:
        if step == ProgressStep.BRIDGE:
            self._move(step, StepStatus.SUCCESS, done=True)
        else:
            self._move(step, StepStatus.SUCCESS)

    def fail_step(self, step: ProgressStep, message: str) -> None:
        self._move(step, StepStatus.ERROR, done=False, error=message)

    def fail(self, message: str) -> None:
        """Mark every running step as error. Idle and terminal steps are left alone."""
        p = self._progress
        approval = StepStatus.ERROR if p.approval == StepStatus.RUNNING else p.approval
        bridge = StepStatus.ERROR if p.bridge == StepStatus.RUNNING else p.bridge
        self.logger.debug("Transfer failed: %s (approval=%s, bridge=%s)", message, approval.value, bridge.value)
        self._publish(replace(p, approval=approval, bridge=bridge, done=False, error=message))
