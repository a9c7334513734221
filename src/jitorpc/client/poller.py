"""
Status Poller - bounded polling until a terminal state.

One generic loop (attempt cap x fixed interval x classifier) serves both
the bundle path and the single-signature path. Query errors consume an
attempt but never abort the loop. Running out of attempts yields an
UNKNOWN outcome, not an exception.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from ..errors import JitoError
from ..utils import explorer_url
from .bundles import BundleService
from .ledger import LedgerClient
from .models import BundleStatus, ConfirmationStatus, SignatureStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CONFIRMATION_THRESHOLD = 27


# ---------------------------------------------------------------------------
# Policy / verdicts / outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PollPolicy:
    """Attempt cap and inter-attempt delay. Worst-case wait ~ max_attempts x interval."""
    max_attempts: int
    interval: float

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got: {self.max_attempts}")
        if self.interval < 0:
            raise ValueError(f"interval must be >= 0, got: {self.interval}")

    @property
    def worst_case_seconds(self) -> float:
        return self.max_attempts * self.interval


BUNDLE_POLICY = PollPolicy(max_attempts=60, interval=5.0)
SIGNATURE_POLICY = PollPolicy(max_attempts=120, interval=1.0)


class VerdictKind(enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class Verdict:
    kind: VerdictKind
    detail: str = ""

    @property
    def terminal(self) -> bool:
        return self.kind is not VerdictKind.PENDING


class PollState(enum.Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    UNEXPECTED = "unexpected"
    UNKNOWN = "unknown"
    CANCELLED = "cancelled"


_TERMINAL_STATES = {
    VerdictKind.SUCCESS: PollState.SUCCEEDED,
    VerdictKind.FAILURE: PollState.FAILED,
    VerdictKind.UNEXPECTED: PollState.UNEXPECTED,
}


@dataclass(frozen=True)
class PollOutcome(Generic[T]):
    """
    Final report of a poll loop.

    Attributes:
        state: Terminal classification (UNKNOWN when attempts ran out)
        attempts: Number of queries issued
        observation: Last successfully queried value (may be None)
        detail: Human-readable summary from the classifier
        last_error: Last query error, if any
    """
    state: PollState
    attempts: int
    observation: Optional[T] = None
    detail: str = ""
    last_error: Optional[JitoError] = None

    @property
    def succeeded(self) -> bool:
        return self.state is PollState.SUCCEEDED


# ---------------------------------------------------------------------------
# Generic poller
# ---------------------------------------------------------------------------


class Poller(Generic[T]):
    """
    Bounded, synchronous poll loop.

    Each attempt waits ``policy.interval`` and then calls ``query``. A
    ``JitoError`` from the query is logged and counts as an attempt. The
    classifier decides whether the observation is terminal.

    Args:
        query: Returns the current observation (None = nothing visible yet)
        classify: Maps an observation to a Verdict
        policy: Attempt cap and interval
        sleep: Delay function (tests inject a fake clock)
        label: Name used in log lines
    """

    def __init__(
        self,
        query: Callable[[], Optional[T]],
        classify: Callable[[Optional[T]], Verdict],
        policy: PollPolicy,
        *,
        sleep: Callable[[float], None] = time.sleep,
        label: str = "poll",
    ) -> None:
        self._query = query
        self._classify = classify
        self._policy = policy
        self._sleep = sleep
        self._label = label

    @property
    def policy(self) -> PollPolicy:
        return self._policy

    def _wait(self, cancel: Optional[threading.Event]) -> bool:
        """Sleep one interval. Returns True if cancellation was requested."""
        if cancel is None:
            self._sleep(self._policy.interval)
            return False
        return cancel.wait(self._policy.interval)

    def run(self, cancel: Optional[threading.Event] = None) -> PollOutcome[T]:
        """
        Poll until a terminal verdict, cancellation, or attempt exhaustion.

        Args:
            cancel: Optional event; when set, the loop stops before the next query
        """
        observation: Optional[T] = None
        last_error: Optional[JitoError] = None
        attempts = 0

        for attempt in range(1, self._policy.max_attempts + 1):
            if self._wait(cancel):
                logger.info("%s: cancelled before attempt %d", self._label, attempt)
                return PollOutcome(
                    PollState.CANCELLED, attempts, observation, "Polling cancelled", last_error
                )

            attempts = attempt
            try:
                current = self._query()
            except JitoError as exc:
                last_error = exc
                logger.warning("%s: attempt %d failed: %s", self._label, attempt, exc)
                continue

            verdict = self._classify(current)
            if current is not None:
                observation = current
            logger.info("%s: attempt %d: %s", self._label, attempt, verdict.detail or verdict.kind.value)

            if verdict.terminal:
                return PollOutcome(
                    _TERMINAL_STATES[verdict.kind], attempts, observation, verdict.detail, last_error
                )

        logger.warning(
            "%s: maximum polling attempts (%d) reached, final status unknown",
            self._label,
            self._policy.max_attempts,
        )
        return PollOutcome(
            PollState.UNKNOWN,
            attempts,
            observation,
            "Maximum polling attempts reached. Final status unknown.",
            last_error,
        )


# ---------------------------------------------------------------------------
# Classifiers
# ---------------------------------------------------------------------------


def classify_bundle_status(status: Optional[BundleStatus]) -> Verdict:
    """
    Classify a bundle status record.

    ``confirmed`` is non-terminal: only ``finalized`` ends the
    loop successfully or with an execution error.
    """
    if status is None:
        return Verdict(VerdictKind.PENDING, "No bundle status available")

    state = status.confirmation_status
    if state is ConfirmationStatus.PROCESSED:
        return Verdict(VerdictKind.PENDING, "Bundle has been processed by the cluster")
    if state is ConfirmationStatus.CONFIRMED:
        return Verdict(VerdictKind.PENDING, "Bundle has been confirmed by the cluster")
    if state is ConfirmationStatus.FINALIZED:
        if status.err is None:
            txs = ", ".join(status.transactions) or "none"
            return Verdict(
                VerdictKind.SUCCESS,
                f"Bundle finalized in slot {status.slot}; transactions: {txs}",
            )
        return Verdict(
            VerdictKind.FAILURE,
            f"Bundle finalized in slot {status.slot} with error: {status.err}",
        )
    return Verdict(
        VerdictKind.UNEXPECTED,
        f"Unexpected status: {status.raw_status!r}. Please check the bundle manually.",
    )


def classify_signature_status(
    status: Optional[SignatureStatus],
    threshold: int = DEFAULT_CONFIRMATION_THRESHOLD,
) -> Verdict:
    """
    Classify a single transaction's status.

    Terminal on the first error, or once ``confirmations`` reaches
    ``threshold``. A rooted transaction reports ``confirmations: null``
    with status ``finalized``, which also counts as reached.
    """
    if status is None:
        return Verdict(VerdictKind.PENDING, "Transaction status not available yet")
    if status.err is not None:
        return Verdict(VerdictKind.FAILURE, f"Transaction failed: {status.err}")
    if status.confirmations is None:
        if status.confirmation_status == "finalized":
            return Verdict(VerdictKind.SUCCESS, f"Transaction finalized in slot {status.slot}")
        return Verdict(VerdictKind.PENDING, f"Transaction seen in slot {status.slot}")
    if status.confirmations >= threshold:
        return Verdict(
            VerdictKind.SUCCESS,
            f"Transaction confirmed with {status.confirmations} confirmations",
        )
    return Verdict(
        VerdictKind.PENDING,
        f"Confirmations: {status.confirmations}/{threshold} (slot {status.slot})",
    )


# ---------------------------------------------------------------------------
# Trackers
# ---------------------------------------------------------------------------


class BundleTracker:
    """Polls one bundle ID until it is finalized (or the policy gives up)."""

    def __init__(
        self,
        service: BundleService,
        policy: PollPolicy = BUNDLE_POLICY,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._service = service
        self._policy = policy
        self._sleep = sleep

    def wait(self, bundle_id: str, cancel: Optional[threading.Event] = None) -> PollOutcome[BundleStatus]:
        def query() -> Optional[BundleStatus]:
            return self._service.get_bundle_statuses([bundle_id]).find(bundle_id)

        poller: Poller[BundleStatus] = Poller(
            query,
            classify_bundle_status,
            self._policy,
            sleep=self._sleep,
            label=f"bundle {bundle_id}",
        )
        return poller.run(cancel)


class SignatureTracker:
    """Polls one transaction signature until it has enough confirmations."""

    def __init__(
        self,
        ledger: LedgerClient,
        policy: PollPolicy = SIGNATURE_POLICY,
        *,
        threshold: int = DEFAULT_CONFIRMATION_THRESHOLD,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if threshold < 1:
            raise ValueError(f"threshold must be >= 1, got: {threshold}")
        self._ledger = ledger
        self._policy = policy
        self._threshold = threshold
        self._sleep = sleep

    def wait(self, signature: str, cancel: Optional[threading.Event] = None) -> PollOutcome[SignatureStatus]:
        def query() -> Optional[SignatureStatus]:
            return self._ledger.get_signature_statuses([signature])[0]

        def classify(status: Optional[SignatureStatus]) -> Verdict:
            return classify_signature_status(status, self._threshold)

        poller: Poller[SignatureStatus] = Poller(
            query,
            classify,
            self._policy,
            sleep=self._sleep,
            label=f"signature {signature[:16]}",
        )
        return poller.run(cancel)


def transaction_links(outcome: PollOutcome[Any]) -> list[str]:
    """Explorer links for the transactions in a bundle outcome."""
    observation = outcome.observation
    if isinstance(observation, BundleStatus):
        return [explorer_url(tx) for tx in observation.transactions]
    if isinstance(observation, SignatureStatus):
        return [explorer_url(observation.signature)]
    return []
