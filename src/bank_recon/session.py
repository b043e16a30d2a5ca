"""
Reconciliation session.

One session reconciles one statement against a ledger snapshot:

    PENDING -> PROCESSING -> COMPLETED
    PENDING -> PROCESSING -> FAILED

Normalisation, matching and the three anomaly passes run synchronously
inside PROCESSING. A failure or cancellation ends the session in FAILED with
the causing error kept on the outcome.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence
import logging

from .models.transaction import BankTransaction, LedgerEntry, ReconciliationReport
from .config import MatchingPolicy
from .parsers.statement_parser import StatementParser
from .matching.matcher import CandidateMatcher
from .anomalies.detector import AnomalyDetector
from .utils.exceptions import (
    ReconciliationCancelled,
    ReconciliationFailed,
    SessionStateError,
)

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle state of a reconciliation session."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class SessionOutcome:
    """Current state plus its payload: a report when completed, an error when failed."""

    state: SessionState
    report: Optional[ReconciliationReport] = None
    error: Optional[BaseException] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (SessionState.COMPLETED, SessionState.FAILED)


class CancellationToken:
    """Cooperative cancellation flag, checked between passes."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self, stage: str) -> None:
        if self._cancelled:
            raise ReconciliationCancelled(f"Reconciliation cancelled before {stage}")


class ReconciliationSession:
    """
    Owns the state machine and assembles the report.

    The ledger entries are copied into a tuple on construction and never
    modified.
    """

    def __init__(
        self,
        ledger_entries: Iterable[LedgerEntry],
        policy: Optional[MatchingPolicy] = None,
        parser: Optional[StatementParser] = None,
        cancel_token: Optional[CancellationToken] = None,
    ):
        """
        Initialize a pending session.

        Args:
            ledger_entries: Ledger snapshot to reconcile against
            policy: Matching policy (defaults when omitted)
            parser: Statement parser used by ``load_statement``
            cancel_token: Optional token checked between passes
        """
        self.ledger_entries: tuple[LedgerEntry, ...] = tuple(ledger_entries)
        self.policy = policy or MatchingPolicy()
        self.parser = parser or StatementParser()
        self.cancel_token = cancel_token or CancellationToken()

        self.matcher = CandidateMatcher(self.policy)
        self.detector = AnomalyDetector(self.policy)

        self.transactions: list[BankTransaction] = []
        self.history: list[SessionState] = []
        self._outcome = SessionOutcome(SessionState.PENDING)
        self.history.append(SessionState.PENDING)

    @property
    def outcome(self) -> SessionOutcome:
        return self._outcome

    @property
    def state(self) -> SessionState:
        return self._outcome.state

    @property
    def report(self) -> ReconciliationReport:
        """
        The completed report.

        Raises:
            ReconciliationFailed: If the run failed (chained to the cause)
            SessionStateError: If the run has not completed yet
        """
        if self.state is SessionState.FAILED:
            raise ReconciliationFailed(
                f"Reconciliation failed: {self._outcome.error}"
            ) from self._outcome.error
        if self._outcome.report is None:
            raise SessionStateError(f"No report available in state {self.state.value}")
        return self._outcome.report

    def load_statement(self, content: str) -> SessionOutcome:
        """Parse statement text and reconcile it."""
        self._begin()
        return self._run(lambda: self.parser.parse_text(content))

    def reconcile(self, transactions: Sequence[BankTransaction]) -> SessionOutcome:
        """
        Reconcile already-parsed bank transactions.

        The session works on copies, so the caller's objects and any other
        session's report are never touched.
        """
        self._begin()
        return self._run(lambda: [replace(txn) for txn in transactions])

    def _begin(self) -> None:
        if self.state is not SessionState.PENDING:
            raise SessionStateError(
                f"Session already {self.state.value}; start a new session per statement"
            )
        self._transition(SessionOutcome(SessionState.PROCESSING))

    def _run(self, load: Callable[[], list[BankTransaction]]) -> SessionOutcome:
        try:
            self.transactions = load()
            report = self._process(self.transactions)
        except Exception as e:
            if isinstance(e, ReconciliationCancelled):
                logger.warning(str(e))
            else:
                logger.exception("Reconciliation failed")
            self._transition(SessionOutcome(SessionState.FAILED, error=e))
        else:
            self._transition(SessionOutcome(SessionState.COMPLETED, report=report))
        return self._outcome

    def _process(self, transactions: list[BankTransaction]) -> ReconciliationReport:
        token = self.cancel_token

        token.raise_if_cancelled("matching")
        self.matcher.match(transactions, self.ledger_entries)

        token.raise_if_cancelled("duplicate detection")
        duplicates = self.detector.find_duplicates(transactions)

        token.raise_if_cancelled("missing entry detection")
        missing = self.detector.find_missing_entries(transactions, self.ledger_entries)

        token.raise_if_cancelled("amount discrepancy detection")
        discrepancies = self.detector.find_amount_discrepancies(
            transactions, self.ledger_entries
        )

        return ReconciliationReport(
            matched_transactions=tuple(transactions),
            duplicates=tuple(duplicates),
            missing_entries=tuple(missing),
            amount_discrepancies=tuple(discrepancies),
            policy=self.policy,
        )

    def _transition(self, outcome: SessionOutcome) -> None:
        logger.debug(f"Session {self.state.value} -> {outcome.state.value}")
        self._outcome = outcome
        self.history.append(outcome.state)
