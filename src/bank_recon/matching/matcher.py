"""
Candidate matcher: pairs each bank transaction with at most one ledger entry.
"""

from datetime import datetime
from typing import Optional, Sequence
import logging

from ..models.transaction import BankTransaction, LedgerEntry, MatchCandidate
from ..config import MatchingPolicy
from .strategies import AssignmentStrategy, build_strategy

logger = logging.getLogger(__name__)


class CandidateMatcher:
    """
    Runs an assignment strategy and writes the result onto the transactions.

    Every transaction's match fields are rewritten on each call, so matching
    the same inputs twice yields the same assignments. Ledger entries are
    only read.
    """

    def __init__(
        self,
        policy: MatchingPolicy,
        strategy: Optional[AssignmentStrategy] = None,
    ):
        """
        Initialize the matcher.

        Args:
            policy: Tolerances and account rules
            strategy: Assignment strategy; chosen from ``policy.assignment``
                when omitted
        """
        self.policy = policy
        self.strategy = strategy or build_strategy(policy)

    def match(
        self,
        transactions: Sequence[BankTransaction],
        entries: Sequence[LedgerEntry],
    ) -> list[MatchCandidate]:
        """
        Match bank transactions against ledger entries.

        Args:
            transactions: Bank transactions in statement order
            entries: Ledger entries in store order

        Returns:
            Matched pairs in statement order
        """
        logger.info(
            f"Matching {len(transactions)} bank transactions against "
            f"{len(entries)} ledger entries ({self.strategy.name})"
        )

        bank_dates: list[Optional[datetime]] = [txn.value_date for txn in transactions]
        ledger_dates: list[Optional[datetime]] = [entry.value_date for entry in entries]

        unreadable = sum(1 for d in bank_dates if d is None)
        if unreadable:
            logger.debug(f"{unreadable} bank transactions have unreadable dates")

        assignment = self.strategy.assign(transactions, bank_dates, entries, ledger_dates)

        pairs: list[MatchCandidate] = []
        for txn, l_idx in zip(transactions, assignment):
            if l_idx is None:
                txn.clear_match()
                continue
            entry = entries[l_idx]
            txn.mark_matched(entry.id)
            pairs.append(MatchCandidate(bank=txn, ledger=entry))

        logger.info(f"Matched {len(pairs)} of {len(transactions)} bank transactions")
        return pairs
