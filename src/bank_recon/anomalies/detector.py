"""
Anomaly detection over a matched statement.

Three independent passes, each producing one report section: duplicate
statement rows, ledger entries no transaction points at, and matched pairs
whose amounts disagree.
"""

from typing import Sequence
import logging

from ..models.transaction import AmountDiscrepancy, BankTransaction, LedgerEntry
from ..config import MatchingPolicy

logger = logging.getLogger(__name__)


class AnomalyDetector:
    """Runs the anomaly passes with the same policy the matcher used."""

    def __init__(self, policy: MatchingPolicy):
        self.policy = policy

    def find_duplicates(
        self, transactions: Sequence[BankTransaction]
    ) -> list[BankTransaction]:
        """
        Flag statement rows that repeat an earlier row.

        Rows are compared on (date, amount, description). The first row of
        each group is kept as the original and every later one is flagged,
        so N identical rows yield N - 1 duplicates. Flags are advisory: two
        identical rows can be two real payments.
        """
        first_seen: dict[tuple, int] = {}
        duplicates: list[BankTransaction] = []

        for idx, txn in enumerate(transactions):
            key = txn.duplicate_key
            if key in first_seen:
                duplicates.append(txn)
            else:
                first_seen[key] = idx

        if duplicates:
            logger.info(f"Found {len(duplicates)} duplicate bank transactions")
        return duplicates

    def find_missing_entries(
        self,
        transactions: Sequence[BankTransaction],
        entries: Sequence[LedgerEntry],
    ) -> list[LedgerEntry]:
        """
        Ledger entries that no bank transaction matched.

        With ``restrict_missing_to_cash_accounts`` only entries touching a
        cash or bank account are reported.
        """
        matched_ids = {txn.matched_entry_id for txn in transactions if txn.matched}

        missing = [entry for entry in entries if entry.id not in matched_ids]
        if self.policy.restrict_missing_to_cash_accounts:
            missing = [entry for entry in missing if self.policy.entry_touches_cash(entry)]

        logger.debug(f"{len(missing)} ledger entries without a bank transaction")
        return missing

    def find_amount_discrepancies(
        self,
        transactions: Sequence[BankTransaction],
        entries: Sequence[LedgerEntry],
    ) -> list[AmountDiscrepancy]:
        """Matched pairs whose amounts differ by more than ``amount_epsilon``."""
        by_id: dict[str, LedgerEntry] = {}
        for entry in entries:
            by_id.setdefault(entry.id, entry)

        discrepancies: list[AmountDiscrepancy] = []
        for txn in transactions:
            if not txn.matched:
                continue
            entry = by_id.get(txn.matched_entry_id)
            if entry is None:
                continue
            if abs(entry.amount - txn.magnitude) > self.policy.amount_epsilon:
                discrepancies.append(AmountDiscrepancy(bank=txn, ledger=entry))

        if discrepancies:
            logger.warning(
                f"{len(discrepancies)} matched pairs exceed the amount tolerance"
            )
        return discrepancies
