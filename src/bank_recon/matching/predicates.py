"""
Match predicate between a bank transaction and a ledger entry.

A pair is a candidate when all three hold:
  1. the dates are at most ``date_window_hours`` apart (closed bound),
  2. ``|ledger.amount - |bank.amount||`` is strictly below ``amount_epsilon``,
  3. if ``require_cash_account`` is set, one side of the entry is a cash/bank
     account.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from ..models.transaction import BankTransaction, LedgerEntry
from ..config import MatchingPolicy


class MatchPredicate:
    """Evaluates the candidate rules for one policy."""

    def __init__(self, policy: MatchingPolicy):
        self.policy = policy
        self.window = timedelta(hours=policy.date_window_hours)

    def date_gap(
        self, bank_date: Optional[datetime], ledger_date: Optional[datetime]
    ) -> Optional[timedelta]:
        """Absolute date difference, or None if either date is unreadable."""
        if bank_date is None or ledger_date is None:
            return None
        return abs(ledger_date - bank_date)

    def within_date_window(
        self, bank_date: Optional[datetime], ledger_date: Optional[datetime]
    ) -> bool:
        gap = self.date_gap(bank_date, ledger_date)
        return gap is not None and gap <= self.window

    def amount_gap(self, bank_amount: Decimal, ledger_amount: Decimal) -> Decimal:
        return abs(ledger_amount - abs(bank_amount))

    def within_amount_tolerance(self, bank_amount: Decimal, ledger_amount: Decimal) -> bool:
        return self.amount_gap(bank_amount, ledger_amount) < self.policy.amount_epsilon

    def is_account_relevant(self, entry: LedgerEntry) -> bool:
        if not self.policy.require_cash_account:
            return True
        return self.policy.entry_touches_cash(entry)

    def accepts(
        self,
        bank: BankTransaction,
        bank_date: Optional[datetime],
        entry: LedgerEntry,
        ledger_date: Optional[datetime],
    ) -> bool:
        """Apply all rules using pre-parsed dates."""
        return (
            self.within_date_window(bank_date, ledger_date)
            and self.within_amount_tolerance(bank.amount, entry.amount)
            and self.is_account_relevant(entry)
        )

    def distance(
        self,
        bank: BankTransaction,
        bank_date: datetime,
        entry: LedgerEntry,
        ledger_date: datetime,
    ) -> float:
        """
        Normalised distance of an accepted pair, in [0, 1).

        Date gap over the window and amount gap over epsilon, weighted equally.
        """
        gap = self.date_gap(bank_date, ledger_date) or timedelta(0)
        window_seconds = self.window.total_seconds()
        date_part = gap.total_seconds() / window_seconds if window_seconds else 0.0
        amount_part = float(
            self.amount_gap(bank.amount, entry.amount) / self.policy.amount_epsilon
        )
        return 0.5 * date_part + 0.5 * amount_part


def is_match_candidate(
    bank: BankTransaction, entry: LedgerEntry, policy: MatchingPolicy
) -> bool:
    """Check a single pair, parsing both dates."""
    return MatchPredicate(policy).accepts(bank, bank.value_date, entry, entry.value_date)
