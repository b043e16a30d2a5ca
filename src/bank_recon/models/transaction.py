"""Data models for bank transactions, ledger entries and reconciliation results."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..utils.amounts import parse_amount
from ..utils.dates import parse_date

if TYPE_CHECKING:
    from ..config import MatchingPolicy


@dataclass
class BankTransaction:
    """
    One row of an externally supplied bank statement.

    Created by the statement parser; only the matcher changes it afterwards,
    through ``mark_matched`` and ``clear_match``.
    """

    # Session-local identifier ("bank_<row>"), stable within one run
    id: str

    # Trimmed date column as it appeared on the statement
    date: str

    description: str = ""

    # Signed: negative is an outflow
    amount: Decimal = Decimal("0")

    # Running balance, informational only
    balance: Decimal = Decimal("0")

    matched_entry_id: Optional[str] = None

    @property
    def matched(self) -> bool:
        """True when the transaction references a ledger entry."""
        return self.matched_entry_id is not None

    @property
    def value_date(self) -> Optional[datetime]:
        """Parsed statement date, or None when the column is unreadable."""
        return parse_date(self.date)

    @property
    def magnitude(self) -> Decimal:
        return abs(self.amount)

    @property
    def duplicate_key(self) -> tuple[str, Decimal, str]:
        return (self.date, self.amount, self.description)

    def mark_matched(self, entry_id: str) -> None:
        self.matched_entry_id = entry_id

    def clear_match(self) -> None:
        self.matched_entry_id = None


@dataclass(frozen=True)
class LedgerEntry:
    """
    Internally recorded double-entry bookkeeping record.

    Owned by the ledger store; read-only to the reconciliation core.
    """

    id: str
    date: Any
    description: str = ""
    debit_account: str = ""
    credit_account: str = ""

    # Unsigned magnitude
    amount: Decimal = Decimal("0")

    @property
    def value_date(self) -> Optional[datetime]:
        return parse_date(self.date)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LedgerEntry":
        """
        Build an entry from a store record.

        Accepts the store's camelCase keys (``debitAccount``) as well as
        snake_case ones (``debit_account``).
        """

        def pick(*keys: str, default: Any = "") -> Any:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        return cls(
            id=str(pick("id")),
            date=pick("date", default=None),
            description=str(pick("description")),
            debit_account=str(pick("debitAccount", "debit_account")),
            credit_account=str(pick("creditAccount", "credit_account")),
            amount=_to_decimal(pick("amount", default="0")),
        )


def _to_decimal(value: Any) -> Decimal:
    result = parse_amount(value)
    return Decimal("0") if result is None else result


@dataclass(frozen=True)
class MatchCandidate:
    """A bank transaction paired with the ledger entry it was matched to."""

    bank: BankTransaction
    ledger: LedgerEntry


@dataclass(frozen=True)
class AmountDiscrepancy:
    """A matched pair whose amounts differ by more than the tolerance."""

    bank: BankTransaction
    ledger: LedgerEntry

    @property
    def difference(self) -> Decimal:
        """Ledger amount minus bank magnitude."""
        return self.ledger.amount - self.bank.magnitude


@dataclass(frozen=True)
class ReconciliationReport:
    """
    Result of one reconciliation run.

    ``matched_transactions`` holds every statement transaction, in statement
    order, with its match fields populated; the other sections are the
    anomaly passes. Built once and never changed afterwards.
    """

    matched_transactions: tuple[BankTransaction, ...] = ()
    duplicates: tuple[BankTransaction, ...] = ()
    missing_entries: tuple[LedgerEntry, ...] = ()
    amount_discrepancies: tuple[AmountDiscrepancy, ...] = ()
    policy: Optional["MatchingPolicy"] = field(default=None, compare=False)
    generated_at: datetime = field(default_factory=datetime.now, compare=False)
