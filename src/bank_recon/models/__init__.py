"""Data models for reconciliation."""

from .transaction import (
    BankTransaction,
    LedgerEntry,
    MatchCandidate,
    AmountDiscrepancy,
    ReconciliationReport,
)

__all__ = [
    "BankTransaction",
    "LedgerEntry",
    "MatchCandidate",
    "AmountDiscrepancy",
    "ReconciliationReport",
]
