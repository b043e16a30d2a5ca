"""Bank statement reconciliation: match statement rows to ledger entries and flag anomalies."""

__version__ = "0.1.0"
