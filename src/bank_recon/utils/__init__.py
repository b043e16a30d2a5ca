"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    StatementParseError,
    LedgerParseError,
    ConfigurationError,
    SessionStateError,
    ReconciliationCancelled,
    ReconciliationFailed,
    ReportGenerationError,
)
from .logging_config import setup_logging
from .dates import parse_date

__all__ = [
    "ReconciliationError",
    "StatementParseError",
    "LedgerParseError",
    "ConfigurationError",
    "SessionStateError",
    "ReconciliationCancelled",
    "ReconciliationFailed",
    "ReportGenerationError",
    "setup_logging",
    "parse_date",
]
