"""Custom exceptions for the reconciliation application."""


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class StatementParseError(ReconciliationError):
    """Error reading a bank statement file."""

    pass


class LedgerParseError(ReconciliationError):
    """Error reading a ledger export."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class SessionStateError(ReconciliationError):
    """Operation not allowed in the session's current state."""

    pass


class ReconciliationCancelled(ReconciliationError):
    """Run was cancelled between passes."""

    pass


class ReconciliationFailed(ReconciliationError):
    """Report requested from a session that ended in the failed state."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass
