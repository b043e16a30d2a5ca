"""Summary counters derived from a reconciliation report for display."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..models.transaction import ReconciliationReport


@dataclass(frozen=True)
class ReconciliationSummary:
    """Headline numbers shown next to a report."""

    matched_count: int
    total_count: int
    duplicate_count: int
    missing_count: int
    discrepancy_count: int
    total_inflow: Decimal
    total_outflow: Decimal
    period_start: Optional[date] = None
    period_end: Optional[date] = None

    @property
    def unmatched_count(self) -> int:
        return self.total_count - self.matched_count

    @property
    def match_rate(self) -> float:
        """Percentage of bank transactions matched."""
        if self.total_count == 0:
            return 0.0
        return (self.matched_count / self.total_count) * 100

    @property
    def anomaly_count(self) -> int:
        """Duplicates plus amount discrepancies."""
        return self.duplicate_count + self.discrepancy_count

    @classmethod
    def from_report(cls, report: ReconciliationReport) -> "ReconciliationSummary":
        transactions = report.matched_transactions
        dates = [t.value_date.date() for t in transactions if t.value_date is not None]

        return cls(
            matched_count=sum(1 for t in transactions if t.matched),
            total_count=len(transactions),
            duplicate_count=len(report.duplicates),
            missing_count=len(report.missing_entries),
            discrepancy_count=len(report.amount_discrepancies),
            total_inflow=sum((t.amount for t in transactions if t.amount > 0), Decimal("0")),
            total_outflow=sum((-t.amount for t in transactions if t.amount < 0), Decimal("0")),
            period_start=min(dates) if dates else None,
            period_end=max(dates) if dates else None,
        )
