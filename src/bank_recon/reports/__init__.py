"""Report summaries and Excel export."""

from .summary import ReconciliationSummary
from .excel_generator import ExcelReportGenerator

__all__ = ["ReconciliationSummary", "ExcelReportGenerator"]
