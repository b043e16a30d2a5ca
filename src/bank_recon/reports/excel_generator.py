"""
Excel report generator for reconciliation results.
Writes the report sections to a multi-sheet workbook.
"""

from pathlib import Path
from typing import Any, Optional, Sequence
import logging

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE, Cell
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.utils.exceptions import IllegalCharacterError
from openpyxl.worksheet.worksheet import Worksheet

from ..models.transaction import ReconciliationReport
from ..config import ReconConfig, SheetConfig
from ..utils.exceptions import ReportGenerationError
from .summary import ReconciliationSummary

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
WARNING_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
# Leading characters that spreadsheet applications evaluate as a formula
FORMULA_PREFIXES = ("=", "+", "-", "@")


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with one sheet per section."""

    def __init__(self, config: Optional[ReconConfig] = None):
        self.config = config or ReconConfig()
        self.sheet_config = self.config.output.sheets

    def generate_report(
        self,
        report: ReconciliationReport,
        output_path: Path,
        statement_name: str = "",
        ledger_name: str = "",
    ) -> Path:
        """
        Write the report to an .xlsx file.

        Args:
            report: Completed reconciliation report
            output_path: Destination file
            statement_name: Statement file name shown on the summary sheet
            ledger_name: Ledger source name shown on the summary sheet

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        summary = ReconciliationSummary.from_report(report)
        sheets = self.sheet_config

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        try:
            if sheets.summary.enabled:
                self._create_summary_sheet(
                    wb, sheets.summary, report, summary, statement_name, ledger_name
                )
            if sheets.transactions.enabled:
                self._create_transactions_sheet(wb, sheets.transactions, report)
            if sheets.duplicates.enabled:
                self._create_duplicates_sheet(wb, sheets.duplicates, report)
            if sheets.missing_entries.enabled:
                self._create_missing_sheet(wb, sheets.missing_entries, report)
            if sheets.amount_discrepancies.enabled:
                self._create_discrepancy_sheet(wb, sheets.amount_discrepancies, report)

            if not wb.sheetnames:
                # openpyxl refuses to save a workbook without sheets
                wb.create_sheet(sheets.summary.name)

            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except (OSError, ValueError, IllegalCharacterError) as e:
            raise ReportGenerationError(f"Cannot write report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(
        self,
        wb: Workbook,
        sheet: SheetConfig,
        report: ReconciliationReport,
        summary: ReconciliationSummary,
        statement_name: str,
        ledger_name: str,
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(sheet.name)

        ws["A1"] = "Bank Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        period = "-"
        if summary.period_start and summary.period_end:
            period = f"{summary.period_start} to {summary.period_end}"

        policy = report.policy
        sections: list[tuple[str, list[tuple[str, Any]]]] = [
            (
                "Sources",
                [
                    ("Bank Statement:", statement_name or "-"),
                    ("Ledger:", ledger_name or "-"),
                    ("Generated At:", report.generated_at.strftime("%Y-%m-%d %H:%M:%S")),
                    ("Statement Period:", period),
                ],
            ),
            (
                "Matching",
                [
                    ("Bank Transactions:", summary.total_count),
                    ("Matched:", summary.matched_count),
                    ("Unmatched:", summary.unmatched_count),
                    ("Match Rate:", f"{summary.match_rate:.1f}%"),
                ],
            ),
            (
                "Anomalies",
                [
                    ("Duplicates:", summary.duplicate_count),
                    ("Amount Discrepancies:", summary.discrepancy_count),
                    ("Missing Entries:", summary.missing_count),
                ],
            ),
            (
                "Amounts",
                [
                    ("Total Inflow:", f"${summary.total_inflow:,.2f}"),
                    ("Total Outflow:", f"${summary.total_outflow:,.2f}"),
                ],
            ),
        ]
        if policy is not None:
            sections.append(
                (
                    "Policy",
                    [
                        ("Date Window (hours):", policy.date_window_hours),
                        ("Amount Tolerance:", str(policy.amount_epsilon)),
                        ("Assignment:", policy.assignment.value),
                        ("Cash Keywords:", ", ".join(policy.cash_keywords)),
                    ],
                )
            )

        row = 3
        for title, items in sections:
            ws[f"A{row}"] = title
            ws[f"A{row}"].font = Font(bold=True)
            row += 1
            for label, value in items:
                ws[f"A{row}"] = label
                _set_cell(ws, row, 2, value)
                row += 1
            row += 1

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_transactions_sheet(
        self, wb: Workbook, sheet: SheetConfig, report: ReconciliationReport
    ) -> None:
        """All bank transactions with their match status."""
        rows = [
            [
                txn.id,
                txn.date,
                txn.description,
                float(txn.amount),
                float(txn.balance),
                "Matched" if txn.matched else "Unmatched",
                txn.matched_entry_id or "",
            ]
            for txn in report.matched_transactions
        ]
        fills = [
            MATCH_FILL if txn.matched else UNMATCHED_FILL
            for txn in report.matched_transactions
        ]
        headers = ["ID", "Date", "Description", "Amount", "Balance", "Status", "Ledger Entry"]
        self._write_table(wb.create_sheet(sheet.name), headers, rows, fills)

    def _create_duplicates_sheet(
        self, wb: Workbook, sheet: SheetConfig, report: ReconciliationReport
    ) -> None:
        rows = [
            [txn.id, txn.date, txn.description, float(txn.amount)]
            for txn in report.duplicates
        ]
        headers = ["ID", "Date", "Description", "Amount"]
        self._write_table(
            wb.create_sheet(sheet.name), headers, rows, [WARNING_FILL] * len(rows)
        )

    def _create_missing_sheet(
        self, wb: Workbook, sheet: SheetConfig, report: ReconciliationReport
    ) -> None:
        rows = [
            [
                entry.id,
                str(entry.date or ""),
                entry.description,
                entry.debit_account,
                entry.credit_account,
                float(entry.amount),
            ]
            for entry in report.missing_entries
        ]
        headers = ["Entry ID", "Date", "Description", "Debit Account", "Credit Account", "Amount"]
        self._write_table(
            wb.create_sheet(sheet.name), headers, rows, [UNMATCHED_FILL] * len(rows)
        )

    def _create_discrepancy_sheet(
        self, wb: Workbook, sheet: SheetConfig, report: ReconciliationReport
    ) -> None:
        rows = [
            [
                item.bank.id,
                item.bank.date,
                float(item.bank.amount),
                item.ledger.id,
                str(item.ledger.date or ""),
                float(item.ledger.amount),
                float(item.difference),
            ]
            for item in report.amount_discrepancies
        ]
        headers = [
            "Bank ID",
            "Bank Date",
            "Bank Amount",
            "Entry ID",
            "Entry Date",
            "Entry Amount",
            "Difference",
        ]
        self._write_table(
            wb.create_sheet(sheet.name), headers, rows, [WARNING_FILL] * len(rows)
        )

    def _write_table(
        self,
        ws: Worksheet,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
        fills: Sequence[PatternFill],
    ) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

        for row_num, (row_data, fill) in enumerate(zip(rows, fills), start=2):
            for col, value in enumerate(row_data, start=1):
                cell = _set_cell(ws, row_num, col, value)
                cell.border = THIN_BORDER
                cell.fill = fill

        self._auto_fit_columns(ws)

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            column = column_cells[0].column_letter
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            ws.column_dimensions[column].width = min(max_length + 2, 50)


def _set_cell(ws: Worksheet, row: int, column: int, value: Any) -> Cell:
    """
    Write a value, storing strings as literal text.

    openpyxl treats strings beginning with "=" as formulas and rejects
    control characters, so statement text is cleaned and pinned to the
    string type before it reaches the workbook.
    """
    if not isinstance(value, str):
        return ws.cell(row=row, column=column, value=value)

    text = ILLEGAL_CHARACTERS_RE.sub("", value)
    cell = ws.cell(row=row, column=column, value=text)
    cell.data_type = "s"
    if text.startswith(FORMULA_PREFIXES):
        cell.quotePrefix = True
    return cell
