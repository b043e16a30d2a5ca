"""
Command-line interface for the bank statement reconciliation tool.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import MatchingPolicy, ReconConfig, generate_default_config, load_config
from .models.transaction import ReconciliationReport
from .parsers.ledger_parser import LedgerParser
from .parsers.statement_parser import StatementParser
from .reports.excel_generator import ExcelReportGenerator
from .reports.summary import ReconciliationSummary
from .session import ReconciliationSession
from .utils.exceptions import ReconciliationError
from .utils.logging_config import setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__)
def main():
    """Bank Statement Reconciliation Tool."""
    pass


@main.command()
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option(
    "--date-window-hours", type=float, default=None, help="Override the date window in hours"
)
@click.option(
    "--amount-epsilon", type=str, default=None, help="Override the amount tolerance"
)
@click.option(
    "--require-cash-account/--any-account",
    default=None,
    help="Only match ledger entries that touch a cash or bank account",
)
@click.option(
    "--restrict-missing/--all-missing",
    default=None,
    help="Only report unmatched ledger entries that touch a cash or bank account",
)
@click.option(
    "--assignment",
    type=click.Choice(["greedy", "optimal"]),
    default=None,
    help="Assignment mode",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--dry-run", is_flag=True, help="Reconcile and show summary without generating report"
)
def reconcile(
    statement_file: Path,
    ledger_file: Path,
    config: Optional[Path],
    output: Optional[Path],
    date_window_hours: Optional[float],
    amount_epsilon: Optional[str],
    require_cash_account: Optional[bool],
    restrict_missing: Optional[bool],
    assignment: Optional[str],
    verbose: bool,
    dry_run: bool,
):
    """
    Reconcile a bank statement CSV with a ledger export.

    STATEMENT_FILE: Bank statement CSV (Date, Description, Amount, Balance)
    LEDGER_FILE: Ledger export CSV
    """
    try:
        recon_config = load_config(config)
        # --verbose wins over the configured level
        setup_logging(recon_config.logging, level=logging.DEBUG if verbose else None)

        recon_config.matching = _apply_policy_overrides(
            recon_config.matching,
            date_window_hours=date_window_hours,
            amount_epsilon=amount_epsilon,
            require_cash_account=require_cash_account,
            restrict_missing_to_cash_accounts=restrict_missing,
            assignment=assignment,
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Parsing bank statement...", total=None)
            transactions = StatementParser(recon_config).parse_file(statement_file)
            progress.update(task, completed=True)

            task = progress.add_task("Loading ledger export...", total=None)
            entries = LedgerParser(recon_config).parse_file(ledger_file)
            progress.update(task, completed=True)

            task = progress.add_task("Running reconciliation...", total=None)
            session = ReconciliationSession(entries, policy=recon_config.matching)
            session.reconcile(transactions)
            progress.update(task, completed=True)

        report = session.report

        _display_summary(ReconciliationSummary.from_report(report))
        _display_anomalies(report)

        if dry_run:
            console.print("\n[yellow]Dry run - no report generated[/yellow]")
            return

        if output is None:
            output = Path(_default_report_name(recon_config))

        report_path = ExcelReportGenerator(recon_config).generate_report(
            report,
            output,
            statement_name=statement_file.name,
            ledger_name=ledger_file.name,
        )
        console.print(f"\n[green]Report generated: {report_path}[/green]")

    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("parse-statement")
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_statement(statement_file: Path, config: Optional[Path]):
    """
    Parse a bank statement CSV and display its transactions.

    STATEMENT_FILE: Bank statement CSV (Date, Description, Amount, Balance)
    """
    try:
        recon_config = load_config(config)
        transactions = StatementParser(recon_config).parse_file(statement_file)
    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Bank Transactions: {statement_file.name}")
    table.add_column("ID")
    table.add_column("Date")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    table.add_column("Balance", justify="right")

    for txn in transactions[:20]:
        table.add_row(
            txn.id,
            txn.date or "-",
            _truncate(txn.description),
            f"{txn.amount:,.2f}",
            f"{txn.balance:,.2f}",
        )

    console.print(table)

    if len(transactions) > 20:
        console.print(f"\n... and {len(transactions) - 20} more transactions")

    console.print(f"\nTotal transactions: {len(transactions)}")


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _display_summary(summary: ReconciliationSummary) -> None:
    """Display reconciliation summary in console."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Bank Transactions", str(summary.total_count))
    table.add_row("Matched", f"{summary.matched_count}/{summary.total_count}")
    table.add_row("Match Rate", f"{summary.match_rate:.1f}%")
    table.add_row("Duplicates", str(summary.duplicate_count))
    table.add_row("Amount Discrepancies", str(summary.discrepancy_count))
    table.add_row("Missing Entries", str(summary.missing_count))

    console.print(table)


def _display_anomalies(report: ReconciliationReport) -> None:
    if report.duplicates:
        console.print(
            f"\n[red]Found {len(report.duplicates)} duplicate transactions "
            f"that need review.[/red]"
        )
        table = Table(title="Duplicate Transactions")
        table.add_column("ID")
        table.add_column("Date")
        table.add_column("Description")
        table.add_column("Amount", justify="right")
        for txn in report.duplicates:
            table.add_row(txn.id, txn.date, _truncate(txn.description), f"{txn.amount:,.2f}")
        console.print(table)

    if report.amount_discrepancies:
        table = Table(title="Amount Discrepancies")
        table.add_column("Bank ID")
        table.add_column("Entry ID")
        table.add_column("Difference", justify="right")
        for item in report.amount_discrepancies:
            table.add_row(item.bank.id, item.ledger.id, f"{item.difference:,.2f}")
        console.print(table)


def _apply_policy_overrides(policy: MatchingPolicy, **overrides: Any) -> MatchingPolicy:
    """Return a validated copy of the policy with non-None overrides applied."""
    values = policy.model_dump()
    values.update({key: value for key, value in overrides.items() if value is not None})
    try:
        if overrides.get("amount_epsilon") is not None:
            values["amount_epsilon"] = Decimal(overrides["amount_epsilon"])
        return MatchingPolicy.model_validate(values)
    except (ValueError, InvalidOperation) as e:
        raise click.BadParameter(str(e)) from e


def _default_report_name(config: ReconConfig) -> str:
    now = datetime.now()
    return config.output.excel.filename_template.format(
        date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
    )


def _truncate(text: str, width: int = 40) -> str:
    return text[:width] + "..." if len(text) > width else text


if __name__ == "__main__":
    main()
