"""
Bank statement CSV parser.
Turns raw statement text into BankTransaction records without rejecting rows.
"""

from decimal import Decimal
from pathlib import Path
from typing import Optional
import logging

from ..models.transaction import BankTransaction
from ..config import ReconConfig, StatementInputConfig
from ..utils.amounts import parse_amount
from ..utils.exceptions import StatementParseError

logger = logging.getLogger(__name__)

# Fixed column order: Date, Description, Amount, Balance
DATE_COLUMN = 0
DESCRIPTION_COLUMN = 1
AMOUNT_COLUMN = 2
BALANCE_COLUMN = 3


class StatementParser:
    """
    Parser for four-column bank statement CSV files.

    The first line is always treated as a header and blank lines are
    skipped. Fields are split on the delimiter with no quoting or escaping
    support, so a delimiter inside a description shifts the remaining
    columns; that is a known limitation of the format, not something the
    parser tries to repair. Malformed numbers become zero and the row is
    still kept.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object (defaults when omitted)
        """
        self.config = config or ReconConfig()
        self.statement_config: StatementInputConfig = self.config.input.statement

    def parse_file(self, file_path: Path) -> list[BankTransaction]:
        """
        Read a statement file and return its transactions.

        Args:
            file_path: Path to the CSV file

        Returns:
            Transactions in file order

        Raises:
            StatementParseError: If the file cannot be read or decoded
        """
        logger.info(f"Parsing bank statement: {file_path}")

        try:
            with open(file_path, "r", encoding=self.statement_config.encoding) as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read statement file: {e}")
            raise StatementParseError(f"Failed to read statement file: {e}") from e

        return self.parse_text(content)

    def parse_text(self, content: str) -> list[BankTransaction]:
        """
        Parse statement text. Never raises on row content.

        Args:
            content: Full text of the statement including its header line

        Returns:
            Transactions in input order, ids ``bank_0``, ``bank_1``, ...
        """
        lines = content.split("\n")[1:]
        rows = [line for line in lines if line.strip()]

        transactions = [self._parse_row(line, idx) for idx, line in enumerate(rows)]
        logger.info(f"Extracted {len(transactions)} transactions from statement")

        return transactions

    def _parse_row(self, line: str, idx: int) -> BankTransaction:
        values = [value.strip() for value in line.split(self.statement_config.delimiter)]

        return BankTransaction(
            id=f"bank_{idx}",
            date=_field(values, DATE_COLUMN),
            description=_field(values, DESCRIPTION_COLUMN),
            amount=self._parse_amount(_field(values, AMOUNT_COLUMN), idx, "amount"),
            balance=self._parse_amount(_field(values, BALANCE_COLUMN), idx, "balance"),
        )

    def _parse_amount(self, raw: str, idx: int, column: str) -> Decimal:
        """
        Parse a numeric column, falling back to zero.

        Args:
            raw: Trimmed field text
            idx: Row index, for logging
            column: Column name, for logging

        Returns:
            Decimal value, ``Decimal("0")`` when missing, malformed or out of range
        """
        if not raw:
            return Decimal("0")

        value = parse_amount(raw)
        if value is None:
            logger.debug(f"Row {idx}: unusable {column} {raw!r}, using 0")
            return Decimal("0")
        return value


def _field(values: list[str], index: int) -> str:
    return values[index] if index < len(values) else ""
