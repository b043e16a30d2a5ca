"""
Ledger export parser.
Loads ledger entries from a CSV export of the ledger store.
"""

from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional
import logging

import pandas as pd

from ..models.transaction import LedgerEntry
from ..config import ReconConfig
from ..utils.amounts import parse_amount
from ..utils.exceptions import LedgerParseError

logger = logging.getLogger(__name__)


class LedgerParser:
    """
    Parser for ledger store CSV exports.

    Column names are taken from ``input.ledger.column_mappings``. Amounts are
    stored as magnitudes; rows without an id get ``ledger_<row>``.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        self.config = config or ReconConfig()
        self.ledger_config = self.config.input.ledger
        self.column_mappings = self.ledger_config.column_mappings

    def parse_file(self, file_path: Path) -> list[LedgerEntry]:
        """
        Parse a ledger CSV export.

        Args:
            file_path: Path to the CSV file

        Returns:
            Ledger entries in file order

        Raises:
            LedgerParseError: If the file cannot be read
        """
        logger.info(f"Parsing ledger export: {file_path}")

        try:
            df = pd.read_csv(
                file_path,
                encoding=self.ledger_config.encoding,
                delimiter=self.ledger_config.delimiter,
                dtype=str,
                keep_default_na=False,
            )
        except pd.errors.EmptyDataError:
            logger.warning(f"Ledger export is empty: {file_path}")
            return []
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            logger.error(f"Failed to read ledger export: {e}")
            raise LedgerParseError(f"Failed to read ledger export: {e}") from e

        entries = self._process_dataframe(df)
        logger.info(f"Loaded {len(entries)} ledger entries")

        return entries

    def parse_records(self, records: Iterable[Mapping[str, Any]]) -> list[LedgerEntry]:
        """Build entries from in-memory store records."""
        return [LedgerEntry.from_mapping(record) for record in records]

    def _process_dataframe(self, df: pd.DataFrame) -> list[LedgerEntry]:
        missing = [
            column
            for key, column in self.column_mappings.items()
            if key in ("date", "amount") and column not in df.columns
        ]
        if missing:
            raise LedgerParseError(f"Ledger export is missing columns: {', '.join(missing)}")

        return [self._normalize_row(row, int(idx)) for idx, row in df.iterrows()]

    def _normalize_row(self, row: pd.Series, idx: int) -> LedgerEntry:
        def column(key: str) -> str:
            name = self.column_mappings.get(key, key)
            value = row.get(name, "")
            return str(value).strip() if value is not None else ""

        entry_id = column("id") or f"ledger_{idx}"

        return LedgerEntry(
            id=entry_id,
            date=column("date") or None,
            description=column("description"),
            debit_account=column("debit_account"),
            credit_account=column("credit_account"),
            amount=self._parse_amount(column("amount"), idx),
        )

    def _parse_amount(self, raw: str, idx: int) -> Decimal:
        if not raw.strip():
            return Decimal("0")
        value = parse_amount(raw, strip_commas=True)
        if value is None:
            logger.warning(f"Ledger row {idx}: unusable amount {raw!r}, using 0")
            return Decimal("0")
        return value.copy_abs()
