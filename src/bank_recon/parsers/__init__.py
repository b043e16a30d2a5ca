"""Parsers for bank statements and ledger exports."""

from .statement_parser import StatementParser
from .ledger_parser import LedgerParser

__all__ = ["StatementParser", "LedgerParser"]
