from decimal import Decimal

import pytest

from bank_recon.config import ReconConfig
from bank_recon.parsers import StatementParser
from bank_recon.utils.exceptions import StatementParseError


@pytest.fixture
def parser():
    return StatementParser()


def test_header_and_blank_lines_are_skipped(parser, statement_text):
    transactions = parser.parse_text(statement_text)

    assert [t.id for t in transactions] == ["bank_0", "bank_1"]
    assert transactions[0].date == "2024-07-01"
    assert transactions[0].description == "Vendor X"
    assert transactions[0].amount == Decimal("-120.00")
    assert transactions[0].balance == Decimal("880.00")
    assert transactions[1].description == "Client Payment"


def test_new_transactions_are_unmatched(parser, statement_text):
    for txn in parser.parse_text(statement_text):
        assert txn.matched is False
        assert txn.matched_entry_id is None


def test_fields_are_trimmed_and_crlf_tolerated(parser):
    content = "Date,Description,Amount,Balance\r\n 2024-07-01 ,  Rent  , -500 , 1000 \r\n"

    (txn,) = parser.parse_text(content)

    assert txn.date == "2024-07-01"
    assert txn.description == "Rent"
    assert txn.amount == Decimal("-500")
    assert txn.balance == Decimal("1000")


def test_malformed_numbers_become_zero(parser):
    content = "Date,Description,Amount,Balance\n2024-07-01,Fee,abc,NaN\n"

    (txn,) = parser.parse_text(content)

    assert txn.amount == Decimal("0")
    assert txn.balance == Decimal("0")


def test_out_of_range_amounts_become_zero(parser):
    content = (
        "Date,Description,Amount,Balance\n"
        "2024-07-01,Fee,1E+1000000,-1E+1000000\n"
        "2024-07-02,Fee,Infinity,1000000000000000\n"
    )

    first, second = parser.parse_text(content)

    assert first.amount == Decimal("0")
    assert first.balance == Decimal("0")
    assert second.amount == Decimal("0")
    assert second.balance == Decimal("0")


def test_short_rows_are_kept_with_defaults(parser):
    content = "Date,Description,Amount,Balance\n2024-07-01\n"

    (txn,) = parser.parse_text(content)

    assert txn.date == "2024-07-01"
    assert txn.description == ""
    assert txn.amount == Decimal("0")
    assert txn.balance == Decimal("0")


def test_dollar_sign_is_tolerated(parser):
    content = "Date,Description,Amount,Balance\n2024-07-01,Deposit,$250.10,$1000\n"

    (txn,) = parser.parse_text(content)

    assert txn.amount == Decimal("250.10")


def test_comma_in_description_shifts_columns(parser):
    # No quoting support: the extra comma pushes the amount into the balance slot
    content = 'Date,Description,Amount,Balance\n2024-07-01,"Smith, J",-50.00,950.00\n'

    (txn,) = parser.parse_text(content)

    assert txn.description == '"Smith'
    assert txn.amount == Decimal("0")
    assert txn.balance == Decimal("-50.00")


def test_header_only_and_empty_input(parser):
    assert parser.parse_text("Date,Description,Amount,Balance\n") == []
    assert parser.parse_text("") == []


def test_custom_delimiter():
    config = ReconConfig(input={"statement": {"delimiter": ";"}})
    parser = StatementParser(config)

    (txn,) = parser.parse_text("Date;Description;Amount;Balance\n2024-07-01;Rent;-500;0\n")

    assert txn.description == "Rent"
    assert txn.amount == Decimal("-500")


def test_parse_file(tmp_path, parser, statement_text):
    path = tmp_path / "statement.csv"
    path.write_text(statement_text, encoding="utf-8")

    assert len(parser.parse_file(path)) == 2


def test_parse_file_missing_raises(tmp_path, parser):
    with pytest.raises(StatementParseError):
        parser.parse_file(tmp_path / "missing.csv")
