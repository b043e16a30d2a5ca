from decimal import Decimal

import pytest

from bank_recon.config import ReconConfig
from bank_recon.models import LedgerEntry
from bank_recon.parsers import LedgerParser
from bank_recon.utils.exceptions import LedgerParseError


def test_parse_export(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text(
        "id,date,description,debitAccount,creditAccount,amount\n"
        "e1,2024-07-01,Vendor X,Office Expenses,Bank Account,120.00\n"
        ",2024-07-02,Refund,Bank Account,Sales,-35.5\n"
    )

    entries = LedgerParser().parse_file(path)

    assert [e.id for e in entries] == ["e1", "ledger_1"]
    assert entries[0].debit_account == "Office Expenses"
    assert entries[0].credit_account == "Bank Account"
    assert entries[0].amount == Decimal("120.00")
    assert entries[1].amount == Decimal("35.5")
    assert entries[1].value_date.day == 2


def test_custom_column_mappings(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text("Ref;Posted;Dr;Cr;Total\nJ-9;07/03/2024;Cash;Revenue;$1,000.00\n")
    config = ReconConfig(
        input={
            "ledger": {
                "delimiter": ";",
                "column_mappings": {
                    "id": "Ref",
                    "date": "Posted",
                    "debit_account": "Dr",
                    "credit_account": "Cr",
                    "amount": "Total",
                },
            }
        }
    )

    (entry,) = LedgerParser(config).parse_file(path)

    assert entry.id == "J-9"
    assert entry.amount == Decimal("1000.00")
    assert entry.description == ""
    assert entry.value_date.month == 7


def test_missing_required_column(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text("id,description\ne1,Nothing\n")

    with pytest.raises(LedgerParseError):
        LedgerParser().parse_file(path)


def test_empty_file_gives_no_entries(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text("")

    assert LedgerParser().parse_file(path) == []


def test_out_of_range_amount_becomes_zero(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text(
        "id,date,description,debitAccount,creditAccount,amount\n"
        "e1,2024-07-01,Vendor X,Office Expenses,Bank Account,1E+1000000\n"
    )

    (entry,) = LedgerParser().parse_file(path)

    assert entry.amount == Decimal("0")


def test_out_of_range_record_amount_becomes_zero():
    (entry,) = LedgerParser().parse_records(
        [{"id": "a", "date": "2024-07-01", "debitAccount": "Cash", "amount": "-1E+1000000"}]
    )

    assert entry.amount == Decimal("0")


def test_parse_records_accepts_both_key_styles():
    entries = LedgerParser().parse_records(
        [
            {"id": "a", "date": "2024-07-01", "debitAccount": "Cash", "amount": "5"},
            {"id": "b", "date": "2024-07-01", "credit_account": "Bank", "amount": 7},
        ]
    )

    assert entries[0] == LedgerEntry(
        id="a", date="2024-07-01", debit_account="Cash", amount=Decimal("5")
    )
    assert entries[1].credit_account == "Bank"
    assert entries[1].amount == Decimal("7")
