from decimal import Decimal

import pytest

from bank_recon.config import MatchingPolicy
from bank_recon.models import BankTransaction, LedgerEntry


def make_txn(idx, date, amount, description="Payment", balance="0"):
    return BankTransaction(
        id=f"bank_{idx}",
        date=date,
        description=description,
        amount=Decimal(str(amount)),
        balance=Decimal(str(balance)),
    )


def make_entry(
    entry_id,
    date,
    amount,
    debit_account="Office Expenses",
    credit_account="Bank Account",
    description="",
):
    return LedgerEntry(
        id=entry_id,
        date=date,
        description=description,
        debit_account=debit_account,
        credit_account=credit_account,
        amount=Decimal(str(amount)),
    )


@pytest.fixture
def policy():
    return MatchingPolicy()


@pytest.fixture
def statement_text():
    return (
        "Date,Description,Amount,Balance\n"
        "2024-07-01,Vendor X,-120.00,880.00\n"
        "\n"
        "2024-07-02,Client Payment,1200.00,2080.00\n"
    )


@pytest.fixture
def txn():
    return make_txn


@pytest.fixture
def entry():
    return make_entry
