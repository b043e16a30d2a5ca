from decimal import Decimal

import pytest

from bank_recon.config import MatchingPolicy
from bank_recon.models import LedgerEntry
from bank_recon.reports import ReconciliationSummary
from bank_recon.session import (
    CancellationToken,
    ReconciliationSession,
    SessionState,
)
from bank_recon.utils.exceptions import (
    ReconciliationCancelled,
    ReconciliationFailed,
    SessionStateError,
)

VENDOR_STATEMENT = "Date,Description,Amount,Balance\n2024-07-01,Vendor X,-120.00,880.00\n"


@pytest.fixture
def vendor_ledger():
    return [
        LedgerEntry.from_mapping(
            {
                "id": "e1",
                "date": "2024-07-01",
                "description": "Vendor X invoice",
                "debitAccount": "Office Expenses",
                "creditAccount": "Bank Account",
                "amount": 120.00,
            }
        )
    ]


def test_new_session_is_pending(vendor_ledger):
    session = ReconciliationSession(vendor_ledger)

    assert session.state is SessionState.PENDING
    assert not session.outcome.is_terminal
    with pytest.raises(SessionStateError):
        session.report


def test_end_to_end_single_match(vendor_ledger):
    session = ReconciliationSession(vendor_ledger)

    outcome = session.load_statement(VENDOR_STATEMENT)

    assert outcome.state is SessionState.COMPLETED
    assert session.history == [
        SessionState.PENDING,
        SessionState.PROCESSING,
        SessionState.COMPLETED,
    ]
    report = session.report
    assert len(report.matched_transactions) == 1
    assert report.matched_transactions[0].matched_entry_id == "e1"
    assert report.duplicates == ()
    assert report.missing_entries == ()
    assert report.amount_discrepancies == ()

    summary = ReconciliationSummary.from_report(report)
    assert summary.matched_count == 1
    assert summary.total_count == 1
    assert summary.match_rate == 100.0


def test_empty_ledger_leaves_transaction_unmatched():
    session = ReconciliationSession([])

    session.load_statement(VENDOR_STATEMENT)

    report = session.report
    assert [t.matched for t in report.matched_transactions] == [False]
    assert report.duplicates == ()
    assert report.missing_entries == ()
    assert report.amount_discrepancies == ()
    assert ReconciliationSummary.from_report(report).match_rate == 0.0


def test_empty_statement_is_a_valid_run(vendor_ledger):
    session = ReconciliationSession(vendor_ledger)

    session.load_statement("Date,Description,Amount,Balance\n")

    report = session.report
    assert report.matched_transactions == ()
    assert [e.id for e in report.missing_entries] == ["e1"]
    summary = ReconciliationSummary.from_report(report)
    assert summary.matched_count == 0
    assert summary.match_rate == 0.0


def test_report_invariant_matched_flag_follows_entry_id(vendor_ledger):
    session = ReconciliationSession(vendor_ledger)
    session.load_statement(VENDOR_STATEMENT + "2024-07-09,Unknown,-3.00,877.00\n")

    for txn in session.report.matched_transactions:
        assert txn.matched == (txn.matched_entry_id is not None)


def test_each_entry_is_claimed_at_most_once(vendor_ledger):
    statement = VENDOR_STATEMENT + "2024-07-01,Vendor X,-120.00,760.00\n"
    session = ReconciliationSession(vendor_ledger)

    session.load_statement(statement)

    report = session.report
    ids = [t.matched_entry_id for t in report.matched_transactions if t.matched]
    assert ids == ["e1"]
    assert [t.id for t in report.duplicates] == ["bank_1"]


def test_policy_reaches_matcher_and_detector():
    entries = [
        LedgerEntry(
            id="e1",
            date="2024-07-01",
            debit_account="Office Expenses",
            credit_account="Accounts Payable",
            amount=Decimal("120.00"),
        )
    ]
    policy = MatchingPolicy(require_cash_account=True, restrict_missing_to_cash_accounts=True)
    session = ReconciliationSession(entries, policy=policy)

    session.load_statement(VENDOR_STATEMENT)

    report = session.report
    assert report.policy is policy
    assert report.matched_transactions[0].matched is False
    assert report.missing_entries == ()


def test_session_runs_only_once(vendor_ledger):
    session = ReconciliationSession(vendor_ledger)
    session.load_statement(VENDOR_STATEMENT)

    with pytest.raises(SessionStateError):
        session.load_statement(VENDOR_STATEMENT)
    assert session.state is SessionState.COMPLETED


def test_reconcile_accepts_parsed_transactions(vendor_ledger, txn):
    session = ReconciliationSession(vendor_ledger)

    outcome = session.reconcile([txn(0, "2024-07-02", "-120")])

    assert outcome.report.matched_transactions[0].matched_entry_id == "e1"


def test_sessions_do_not_share_transaction_state(vendor_ledger, txn):
    transactions = [txn(0, "2024-07-01", "-120")]

    first = ReconciliationSession(vendor_ledger).reconcile(transactions)
    second = ReconciliationSession([]).reconcile(transactions)

    assert first.report.matched_transactions[0].matched_entry_id == "e1"
    assert first.report.matched_transactions[0].matched
    assert second.report.matched_transactions[0].matched_entry_id is None
    assert transactions[0].matched is False
    assert transactions[0].matched_entry_id is None


def test_out_of_range_amount_does_not_fail_session(vendor_ledger):
    session = ReconciliationSession(vendor_ledger)

    outcome = session.load_statement(VENDOR_STATEMENT + "2024-07-02,Glitch,1E+1000000,0\n")

    assert outcome.state is SessionState.COMPLETED
    assert outcome.report.matched_transactions[1].amount == Decimal("0")


def test_internal_error_ends_in_failed_state(vendor_ledger, monkeypatch):
    session = ReconciliationSession(vendor_ledger)

    def explode(transactions):
        raise RuntimeError("boom")

    monkeypatch.setattr(session.detector, "find_duplicates", explode)

    outcome = session.load_statement(VENDOR_STATEMENT)

    assert outcome.state is SessionState.FAILED
    assert outcome.is_terminal
    assert isinstance(outcome.error, RuntimeError)
    assert session.history[-1] is SessionState.FAILED
    # Session stays inspectable
    assert session.transactions[0].matched_entry_id == "e1"
    with pytest.raises(ReconciliationFailed) as exc_info:
        session.report
    assert exc_info.value.__cause__ is outcome.error


def test_cancelled_before_run(vendor_ledger):
    token = CancellationToken()
    token.cancel()
    session = ReconciliationSession(vendor_ledger, cancel_token=token)

    outcome = session.load_statement(VENDOR_STATEMENT)

    assert outcome.state is SessionState.FAILED
    assert isinstance(outcome.error, ReconciliationCancelled)
    assert session.transactions[0].matched is False


def test_cancelled_between_passes(vendor_ledger, monkeypatch):
    token = CancellationToken()
    session = ReconciliationSession(vendor_ledger, cancel_token=token)
    original = session.detector.find_duplicates

    def cancel_after_duplicates(transactions):
        result = original(transactions)
        token.cancel()
        return result

    monkeypatch.setattr(session.detector, "find_duplicates", cancel_after_duplicates)

    outcome = session.load_statement(VENDOR_STATEMENT)

    assert outcome.state is SessionState.FAILED
    assert "missing entry detection" in str(outcome.error)
