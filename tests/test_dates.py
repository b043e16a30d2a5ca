from datetime import date, datetime, timedelta, timezone

import pandas as pd

from bank_recon.utils.dates import parse_date


def test_iso_and_common_formats():
    assert parse_date("2024-07-01") == datetime(2024, 7, 1)
    assert parse_date("07/01/2024") == datetime(2024, 7, 1)
    assert parse_date("01.07.2024") == datetime(2024, 7, 1)


def test_date_and_timestamp_objects():
    assert parse_date(date(2024, 7, 1)) == datetime(2024, 7, 1)
    assert parse_date(pd.Timestamp("2024-07-01 12:30")) == datetime(2024, 7, 1, 12, 30)


def test_aware_values_become_naive_utc():
    aware = datetime(2024, 7, 1, 2, 0, tzinfo=timezone(timedelta(hours=2)))
    assert parse_date(aware) == datetime(2024, 7, 1, 0, 0)


def test_unreadable_values():
    assert parse_date(None) is None
    assert parse_date("") is None
    assert parse_date("   ") is None
    assert parse_date("unknown") is None
    assert parse_date(pd.NaT) is None
