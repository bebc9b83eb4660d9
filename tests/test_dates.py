import datetime as dt

import pytest

from ledger.dates import (
    day_count,
    days_ago_str,
    end_of_day,
    parse_date,
    timezone_safe_datetime,
    today_str,
)


def test_day_count_is_inclusive():
    assert day_count(dt.date(2024, 1, 1), dt.date(2024, 1, 1)) == 1
    assert day_count(dt.date(2024, 1, 1), dt.date(2024, 1, 10)) == 10


def test_timezone_safe_datetime_is_noon():
    assert timezone_safe_datetime("2024-03-05") == dt.datetime(2024, 3, 5, 12, 0, 0)
    assert end_of_day(dt.date(2024, 3, 5)) == dt.datetime(2024, 3, 5, 23, 59, 59)


def test_parse_date_variants():
    assert parse_date("2024-03-05") == dt.date(2024, 3, 5)
    assert parse_date(dt.datetime(2024, 3, 5, 18, 30)) == dt.date(2024, 3, 5)
    assert parse_date(dt.date(2024, 3, 5)) == dt.date(2024, 3, 5)
    with pytest.raises(ValueError):
        parse_date("2024-13-01")


def test_today_and_days_ago_strings():
    now = dt.date(2024, 3, 1)
    assert today_str(now) == "2024-03-01"
    assert days_ago_str(29, now) == "2024-02-01"
