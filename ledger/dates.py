"""Calendar helpers shared by the store, the bucketing engine and the UI.

Transaction dates are calendar days. They are persisted as noon UTC so that a
day never shifts when it is rendered in another timezone; all helpers here work
on naive values that are understood to be UTC.
"""
import datetime as dt
from typing import Optional, Union

DATE_FORMAT = "%Y-%m-%d"

DateLike = Union[dt.date, dt.datetime, str]


def parse_date(value: DateLike) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return dt.datetime.strptime(value.strip()[:10], DATE_FORMAT).date()


def timezone_safe_datetime(value: DateLike) -> dt.datetime:
    d = parse_date(value)
    return dt.datetime(d.year, d.month, d.day, 12, 0, 0)


def start_of_day(value: DateLike) -> dt.datetime:
    d = parse_date(value)
    return dt.datetime(d.year, d.month, d.day)


def end_of_day(value: DateLike) -> dt.datetime:
    d = parse_date(value)
    return dt.datetime(d.year, d.month, d.day, 23, 59, 59)


def today(now: Optional[dt.date] = None) -> dt.date:
    return now or dt.date.today()


def today_str(now: Optional[dt.date] = None) -> str:
    return today(now).strftime(DATE_FORMAT)


def days_ago_str(days: int, now: Optional[dt.date] = None) -> str:
    return (today(now) - dt.timedelta(days=days)).strftime(DATE_FORMAT)


def day_count(start: dt.date, end: dt.date) -> int:
    """Inclusive number of calendar days between start and end."""
    return (end - start).days + 1

