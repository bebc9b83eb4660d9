import datetime as dt
from decimal import Decimal
from typing import Iterable, Optional

import pandas as pd

from ledger.dates import day_count, parse_date
from ledger.domain import EXPENSE, INCOME, ChartData, Transaction

DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"
QUARTERLY = "quarterly"
YEARLY = "yearly"
GRANULARITIES = (DAILY, WEEKLY, MONTHLY, QUARTERLY, YEARLY)

# W-SAT periods run Sunday through Saturday
PERIOD_FREQ = {DAILY: "D", WEEKLY: "W-SAT", MONTHLY: "M", QUARTERLY: "Q", YEARLY: "Y"}
# anchored on the first day of each bucket
RANGE_FREQ = {DAILY: "D", WEEKLY: "W-SUN", MONTHLY: "MS", QUARTERLY: "QS", YEARLY: "YS"}


def select_granularity(start: dt.date, end: dt.date) -> str:
    days = day_count(start, end)
    if days > 730:
        return YEARLY
    elif days > 365 * 2:
        # same threshold as above, so quarterly is never picked automatically
        return QUARTERLY
    elif days > 180:
        return MONTHLY
    elif days > 45:
        return WEEKLY
    return DAILY


def _period(d, granularity: str) -> pd.Period:
    return pd.Timestamp(parse_date(d)).to_period(PERIOD_FREQ[granularity])


def bucket_key(d, granularity: str) -> dt.date:
    return _period(d, granularity).start_time.date()


def _bucket_index(start: dt.date, end: dt.date, granularity: str) -> pd.DatetimeIndex:
    return pd.date_range(bucket_key(start, granularity), parse_date(end), freq=RANGE_FREQ[granularity])


def bucket_keys(start: dt.date, end: dt.date, granularity: str) -> list[dt.date]:
    """Bucket starts from the bucket containing start to the one containing end."""
    return [ts.date() for ts in _bucket_index(start, end, granularity)]


def _short(d: dt.date) -> str:
    return f"{d:%b} {d.day}"


def _long(d: dt.date) -> str:
    return f"{d:%b} {d.day}, {d.year}"


def bucket_label(key: dt.date, granularity: str) -> tuple[str, str]:
    """Return (axis label, tooltip title) for a bucket key."""
    period = _period(key, granularity)
    last = period.end_time.date()
    if granularity == YEARLY:
        return str(key.year), f"{_long(key)} - {_long(last)}"
    if granularity == QUARTERLY:
        return f"Q{period.quarter} {key.year}", f"{_long(key)} - {_long(last)}"
    if granularity == MONTHLY:
        return f"{key:%b %Y}", f"{key:%B %Y}"
    if granularity == WEEKLY:
        return f"Wk of {_short(key)}", f"{_short(key)} - {_short(last)}"
    return _short(key), f"{key:%A, %B} {key.day}"


def _to_cents(amount) -> int:
    return int((Decimal(amount) * 100).to_integral_value())


def _from_cents(cents) -> Decimal:
    return Decimal(int(cents)).scaleb(-2)


def bucket_totals(
    transactions: Iterable[Transaction],
    start: dt.date,
    end: dt.date,
    granularity: str,
) -> pd.DataFrame:
    """Income and expense cents per bucket, zero-filled over the whole range.

    Transactions whose bucket falls outside the range are dropped by the reindex.
    """
    index = _bucket_index(start, end, granularity)
    frame = pd.DataFrame(
        [(parse_date(t.date), t.type, _to_cents(t.amount)) for t in transactions],
        columns=["date", "type", "cents"],
    )
    if frame.empty:
        return pd.DataFrame(0, index=index, columns=[INCOME, EXPENSE])

    frame["bucket"] = pd.to_datetime(frame["date"]).dt.to_period(PERIOD_FREQ[granularity]).dt.start_time
    frame["side"] = frame["type"].where(frame["type"] == INCOME, EXPENSE)
    return (
        frame.groupby(["bucket", "side"])["cents"].sum()
        .unstack(fill_value=0)
        .reindex(index=index, columns=[INCOME, EXPENSE], fill_value=0)
    )


def process_chart_data(
    transactions: Iterable[Transaction],
    start: dt.date,
    end: dt.date,
    granularity: Optional[str] = None,
) -> ChartData:
    start, end = parse_date(start), parse_date(end)
    granularity = granularity or select_granularity(start, end)

    totals = bucket_totals(transactions, start, end, granularity)
    keys = [ts.date() for ts in totals.index]
    labels = [bucket_label(k, granularity) for k in keys]
    return ChartData(
        granularity=granularity,
        keys=tuple(keys),
        labels=tuple(label for label, _ in labels),
        tooltip_titles=tuple(title for _, title in labels),
        income=tuple(_from_cents(v) for v in totals[INCOME]),
        expense=tuple(_from_cents(v) for v in totals[EXPENSE]),
    )
