import datetime as dt
from typing import Callable, Iterable

from ledger.dates import parse_date
from ledger.domain import ALL, Transaction

Predicate = Callable[[Transaction], bool]


def by_type(tx_type: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return tx_type == ALL or t.type == tx_type

    return _filter


def by_date_range(start: dt.date, end: dt.date) -> Predicate:
    start, end = parse_date(start), parse_date(end)

    def _filter(t: Transaction) -> bool:
        return start <= parse_date(t.date) <= end

    return _filter


def iter_transactions(trans: Iterable[Transaction], pred: Predicate) -> Iterable[Transaction]:
    for t in trans:
        if pred(t):
            yield t
