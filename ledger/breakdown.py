from decimal import Decimal
from typing import Dict, Iterable, Iterator, Optional, Tuple

from ledger.domain import DEFAULT_CATEGORY, EXPENSE, INCOME, Transaction
from ledger.filters import by_type, iter_transactions
from ledger.functional import Maybe, Nothing, Some


def total_by_type(trans: Iterable[Transaction], tx_type: str) -> Decimal:
    return sum((Decimal(t.amount) for t in iter_transactions(trans, by_type(tx_type))), Decimal("0"))


def expense_breakdown(trans: Iterable[Transaction]) -> Dict[str, Decimal]:
    """Expense totals per category, in the order categories are first seen."""
    totals: Dict[str, Decimal] = {}
    for t in iter_transactions(trans, by_type(EXPENSE)):
        category = t.category or DEFAULT_CATEGORY
        totals[category] = totals.get(category, Decimal("0")) + Decimal(t.amount)
    return totals


def top_expense_categories(trans: Iterable[Transaction], k: Optional[int] = None) -> Iterator[Tuple[str, Decimal]]:
    # sorted() is stable, so equal totals keep first-seen order
    ordered = sorted(expense_breakdown(trans).items(), key=lambda item: item[1], reverse=True)
    if k is not None:
        ordered = ordered[: max(0, k)]
    for name, total in ordered:
        yield name, total


def largest_expense_category(trans: Iterable[Transaction]) -> Maybe[str]:
    for name, _ in top_expense_categories(trans, 1):
        return Some(name)
    return Nothing()


def range_totals(trans: Iterable[Transaction]) -> Tuple[Decimal, Decimal]:
    trans = list(trans)
    return total_by_type(trans, INCOME), total_by_type(trans, EXPENSE)
