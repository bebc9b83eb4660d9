import datetime as dt
from typing import Any, Callable, Dict, Sequence

from ledger.breakdown import largest_expense_category, range_totals, top_expense_categories
from ledger.buckets import process_chart_data
from ledger.domain import Transaction, TransactionDraft
from ledger.filters import by_date_range, iter_transactions
from ledger.events import TRANSACTION_ADDED, TRANSACTION_DELETED, TRANSACTION_UPDATED, EventBus
from ledger.store import TransactionStore


class TransactionService:
    """Writes go through here so every mutation is announced on the bus."""

    def __init__(self, store: TransactionStore, bus: EventBus, user_id: str):
        self.store = store
        self.bus = bus
        self.user_id = user_id

    async def add(self, draft: TransactionDraft) -> Transaction:
        t = await self.store.add(self.user_id, draft)
        await self.bus.publish(TRANSACTION_ADDED, {"id": t.id, "type": t.type, "amount": t.amount})
        return t

    async def update(self, tx_id: int, draft: TransactionDraft) -> Transaction:
        t = await self.store.update(self.user_id, tx_id, draft)
        await self.bus.publish(TRANSACTION_UPDATED, {"id": t.id, "type": t.type, "amount": t.amount})
        return t

    async def delete(self, tx_id: int) -> bool:
        deleted = await self.store.delete(self.user_id, tx_id)
        if deleted:
            await self.bus.publish(TRANSACTION_DELETED, {"id": tx_id})
        return deleted


Aggregator = Callable[..., Dict[str, Any]]


def chart_aggregator(trans, start, end, acc=None) -> Dict[str, Any]:
    return {"chart": process_chart_data(trans, start, end)}


def totals_aggregator(trans, start, end, acc=None) -> Dict[str, Any]:
    income, expenses = range_totals(trans)
    return {"total_income": income, "total_expenses": expenses, "net_profit": income - expenses}


def category_aggregator(trans, start, end, acc=None) -> Dict[str, Any]:
    return {
        "expense_breakdown": dict(top_expense_categories(trans)),
        "largest_expense_category": largest_expense_category(trans).get_or_else(None),
    }


DEFAULT_AGGREGATORS = (chart_aggregator, totals_aggregator, category_aggregator)


class ReportService:
    """Runs aggregators over the transactions of a date range."""

    def __init__(self, store: TransactionStore, user_id: str, aggregators: Sequence[Aggregator] = DEFAULT_AGGREGATORS):
        self.store = store
        self.user_id = user_id
        self.aggregators = aggregators

    async def range_report(self, start: dt.date, end: dt.date) -> Dict[str, Any]:
        rows = await self.store.fetch_range(self.user_id, start, end)
        trans = list(iter_transactions(rows, by_date_range(start, end)))
        report = {"start": start, "end": end, "transactions": trans, "steps": [], "result": {}}
        acc: Dict[str, Any] = {}
        for agg in self.aggregators:
            out = agg(trans, start, end, acc)
            report["steps"].append({"aggregator": getattr(agg, "__name__", str(agg)), "output": out})
            if isinstance(out, dict):
                acc.update(out)
        report["result"] = acc
        return report
