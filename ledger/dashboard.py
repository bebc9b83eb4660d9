"""Controller behind the Streamlit page.

All UI state lives in a DashboardState that the caller owns (Streamlit keeps it
in the session). Every data failure is caught here, logged, and turned into
either an unchanged view or a fixed message; nothing is retried.
"""
import datetime as dt
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from ledger.ai_summary import INVALID_RANGE_MESSAGE, AISummaryClient
from ledger.dates import parse_date, today
from ledger.domain import ALL, EXPENSE, ChartData, Summary, Transaction, TransactionFilter
from ledger.events import TRANSACTION_ADDED, TRANSACTION_DELETED, TRANSACTION_UPDATED, Event, EventBus
from ledger.functional import Either, Left, Right, validate_draft
from ledger.pagination import PAGE_SIZE, PageState, Paginator
from ledger.services import ReportService, TransactionService
from ledger.store import TransactionNotFound, TransactionStore
from ledger.summary import SAVINGS_RATE, TAX_RATE, load_summary

logger = logging.getLogger(__name__)

CHART_ALERT = "The chart query failed. Please check the application logs for details."
WRITE_FAILED = "Could not save the transaction. Please try again."

PERIODS: Dict[str, Optional[int]] = {
    "Last 7 days": 7,
    "Last 30 days": 30,
    "Last 90 days": 90,
    "Last 365 days": 365,
    "Custom": None,
}
DEFAULT_PERIOD = "Last 30 days"


@dataclass
class ReportView:
    start: Optional[dt.date] = None
    end: Optional[dt.date] = None
    chart: Optional[ChartData] = None
    breakdown: Dict[str, Decimal] = field(default_factory=dict)
    ai_summary: str = ""
    alert: Optional[str] = None


@dataclass
class DashboardState:
    filter: TransactionFilter = field(default_factory=TransactionFilter)
    page: PageState = field(default_factory=PageState)
    summary: Summary = field(default_factory=Summary)
    # set only while the reports section is open
    report: Optional[ReportView] = None
    report_key: Optional[Tuple[Any, ...]] = None


def resolve_range(
    days: Optional[int],
    custom_start: Any = None,
    custom_end: Any = None,
    now: Optional[dt.date] = None,
) -> Optional[Tuple[dt.date, dt.date]]:
    """(start, end) for a preset period or a custom range; None if invalid."""
    if days is not None:
        end = today(now)
        return end - dt.timedelta(days=days - 1), end
    if not custom_start or not custom_end:
        return None
    try:
        start, end = parse_date(custom_start), parse_date(custom_end)
    except (TypeError, ValueError, AttributeError):
        return None
    if start > end:
        return None
    return start, end


class Dashboard:

    def __init__(
        self,
        store: TransactionStore,
        user_id: str,
        ai_client: AISummaryClient,
        state: Optional[DashboardState] = None,
        page_size: int = PAGE_SIZE,
        tax_rate: Decimal = TAX_RATE,
        savings_rate: Decimal = SAVINGS_RATE,
    ):
        self.store = store
        self.user_id = user_id
        self.ai_client = ai_client
        self.state = state or DashboardState()
        self.tax_rate = tax_rate
        self.savings_rate = savings_rate

        self.paginator = Paginator(store, user_id, page_size)
        self.bus = EventBus()
        self.transactions = TransactionService(store, self.bus, user_id)
        self.reports = ReportService(store, user_id)

        self.bus.subscribe(TRANSACTION_ADDED, self._on_changed)
        self.bus.subscribe(TRANSACTION_UPDATED, self._on_changed)
        self.bus.subscribe(TRANSACTION_DELETED, self._on_deleted)

    # -- loading -------------------------------------------------------------

    async def start(self) -> None:
        await self.update_summary()
        await self.reset_and_refresh()

    async def update_summary(self) -> None:
        try:
            self.state.summary = await load_summary(self.store, self.user_id, self.tax_rate, self.savings_rate)
        except SQLAlchemyError:
            logger.exception("Error fetching aggregate summary")

    async def reset_and_refresh(self) -> None:
        try:
            await self.paginator.reset_and_refresh(self.state.page, self.state.filter)
        except SQLAlchemyError:
            logger.exception("Error fetching transactions")

    async def _on_changed(self, event: Event) -> None:
        self.state.report = None
        await self.update_summary()
        await self.reset_and_refresh()

    async def _on_deleted(self, event: Event) -> None:
        self.state.report = None
        await self.update_summary()
        try:
            await self.paginator.refresh_after_delete(self.state.page, self.state.filter)
        except SQLAlchemyError:
            logger.exception("Error refreshing transactions after delete")

    # -- filters and paging --------------------------------------------------

    async def set_filter(self, tx_type: str, category: Optional[str] = None) -> None:
        if tx_type == EXPENSE:
            category = category or ALL
        else:
            category = None
        self.state.filter = TransactionFilter(type=tx_type, category=category)
        await self.reset_and_refresh()

    async def next_page(self) -> bool:
        try:
            return await self.paginator.next_page(self.state.page, self.state.filter)
        except SQLAlchemyError:
            logger.exception("Error fetching transactions")
            return False

    async def prev_page(self) -> bool:
        try:
            return await self.paginator.prev_page(self.state.page, self.state.filter)
        except SQLAlchemyError:
            logger.exception("Error fetching transactions")
            return False

    def find_on_page(self, tx_id: int) -> Optional[Transaction]:
        return next((t for t in self.state.page.items if t.id == tx_id), None)

    # -- mutations -----------------------------------------------------------

    async def add_transaction(self, description, amount, date, tx_type, category=None) -> Either[dict, Transaction]:
        result = validate_draft(description, amount, date, tx_type, category)
        if result.is_left():
            return result
        try:
            return Right(await self.transactions.add(result.unwrap()))
        except SQLAlchemyError:
            logger.exception("Error adding transaction")
            return Left({"error": "write_failed", "message": WRITE_FAILED})

    async def update_transaction(self, tx_id: int, description, amount, date, tx_type, category=None) -> Either[dict, Transaction]:
        result = validate_draft(description, amount, date, tx_type, category)
        if result.is_left():
            return result
        try:
            return Right(await self.transactions.update(tx_id, result.unwrap()))
        except TransactionNotFound:
            logger.error("Transaction %s no longer exists", tx_id)
            return Left({"error": "not_found", "message": f"Transaction {tx_id} no longer exists", "id": tx_id})
        except SQLAlchemyError:
            logger.exception("Error updating transaction %s", tx_id)
            return Left({"error": "write_failed", "message": WRITE_FAILED})

    async def delete_transaction(self, tx_id: int) -> bool:
        try:
            return await self.transactions.delete(tx_id)
        except SQLAlchemyError:
            logger.exception("Error removing transaction %s", tx_id)
            return False

    # -- reports -------------------------------------------------------------

    async def open_report(
        self,
        period: str,
        custom_start: Any = None,
        custom_end: Any = None,
        now: Optional[dt.date] = None,
    ) -> ReportView:
        """Report for the open reports section.

        Rebuilt on first open, when the period or custom range changes, and after
        a mutation; otherwise the cached view is returned.
        """
        key = (period, custom_start, custom_end)
        if self.state.report is None or self.state.report_key != key:
            self.state.report = await self.build_report(PERIODS[period], custom_start, custom_end, now)
            self.state.report_key = key
        return self.state.report

    def close_report(self) -> None:
        self.state.report = None
        self.state.report_key = None

    async def build_report(
        self,
        days: Optional[int],
        custom_start: Any = None,
        custom_end: Any = None,
        now: Optional[dt.date] = None,
    ) -> ReportView:
        date_range = resolve_range(days, custom_start, custom_end, now)
        if date_range is None:
            return ReportView(ai_summary=INVALID_RANGE_MESSAGE)
        start, end = date_range

        try:
            report = await self.reports.range_report(start, end)
        except SQLAlchemyError:
            logger.exception("Error fetching chart data for %s..%s", start, end)
            # render an empty chart like an empty range would
            empty = self._empty_result(start, end)
            view = ReportView(start=start, end=end, chart=empty["chart"], alert=CHART_ALERT)
            view.ai_summary = await self.ai_client.summarize([])
            return view

        result = report["result"]
        return ReportView(
            start=start,
            end=end,
            chart=result["chart"],
            breakdown=result["expense_breakdown"],
            ai_summary=await self.ai_client.summarize(report["transactions"]),
        )

    def _empty_result(self, start: dt.date, end: dt.date) -> Dict[str, Any]:
        acc: Dict[str, Any] = {}
        for agg in self.reports.aggregators:
            acc.update(agg([], start, end, acc))
        return acc
