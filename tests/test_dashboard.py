import datetime as dt
from decimal import Decimal

import httpx
import pytest
from sqlalchemy.exc import SQLAlchemyError

from ledger.ai_summary import INVALID_RANGE_MESSAGE, MISSING_KEY_MESSAGE, AISummaryClient
from ledger.buckets import DAILY
from ledger.dashboard import CHART_ALERT, Dashboard, DashboardState, resolve_range
from ledger.domain import EXPENSE, INCOME, Summary

USER = "user-a"
TODAY = dt.date(2024, 3, 10)


def make_dashboard(store, ai_client=None, page_size=10):
    return Dashboard(store, USER, ai_client or AISummaryClient(""), page_size=page_size)


def test_resolve_range():
    assert resolve_range(30, now=TODAY) == (dt.date(2024, 2, 10), TODAY)
    assert resolve_range(1, now=TODAY) == (TODAY, TODAY)
    assert resolve_range(None, "2024-01-01", "2024-01-31") == (dt.date(2024, 1, 1), dt.date(2024, 1, 31))
    assert resolve_range(None, "2024-02-01", "2024-01-31") is None
    assert resolve_range(None, None, "2024-01-31") is None
    assert resolve_range(None, "garbage", "2024-01-31") is None


@pytest.mark.asyncio
async def test_start_on_empty_store(store):
    dash = make_dashboard(store)
    await dash.start()
    assert dash.state.summary == Summary()
    assert dash.state.page.items == []
    assert dash.state.page.total_pages == 1


@pytest.mark.asyncio
async def test_add_updates_summary_and_list(store):
    dash = make_dashboard(store)
    await dash.start()

    result = await dash.add_transaction("Invoice", "1000", "2024-03-01", INCOME)
    assert result.is_right()
    result = await dash.add_transaction("Figma", "40", "2024-03-02", EXPENSE, "software")
    assert result.is_right()

    assert dash.state.summary.total_income == 1000
    assert dash.state.summary.total_expenses == 40
    assert [t.description for t in dash.state.page.items] == ["Figma", "Invoice"]


@pytest.mark.asyncio
async def test_invalid_add_writes_nothing(store):
    dash = make_dashboard(store)
    result = await dash.add_transaction("", "10", "2024-03-01", INCOME)
    assert result.is_left()
    assert await store.count(USER) == 0


@pytest.mark.asyncio
async def test_add_resets_to_first_page(store):
    dash = make_dashboard(store, page_size=2)
    for day in range(1, 6):
        await dash.add_transaction(f"gig {day}", "10", dt.date(2024, 3, day), INCOME)
    await dash.next_page()
    assert dash.state.page.current_page == 2

    await dash.add_transaction("late invoice", "10", "2024-01-01", INCOME)
    assert dash.state.page.current_page == 1
    assert dash.state.page.total_pages == 3


@pytest.mark.asyncio
async def test_update_and_delete(store):
    dash = make_dashboard(store)
    t = (await dash.add_transaction("Train", "80", "2024-03-01", EXPENSE, "travel")).unwrap()

    updated = await dash.update_transaction(t.id, "Train refund", "80", "2024-03-01", INCOME)
    assert updated.is_right()
    assert dash.state.summary.total_income == 80
    assert dash.state.summary.total_expenses == 0
    assert dash.find_on_page(t.id).type == INCOME

    missing = await dash.update_transaction(999, "x", "1", "2024-03-01", INCOME)
    assert missing.get_error()["error"] == "not_found"

    assert await dash.delete_transaction(t.id) is True
    assert dash.state.summary.total_income == 0
    assert dash.state.page.items == []


@pytest.mark.asyncio
async def test_set_filter(store):
    dash = make_dashboard(store)
    await dash.add_transaction("Invoice", "500", "2024-03-01", INCOME)
    await dash.add_transaction("Ads", "50", "2024-03-02", EXPENSE, "marketing")
    await dash.add_transaction("Laptop", "900", "2024-03-03", EXPENSE, "hardware")

    await dash.set_filter(EXPENSE)
    assert dash.state.filter.category == "all"
    assert len(dash.state.page.items) == 2

    await dash.set_filter(EXPENSE, "marketing")
    assert [t.description for t in dash.state.page.items] == ["Ads"]

    await dash.set_filter(INCOME, "marketing")
    assert dash.state.filter.category is None
    assert [t.description for t in dash.state.page.items] == ["Invoice"]


@pytest.mark.asyncio
async def test_report_for_preset_period(store):
    def handler(request):
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "Nice work."}]}}]})

    dash = make_dashboard(store, AISummaryClient("key", transport=httpx.MockTransport(handler)))
    await dash.add_transaction("Invoice", "700", "2024-03-08", INCOME)
    await dash.add_transaction("Hosting", "20", "2024-03-09", EXPENSE, "software")
    await dash.add_transaction("Old", "5", "2023-01-01", EXPENSE, "office")

    report = await dash.build_report(7, now=TODAY)
    assert report.start == dt.date(2024, 3, 4)
    assert report.chart.granularity == DAILY
    assert len(report.chart.labels) == 7
    assert sum(report.chart.income) == 700
    assert sum(report.chart.expense) == 20
    assert report.breakdown == {"software": Decimal("20.00")}
    assert report.ai_summary == "Nice work."
    assert report.alert is None


@pytest.mark.asyncio
async def test_report_with_invalid_range(store):
    dash = make_dashboard(store)
    report = await dash.build_report(None, "2024-03-10", "2024-03-01")
    assert report.chart is None
    assert report.ai_summary == INVALID_RANGE_MESSAGE


class BrokenStore:
    """Raises like a database that lost its connection."""

    def __init__(self, inner):
        self.inner = inner

    def __getattr__(self, name):
        return getattr(self.inner, name)

    async def fetch_range(self, *args, **kwargs):
        raise SQLAlchemyError("index missing")

    async def sum_amount(self, *args, **kwargs):
        raise SQLAlchemyError("aggregate failed")


@pytest.mark.asyncio
async def test_failures_are_logged_not_raised(store, caplog):
    dash = make_dashboard(BrokenStore(store))
    previous = DashboardState().summary

    await dash.update_summary()
    assert dash.state.summary == previous
    assert "Error fetching aggregate summary" in caplog.text

    report = await dash.build_report(None, "2024-03-01", "2024-03-05")
    assert report.alert == CHART_ALERT
    assert report.chart.income == (0, 0, 0, 0, 0)
    assert report.ai_summary == MISSING_KEY_MESSAGE


class CountingAI:

    def __init__(self):
        self.calls = 0

    async def summarize(self, transactions):
        self.calls += 1
        return f"summary of {len(transactions)}"


@pytest.mark.asyncio
async def test_report_is_built_only_while_open(store):
    ai = CountingAI()
    dash = Dashboard(store, USER, ai)
    await dash.start()
    await dash.add_transaction("Invoice", "500", TODAY, INCOME)
    assert ai.calls == 0

    view = await dash.open_report("Last 30 days", now=TODAY)
    assert ai.calls == 1
    assert view.ai_summary == "summary of 1"
    assert await dash.open_report("Last 30 days", now=TODAY) is view
    assert ai.calls == 1

    await dash.open_report("Last 7 days", now=TODAY)
    assert ai.calls == 2

    await dash.add_transaction("Domain", "12", TODAY, EXPENSE, "software")
    view = await dash.open_report("Last 7 days", now=TODAY)
    assert ai.calls == 3
    assert view.ai_summary == "summary of 2"

    dash.close_report()
    await dash.add_transaction("Retainer", "900", TODAY, INCOME)
    await dash.delete_transaction((await dash.add_transaction("Oops", "1", TODAY, INCOME)).unwrap().id)
    assert ai.calls == 3
    assert dash.state.report is None

    await dash.open_report("Last 7 days", now=TODAY)
    assert ai.calls == 4
