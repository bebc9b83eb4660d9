import logging
from dataclasses import dataclass
from decimal import Decimal

from ledger.domain import EXPENSE, INCOME, Summary

logger = logging.getLogger(__name__)

TAX_RATE = Decimal("0.25")
SAVINGS_RATE = Decimal("0.20")

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def profit_margin(total_income: Decimal, net_profit: Decimal) -> Decimal:
    if total_income > 0:
        return net_profit / total_income * HUNDRED
    if net_profit < 0:
        return -HUNDRED
    return ZERO


def compute_summary(
    total_income: Decimal,
    total_expenses: Decimal,
    tax_rate: Decimal = TAX_RATE,
    savings_rate: Decimal = SAVINGS_RATE,
) -> Summary:
    total_income = Decimal(total_income)
    total_expenses = Decimal(total_expenses)
    net_profit = total_income - total_expenses
    tax_to_save = total_income * tax_rate
    recommended_savings = max(ZERO, net_profit * savings_rate)
    return Summary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_profit=net_profit,
        tax_to_save=tax_to_save,
        recommended_savings=recommended_savings,
        safe_to_spend=net_profit - tax_to_save - recommended_savings,
        profit_margin=profit_margin(total_income, net_profit),
    )


@dataclass(frozen=True)
class MarginIndicator:
    text: str
    width: Decimal   # percent of the bar, 0..100
    is_profit: bool


def margin_indicator(summary: Summary) -> MarginIndicator:
    margin = summary.profit_margin
    return MarginIndicator(
        text=f"{margin:.0f}%",
        width=min(HUNDRED, abs(margin)),
        is_profit=margin >= 0,
    )


def balance_tone(value: Decimal) -> str:
    if value > 0:
        return "positive"
    if value < 0:
        return "negative"
    return "zero"


async def load_summary(store, user_id: str, tax_rate: Decimal = TAX_RATE, savings_rate: Decimal = SAVINGS_RATE) -> Summary:
    """Totals over all of the user's transactions, ignoring the list filter."""
    total_income = await store.sum_amount(user_id, INCOME)
    total_expenses = await store.sum_amount(user_id, EXPENSE)
    logger.debug("Summary for %s: income=%s expenses=%s", user_id, total_income, total_expenses)
    return compute_summary(total_income, total_expenses, tax_rate, savings_rate)
