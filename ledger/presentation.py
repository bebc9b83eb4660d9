"""Projection of dashboard state into things Streamlit can draw."""
from decimal import Decimal
from typing import Dict, Iterable, List, NamedTuple

import pandas as pd
import plotly.graph_objects as go

from ledger.domain import ChartData, Summary, Transaction
from ledger.formatting import format_category, format_display_date, format_money, format_signed_amount
from ledger.summary import balance_tone, margin_indicator

INCOME_COLOR = "rgba(32, 201, 151, 0.7)"
INCOME_BORDER = "rgba(32, 201, 151, 1)"
EXPENSE_COLOR = "rgba(250, 82, 82, 0.7)"
EXPENSE_BORDER = "rgba(250, 82, 82, 1)"

NO_TRANSACTIONS = "No transactions found for the selected filter."

TRANSACTION_COLUMNS = ["id", "Date", "Description", "Category", "Amount", "type"]


class SummaryCard(NamedTuple):
    label: str
    value: str
    tone: str


def transactions_frame(items: Iterable[Transaction]) -> pd.DataFrame:
    rows = [
        {
            "id": t.id,
            "Date": format_display_date(t.date),
            "Description": t.description,
            "Category": format_category(t.category),
            "Amount": format_signed_amount(t.type, t.amount),
            "type": t.type,
        }
        for t in items
    ]
    return pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)


def summary_cards(summary: Summary) -> List[SummaryCard]:
    return [
        SummaryCard("Total Income", format_money(summary.total_income), "positive"),
        SummaryCard("Total Expenses", format_money(summary.total_expenses), "negative"),
        SummaryCard("Net Profit", format_money(summary.net_profit), balance_tone(summary.net_profit)),
        SummaryCard("Tax to Set Aside", format_money(summary.tax_to_save), "zero"),
        SummaryCard("Recommended Savings", format_money(summary.recommended_savings), "zero"),
        SummaryCard("Safe to Spend", format_money(summary.safe_to_spend), balance_tone(summary.safe_to_spend)),
    ]


def margin_bar(summary: Summary) -> Dict[str, object]:
    indicator = margin_indicator(summary)
    return {
        "text": indicator.text,
        "fraction": float(indicator.width) / 100,
        "color": INCOME_BORDER if indicator.is_profit else EXPENSE_BORDER,
        "is_profit": indicator.is_profit,
    }


def build_chart(chart: ChartData) -> go.Figure:
    titles = list(chart.tooltip_titles)
    fig = go.Figure()
    fig.add_trace(go.Bar(
        name="Income",
        x=list(chart.labels),
        y=[float(v) for v in chart.income],
        customdata=titles,
        marker=dict(color=INCOME_COLOR, line=dict(color=INCOME_BORDER, width=1)),
        hovertemplate="%{customdata}<br>Income: $%{y:,.2f}<extra></extra>",
    ))
    fig.add_trace(go.Bar(
        name="Expenses",
        x=list(chart.labels),
        y=[float(v) for v in chart.expense],
        customdata=titles,
        marker=dict(color=EXPENSE_COLOR, line=dict(color=EXPENSE_BORDER, width=1)),
        hovertemplate="%{customdata}<br>Expenses: $%{y:,.2f}<extra></extra>",
    ))
    fig.update_layout(
        barmode="group",
        template="plotly_dark",
        margin=dict(t=30, b=10, l=10, r=10),
        yaxis=dict(rangemode="tozero", tickprefix="$", tickformat=",.2f"),
        xaxis=dict(showgrid=False),
    )
    return fig


def breakdown_frame(breakdown: Dict[str, Decimal]) -> pd.DataFrame:
    rows = [{"Category": format_category(name), "Amount": format_money(total)} for name, total in breakdown.items()]
    return pd.DataFrame(rows, columns=["Category", "Amount"])
