import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

ALL = "all"
FILTER_TYPES = (ALL, INCOME, EXPENSE)

EXPENSE_CATEGORIES = (
    "software",
    "hardware",
    "marketing",
    "travel",
    "office",
    "education",
    "taxes",
    "other",
)
DEFAULT_CATEGORY = "other"


@dataclass(frozen=True)
class Transaction:
    id: int
    description: str
    amount: Decimal      # always positive, sign comes from type
    date: dt.date
    type: str            # "income" or "expense"
    category: Optional[str] = None  # expenses only
    created_at: Optional[dt.datetime] = None


@dataclass(frozen=True)
class TransactionDraft:
    """Validated form payload, used for both create and update."""
    description: str
    amount: Decimal
    date: dt.date
    type: str
    category: Optional[str] = None


@dataclass(frozen=True)
class TransactionFilter:
    type: str = ALL
    category: Optional[str] = None

    @property
    def category_constraint(self) -> Optional[str]:
        if self.type == EXPENSE and self.category and self.category != ALL:
            return self.category
        return None


@dataclass(frozen=True)
class Cursor:
    # keyset position of the last row of a page
    date: dt.datetime
    created_at: dt.datetime
    id: int


@dataclass(frozen=True)
class Summary:
    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net_profit: Decimal = Decimal("0")
    tax_to_save: Decimal = Decimal("0")
    recommended_savings: Decimal = Decimal("0")
    safe_to_spend: Decimal = Decimal("0")
    profit_margin: Decimal = Decimal("0")


@dataclass(frozen=True)
class ChartData:
    granularity: str
    keys: tuple[dt.date, ...] = field(default_factory=tuple)
    labels: tuple[str, ...] = field(default_factory=tuple)
    tooltip_titles: tuple[str, ...] = field(default_factory=tuple)
    income: tuple[Decimal, ...] = field(default_factory=tuple)
    expense: tuple[Decimal, ...] = field(default_factory=tuple)
