import datetime as dt
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Generic, Optional, TypeVar

from ledger.dates import parse_date
from ledger.domain import DEFAULT_CATEGORY, EXPENSE, EXPENSE_CATEGORIES, TRANSACTION_TYPES, TransactionDraft

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    @abstractmethod
    def is_none(self) -> bool:
        pass


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f):
        return Some(f(self._value))

    def bind(self, f):
        return f(self._value)

    def get_or_else(self, default):
        return self._value

    def is_some(self) -> bool:
        return True

    def is_none(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f):
        return self

    def bind(self, f):
        return self

    def get_or_else(self, default):
        return default

    def is_some(self) -> bool:
        return False

    def is_none(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class ValidationError(ValueError):
    """Raised when a Left is unwrapped; carries the error payload."""

    def __init__(self, error: dict):
        super().__init__(error.get("message", "invalid input"))
        self.error = error


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    @abstractmethod
    def unwrap(self) -> T:
        pass

    def is_right(self) -> bool:
        return isinstance(self, Right)

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f):
        return Right(f(self._value))

    def bind(self, f):
        return f(self._value)

    def get_or_else(self, default):
        return self._value

    def get_error(self):
        raise ValueError("Cannot get error from Right")

    def unwrap(self) -> T:
        return self._value

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f):
        return self

    def bind(self, f):
        return self

    def get_or_else(self, default):
        return default

    def get_error(self) -> E:
        return self._error

    def unwrap(self):
        raise ValidationError(self._error if isinstance(self._error, dict) else {"message": str(self._error)})

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def parse_amount(raw: Any) -> Either[dict, Decimal]:
    try:
        amount = Decimal(str(raw).strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        return Left({
            "error": "invalid_amount",
            "message": f"Amount {raw!r} is not a number",
            "amount": raw,
        })
    if not amount.is_finite() or amount <= 0:
        return Left({
            "error": "invalid_amount",
            "message": "Amount must be a positive number",
            "amount": raw,
        })
    return Right(amount.quantize(Decimal("0.01")))


def parse_transaction_date(raw: Any) -> Either[dict, dt.date]:
    try:
        return Right(parse_date(raw))
    except (TypeError, ValueError, AttributeError):
        return Left({
            "error": "invalid_date",
            "message": f"Date {raw!r} is not a valid YYYY-MM-DD date",
            "date": raw,
        })


def validate_draft(
    description: str,
    amount: Any,
    date: Any,
    tx_type: str,
    category: Optional[str] = None,
) -> Either[dict, TransactionDraft]:
    description = (description or "").strip()
    if not description:
        return Left({"error": "missing_description", "message": "Description is required"})

    if tx_type not in TRANSACTION_TYPES:
        return Left({
            "error": "invalid_type",
            "message": f"Type must be one of {', '.join(TRANSACTION_TYPES)}",
            "type": tx_type,
        })

    if tx_type == EXPENSE:
        category = category or DEFAULT_CATEGORY
        if category not in EXPENSE_CATEGORIES:
            return Left({
                "error": "invalid_category",
                "message": f"Unknown expense category {category}",
                "category": category,
            })
    else:
        category = None

    return parse_amount(amount).bind(
        lambda value: parse_transaction_date(date).map(
            lambda day: TransactionDraft(
                description=description,
                amount=value,
                date=day,
                type=tx_type,
                category=category,
            )
        )
    )
