import datetime as dt
from decimal import Decimal

import pytest

from ledger.functional import (
    Either,
    Left,
    Maybe,
    Nothing,
    Right,
    Some,
    ValidationError,
    parse_amount,
    validate_draft,
)


def test_maybe_map_and_default():
    assert Some(5).map(lambda x: x * 2).get_or_else(0) == 10
    assert Nothing().map(lambda x: x * 2).get_or_else(0) == 0
    assert Some(1).is_some() and Nothing().is_none()


def test_base_containers_are_abstract():
    with pytest.raises(TypeError):
        Maybe()
    with pytest.raises(TypeError):
        Either()
    assert Right(3).get_or_else(0) == 3
    assert Left("x").get_or_else(0) == 0
    assert Right(3).is_right() and Left("x").is_left()


def test_either_bind_short_circuits():
    def half(x):
        return Left("odd") if x % 2 else Right(x // 2)

    assert Right(8).bind(half).bind(half) == Right(2)
    assert Right(6).bind(half).bind(half) == Left("odd")
    assert Left("boom").map(lambda x: x + 1).get_error() == "boom"


def test_left_unwrap_raises_validation_error():
    with pytest.raises(ValidationError) as exc:
        Left({"error": "x", "message": "bad input"}).unwrap()
    assert exc.value.error["error"] == "x"
    assert str(exc.value) == "bad input"


def test_valid_expense_defaults_category():
    result = validate_draft("Laptop stand", "49.9", "2024-02-03", "expense")
    assert result.is_right()
    draft = result.unwrap()
    assert draft.amount == Decimal("49.90")
    assert draft.date == dt.date(2024, 2, 3)
    assert draft.category == "other"


def test_income_drops_category():
    draft = validate_draft("Invoice #12", 1500, dt.date(2024, 2, 3), "income", "software").unwrap()
    assert draft.category is None
    assert draft.type == "income"


def test_description_is_trimmed_and_required():
    assert validate_draft("  Hosting ", 10, "2024-01-01", "expense", "software").unwrap().description == "Hosting"
    result = validate_draft("   ", 10, "2024-01-01", "income")
    assert result.get_error()["error"] == "missing_description"


@pytest.mark.parametrize("raw", ["abc", "-5", "0", None, "nan"])
def test_bad_amounts(raw):
    result = parse_amount(raw)
    assert result.is_left()
    assert result.get_error()["error"] == "invalid_amount"


def test_bad_type_category_and_date():
    assert validate_draft("x", 1, "2024-01-01", "transfer").get_error()["error"] == "invalid_type"
    assert validate_draft("x", 1, "2024-01-01", "expense", "yachts").get_error()["error"] == "invalid_category"
    assert validate_draft("x", 1, "2024-02-30", "income").get_error()["error"] == "invalid_date"
    assert validate_draft("x", 1, None, "income").get_error()["error"] == "invalid_date"
