from decimal import Decimal

from ledger.config import DEFAULT_DB_URL, get_settings

ENV_VARS = (
    "DATABASE_URL",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_API_BASE",
    "AI_TIMEOUT",
    "TAX_RATE",
    "SAVINGS_RATE",
    "PAGE_SIZE",
    "LOG_LEVEL",
    "USER_ID",
)


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    clear_env(monkeypatch)
    s = get_settings()
    assert s.db_url == DEFAULT_DB_URL
    assert s.gemini_api_key == ""
    assert s.tax_rate == Decimal("0.25")
    assert s.savings_rate == Decimal("0.20")
    assert s.page_size == 10
    assert s.log_level == "INFO"
    assert s.user_id is None


def test_overrides(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("GEMINI_API_KEY", " abc ")
    monkeypatch.setenv("GEMINI_API_BASE", "http://localhost:9000/v1/")
    monkeypatch.setenv("TAX_RATE", "0.3")
    monkeypatch.setenv("PAGE_SIZE", "25")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = get_settings()
    assert s.gemini_api_key == "abc"
    assert s.gemini_api_base == "http://localhost:9000/v1"
    assert s.tax_rate == Decimal("0.3")
    assert s.page_size == 25
    assert s.log_level == "DEBUG"


def test_malformed_numbers_fall_back(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("TAX_RATE", "lots")
    monkeypatch.setenv("SAVINGS_RATE", "-1")
    monkeypatch.setenv("PAGE_SIZE", "0")
    monkeypatch.setenv("AI_TIMEOUT", "soon")
    s = get_settings()
    assert s.tax_rate == Decimal("0.25")
    assert s.savings_rate == Decimal("0.20")
    assert s.page_size == 10
    assert s.ai_timeout == 30.0
