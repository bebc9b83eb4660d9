import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv


load_dotenv()

DEFAULT_DB_URL = "sqlite+aiosqlite:///./freelance_finance.db"
DEFAULT_GEMINI_MODEL = "gemini-1.5-flash-latest"
DEFAULT_GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


@dataclass
class Settings:
    db_url: str
    gemini_api_key: str
    gemini_model: str
    gemini_api_base: str
    ai_timeout: float
    tax_rate: Decimal
    savings_rate: Decimal
    page_size: int
    log_level: str
    user_id: str | None


def _decimal_env(name: str, default: str) -> Decimal:
    raw = os.getenv(name, "").strip()
    try:
        value = Decimal(raw) if raw else Decimal(default)
    except InvalidOperation:
        return Decimal(default)
    return value if value.is_finite() and value >= 0 else Decimal(default)


def get_settings() -> Settings:
    raw_page_size = os.getenv("PAGE_SIZE", "").strip()
    page_size = int(raw_page_size) if raw_page_size.isdigit() and int(raw_page_size) > 0 else 10

    raw_timeout = os.getenv("AI_TIMEOUT", "") or "30"
    try:
        ai_timeout = float(raw_timeout)
    except ValueError:
        ai_timeout = 30.0

    return Settings(
        db_url=os.getenv("DATABASE_URL", DEFAULT_DB_URL),
        gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
        gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        gemini_api_base=os.getenv("GEMINI_API_BASE", DEFAULT_GEMINI_API_BASE).rstrip("/"),
        ai_timeout=ai_timeout,
        tax_rate=_decimal_env("TAX_RATE", "0.25"),
        savings_rate=_decimal_env("SAVINGS_RATE", "0.20"),
        page_size=page_size,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        user_id=os.getenv("USER_ID") or None,
    )
