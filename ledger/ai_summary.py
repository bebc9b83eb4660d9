"""Short natural-language summary of a reporting range from the Gemini API."""
import logging
from typing import Iterable, Optional

import httpx

from ledger.breakdown import largest_expense_category, range_totals
from ledger.config import DEFAULT_GEMINI_API_BASE, DEFAULT_GEMINI_MODEL
from ledger.domain import Transaction
from ledger.formatting import format_currency

logger = logging.getLogger(__name__)

LOADING_MESSAGE = "Generating your financial summary..."
MISSING_KEY_MESSAGE = "AI API key is missing. Please check your .env file."
FAILURE_MESSAGE = "Could not generate AI summary at this time."
INVALID_RANGE_MESSAGE = "Please select a valid date range."


def build_prompt(trans: Iterable[Transaction]) -> str:
    trans = list(trans)
    total_income, total_expenses = range_totals(trans)
    net_profit = total_income - total_expenses
    largest = largest_expense_category(trans).get_or_else("None")
    return (
        "You are a helpful and encouraging financial assistant for a freelancer. "
        "Based on the following data, write a short, insightful summary (3-4 sentences max). "
        "Be positive but also point out one area for improvement if applicable. "
        "Format the response as a single paragraph. "
        f"Data: Total Income: {format_currency(total_income)}, "
        f"Total Expenses: {format_currency(total_expenses)}, "
        f"Net Profit: {format_currency(net_profit)}, "
        f"Largest Expense Category: {largest}."
    )


def request_body(prompt: str) -> dict:
    return {"contents": [{"parts": [{"text": prompt}]}]}


def extract_text(payload: dict) -> str:
    return payload["candidates"][0]["content"]["parts"][0]["text"]


class AISummaryClient:

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        api_base: str = DEFAULT_GEMINI_API_BASE,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    async def generate(self, prompt: str) -> str:
        """Raw call; raises on transport errors, non-2xx answers and odd bodies."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                self.url,
                params={"key": self.api_key},
                json=request_body(prompt),
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            return extract_text(response.json())

    async def summarize(self, trans: Iterable[Transaction]) -> str:
        """Summary text for the range, or one of the fixed fallback messages."""
        if not self.api_key:
            return MISSING_KEY_MESSAGE
        prompt = build_prompt(trans)
        try:
            return await self.generate(prompt)
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError):
            logger.exception("AI summary generation failed")
            return FAILURE_MESSAGE
