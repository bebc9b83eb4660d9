import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from ledger.domain import Cursor, Transaction, TransactionFilter
from ledger.store import TransactionStore, cursor_for

logger = logging.getLogger(__name__)

PAGE_SIZE = 10


@dataclass
class PageState:
    current_page: int = 1
    total_pages: int = 1
    # cursors[i] is the position after which page i + 1 begins
    cursors: List[Optional[Cursor]] = field(default_factory=lambda: [None])
    items: List[Transaction] = field(default_factory=list)
    is_fetching: bool = False

    @property
    def has_prev(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def page_info(self) -> str:
        return f"Page {self.current_page} of {self.total_pages}"


def total_pages_for(count: int, page_size: int) -> int:
    return max(1, math.ceil(count / page_size))


class Paginator:

    def __init__(self, store: TransactionStore, user_id: str, page_size: int = PAGE_SIZE):
        self.store = store
        self.user_id = user_id
        self.page_size = page_size

    async def update_total_pages(self, state: PageState, flt: TransactionFilter) -> int:
        count = await self.store.count(self.user_id, flt)
        state.total_pages = total_pages_for(count, self.page_size)
        return state.total_pages

    async def fetch_page(self, state: PageState, flt: TransactionFilter, page: int) -> bool:
        """Load one page into state.items; returns False if a fetch is already running."""
        if state.is_fetching:
            logger.debug("Dropped fetch of page %s, another fetch is in flight", page)
            return False
        cursor = state.cursors[page - 1] if page - 1 < len(state.cursors) else None
        if page > 1 and cursor is None:
            logger.warning("No cursor for page %s, fetch skipped", page)
            return False
        state.is_fetching = True
        try:
            items = await self.store.fetch_page(self.user_id, flt, cursor, self.page_size)
            if items:
                self._remember_cursor(state, page, cursor_for(items[-1]))
            state.items = items
            state.current_page = page
            return True
        finally:
            state.is_fetching = False

    async def refresh(self, state: PageState, flt: TransactionFilter) -> None:
        await self.update_total_pages(state, flt)
        await self.fetch_page(state, flt, state.current_page)

    async def reset_and_refresh(self, state: PageState, flt: TransactionFilter) -> None:
        state.current_page = 1
        state.cursors = [None]
        await self.refresh(state, flt)

    async def next_page(self, state: PageState, flt: TransactionFilter) -> bool:
        if not state.has_next:
            return False
        return await self.fetch_page(state, flt, state.current_page + 1)

    async def prev_page(self, state: PageState, flt: TransactionFilter) -> bool:
        if not state.has_prev:
            return False
        return await self.fetch_page(state, flt, state.current_page - 1)

    async def refresh_after_delete(self, state: PageState, flt: TransactionFilter) -> None:
        """Rebuild cursors up to the current page after rows were removed."""
        await self.update_total_pages(state, flt)
        if state.current_page > state.total_pages:
            state.current_page = state.total_pages

        state.cursors = [None]
        for page in range(1, state.current_page):
            items = await self.store.fetch_page(self.user_id, flt, state.cursors[page - 1], self.page_size)
            if not items:
                state.current_page = 1
                state.cursors = [None]
                break
            state.cursors.append(cursor_for(items[-1]))

        await self.fetch_page(state, flt, state.current_page)

    @staticmethod
    def _remember_cursor(state: PageState, page: int, cursor: Cursor) -> None:
        if page < len(state.cursors):
            state.cursors[page] = cursor
        else:
            state.cursors.extend([None] * (page - len(state.cursors)))
            state.cursors.append(cursor)
