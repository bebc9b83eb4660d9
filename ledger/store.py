"""Per-user transaction persistence on top of the async SQLAlchemy session.

Pages are ordered by (date desc, created_at desc, id desc) and fetched with a
keyset condition on that same tuple, so a page boundary is identified by the
last row of the previous page rather than by an offset.
"""
from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledger.dates import end_of_day, start_of_day, timezone_safe_datetime
from ledger.db import TransactionRecord
from ledger.domain import INCOME, EXPENSE, Cursor, Transaction, TransactionDraft, TransactionFilter

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class TransactionNotFound(LookupError):
    pass


def to_transaction(rec: TransactionRecord) -> Transaction:
    return Transaction(
        id=rec.id,
        description=rec.description,
        amount=Decimal(rec.amount).quantize(CENTS),
        date=rec.date.date(),
        type=rec.type,
        category=rec.category if rec.type == EXPENSE else None,
        created_at=rec.created_at,
    )


def cursor_for(t: Transaction) -> Cursor:
    return Cursor(date=timezone_safe_datetime(t.date), created_at=t.created_at, id=t.id)


def _filter_clauses(user_id: str, flt: Optional[TransactionFilter]) -> list:
    clauses = [TransactionRecord.user_id == user_id]
    if flt is None:
        return clauses
    if flt.type in (INCOME, EXPENSE):
        clauses.append(TransactionRecord.type == flt.type)
    category = flt.category_constraint
    if category is not None:
        clauses.append(TransactionRecord.category == category)
    return clauses


def _after(cursor: Cursor):
    rec = TransactionRecord
    return or_(
        rec.date < cursor.date,
        and_(rec.date == cursor.date, rec.created_at < cursor.created_at),
        and_(rec.date == cursor.date, rec.created_at == cursor.created_at, rec.id < cursor.id),
    )


class TransactionStore:

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def add(self, user_id: str, draft: TransactionDraft) -> Transaction:
        async with self._session_factory() as session:
            rec = TransactionRecord(
                user_id=user_id,
                description=draft.description,
                amount=draft.amount,
                date=timezone_safe_datetime(draft.date),
                type=draft.type,
                category=draft.category if draft.type == EXPENSE else None,
            )
            session.add(rec)
            await session.commit()
            await session.refresh(rec)
            logger.info("Added %s transaction %s for user %s", rec.type, rec.id, user_id)
            return to_transaction(rec)

    async def get(self, user_id: str, tx_id: int) -> Optional[Transaction]:
        async with self._session_factory() as session:
            rec = await session.get(TransactionRecord, tx_id)
            if rec is None or rec.user_id != user_id:
                return None
            return to_transaction(rec)

    async def update(self, user_id: str, tx_id: int, draft: TransactionDraft) -> Transaction:
        async with self._session_factory() as session:
            rec = await session.get(TransactionRecord, tx_id)
            if rec is None or rec.user_id != user_id:
                raise TransactionNotFound(tx_id)
            rec.description = draft.description
            rec.amount = draft.amount
            rec.date = timezone_safe_datetime(draft.date)
            rec.type = draft.type
            rec.category = draft.category if draft.type == EXPENSE else None
            await session.commit()
            await session.refresh(rec)
            logger.info("Updated transaction %s for user %s", tx_id, user_id)
            return to_transaction(rec)

    async def delete(self, user_id: str, tx_id: int) -> bool:
        async with self._session_factory() as session:
            res = await session.execute(
                delete(TransactionRecord).where(
                    TransactionRecord.id == tx_id,
                    TransactionRecord.user_id == user_id,
                )
            )
            await session.commit()
            deleted = res.rowcount > 0
            logger.info("Deleted transaction %s for user %s: %s", tx_id, user_id, deleted)
            return deleted

    async def count(self, user_id: str, flt: Optional[TransactionFilter] = None) -> int:
        async with self._session_factory() as session:
            res = await session.execute(
                select(func.count(TransactionRecord.id)).where(*_filter_clauses(user_id, flt))
            )
            return int(res.scalar_one())

    async def sum_amount(self, user_id: str, tx_type: str) -> Decimal:
        async with self._session_factory() as session:
            res = await session.execute(
                select(func.sum(TransactionRecord.amount)).where(
                    TransactionRecord.user_id == user_id,
                    TransactionRecord.type == tx_type,
                )
            )
            total = res.scalar_one_or_none()
            return Decimal(total or 0).quantize(CENTS)

    async def fetch_page(
        self,
        user_id: str,
        flt: Optional[TransactionFilter],
        after: Optional[Cursor],
        limit: int,
    ) -> list[Transaction]:
        stmt = select(TransactionRecord).where(*_filter_clauses(user_id, flt))
        if after is not None:
            stmt = stmt.where(_after(after))
        stmt = stmt.order_by(
            TransactionRecord.date.desc(),
            TransactionRecord.created_at.desc(),
            TransactionRecord.id.desc(),
        ).limit(limit)
        async with self._session_factory() as session:
            res = await session.execute(stmt)
            return [to_transaction(rec) for rec in res.scalars().all()]

    async def fetch_range(self, user_id: str, start: dt.date, end: dt.date) -> list[Transaction]:
        async with self._session_factory() as session:
            res = await session.execute(
                select(TransactionRecord)
                .where(
                    TransactionRecord.user_id == user_id,
                    TransactionRecord.date >= start_of_day(start),
                    TransactionRecord.date <= end_of_day(end),
                )
                .order_by(TransactionRecord.date.asc(), TransactionRecord.created_at.asc(), TransactionRecord.id.asc())
            )
            return [to_transaction(rec) for rec in res.scalars().all()]
