import pytest_asyncio

from ledger.db import init_db, make_engine, make_session_factory
from ledger.store import TransactionStore


@pytest_asyncio.fixture
async def store(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await init_db(engine)
    yield TransactionStore(make_session_factory(engine))
    await engine.dispose()
