"""
Async SQLAlchemy setup: engine, session factory, declarative base, and the
per-request session dependency.

One request, one transaction:
  get_db() hands each request a single AsyncSession. Everything the request
  writes (for a transfer: two ledger entries and two balance changes) is
  committed together when the handler returns, and rolled back together
  when anything raises, domain errors included.

The default URL points at a local SQLite file through aiosqlite. Any async
driver URL works (e.g. postgresql+asyncpg://...).
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from neobank.config import settings


# DEBUG also echoes SQL to the log
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

# Objects stay readable after commit; with expiry on, touching an attribute
# would trigger a lazy refresh, which async sessions cannot do implicitly.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for every ORM model."""


async def get_db():
    """
    Yield the request's session; commit on success, roll back on any error.

        @router.get("/balance")
        async def get_balance(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
