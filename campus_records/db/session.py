from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from campus_records.core.config import settings

# pool_pre_ping: check connection is alive before use, so a batch does not start on a
# connection the server already closed.
# pool_recycle: discard connections older than DB_POOL_RECYCLE_SECONDS.
engine = create_async_engine(
    settings.database_url,
    echo=settings.sql_echo,
    future=True,
    pool_pre_ping=settings.db_pool_pre_ping,
    pool_recycle=settings.db_pool_recycle_seconds,
)

# expire_on_commit=False: batch outcomes are built from snapshots and returned after commit.
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    """One session per request; it is the transaction handle the progression service works in."""
    async with AsyncSessionLocal() as session:
        yield session
