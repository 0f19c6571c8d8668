from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from teamspace.core.config import settings, isDebugMode
from teamspace.logging import get_logger

logger = get_logger(__name__)


def build_engine(database_url: str = None):
    """Create the async engine (and its connection pool) for the given URL."""
    url = database_url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        return create_async_engine(url, future=True, echo=False)
    return create_async_engine(url, future=True, echo=False, pool_pre_ping=True)


if isDebugMode():
    logger.info("Using development database", url=settings.DATABASE_URL.split("@")[-1])

engine = build_engine()
SessionAsync = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_all_tables(bind=None) -> None:
    """Create every table registered on Base (development only, use migrations in production)."""
    from teamspace.db.base import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
