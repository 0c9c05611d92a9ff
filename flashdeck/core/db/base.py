from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base

from flashdeck.core.config import settings
from flashdeck.core.logging import get_logger

from typing import AsyncIterator


Base = declarative_base()


connection_string = str(settings.database.connection_string)

engine = create_async_engine(
    connection_string,
    echo=settings.database.echo,
    pool_pre_ping=True,
)

async_session_maker = async_sessionmaker(
    engine,
    expire_on_commit=False,
)


logger = get_logger(__name__)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Session rolled back due to error: {e}")
            raise


async def create_all() -> None:
    """Create tables for every registered model (dev and tests; prod uses alembic)."""
    import flashdeck.core.db.schemas  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
