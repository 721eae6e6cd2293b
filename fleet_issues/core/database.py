import logging

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from fleet_issues.core.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    echo=settings.SQL_ECHO,
    future=True
)

SessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)

Base = declarative_base()


def make_session_dependency(session_factory):
    """
    One session per request. The handler's writes are committed together once it
    returns, and rolled back if anything raises (quota refusals included).
    """
    async def get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return get_session


get_db = make_session_dependency(SessionLocal)


async def init_models(bind=None):
    """
    Creates tables in the database if they don't exist.
    """
    async with (bind or engine).begin() as conn:
        # Register every mapped table on Base.metadata
        from fleet_issues.models import associations, issue, password_reset, user, vessel  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)
        logger.info("✅ Fleet database tables ready")
