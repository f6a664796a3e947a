import logging
from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.database_url, echo=False)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session.

    Depend on it through ``DbSession`` so the teardown runs before the response
    is sent: the transaction is committed once the endpoint returns, and rolled
    back on any error, cancellation included. A failed commit surfaces as
    ``StorageError`` rather than a success status.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except BaseException:
            await session.rollback()
            logger.debug("Session rolled back")
            raise

        try:
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Commit failed", extra={"error": str(exc)})
            raise StorageError("commit") from exc
