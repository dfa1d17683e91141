from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from newsdesk.config import settings
from newsdesk.errors import StorageError
from newsdesk.middleware import install_query_counter


def engine_options(url: str) -> dict:
    """Pool sizing for the given URL; SQLite pools take no sizing arguments."""
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
    }


# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    **engine_options(settings.DATABASE_URL),
)

install_query_counter(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db():
    """
    Request-scoped session; the request is the transaction boundary.

    Write routes call ``commit`` themselves before returning.  The commit
    after ``yield`` only runs once the response is on its way, so anything
    left pending there cannot be reported to the client.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def commit(session: AsyncSession) -> None:
    """
    Commit before the route returns, so a failed commit becomes a 500
    instead of a success response for a write that was rolled back.
    """
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise StorageError("Failed to commit transaction") from exc
