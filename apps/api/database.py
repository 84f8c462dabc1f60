"""
Async database engine, session factory and declarative base.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from config import settings


Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def install_sqlite_pragmas(target: AsyncEngine) -> AsyncEngine:
    """Turn on FK enforcement for SQLite so ON DELETE CASCADE is honoured."""
    if target.dialect.name == "sqlite":
        event.listen(target.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return target


engine = install_sqlite_pragmas(
    create_async_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO, future=True)
)

async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """FastAPI dependency yielding one session per request."""
    async with async_session_maker() as session:
        yield session
