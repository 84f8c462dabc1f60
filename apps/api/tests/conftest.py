import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from database import Base, install_sqlite_pragmas
from main import app
from routers import rate_limit
from services.blob_store import BlobStore


@pytest.fixture(autouse=True)
def reset_local_rate_limit_counters():
    """Keep in-memory rate-limit state isolated between tests."""
    previous = getattr(app.state, "disable_rate_limits", False)
    app.state.disable_rate_limits = True
    rate_limit._local_counters.clear()
    yield
    rate_limit._local_counters.clear()
    app.state.disable_rate_limits = previous


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    """Session factory bound to a fresh SQLite file with FK enforcement on."""
    db_path = tmp_path / "videoshare.db"
    engine = install_sqlite_pragmas(create_async_engine(f"sqlite+aiosqlite:///{db_path}"))
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield maker
    await engine.dispose()


@pytest.fixture
def blob_store(tmp_path):
    root = tmp_path / "uploads"
    root.mkdir()
    return BlobStore(root, "/uploads")
