"""Test configuration and fixtures for the library catalog."""

import os

os.environ.setdefault("ENVIRONMENT", "local")
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["LOG_CONSOLE_ENABLED"] = "false"

from datetime import date  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from library_catalog.infrastructure.database.session import Base, async_session, get_session_factory  # noqa: E402
from library_catalog.infrastructure.logging import configure_logging, configure_testing_logging  # noqa: E402
from library_catalog.interfaces.main import app  # noqa: E402
from library_catalog.modules.book.models import Book  # noqa: E402
from library_catalog.modules.book.schemas import BookCreate  # noqa: E402
from library_catalog.modules.book.services import BookService  # noqa: E402
from library_catalog.modules.bookinstance.models import BookInstance  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    """Keep test output free of application logs."""
    configure_logging()
    configure_testing_logging()


@pytest_asyncio.fixture(scope="function")
async def test_db_engine(tmp_path):
    """Create a throwaway SQLite catalog for a single test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_db_engine):
    return async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory):
    """Create a test client where every request gets its own session."""
    app.dependency_overrides = {}

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[async_session] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest_asyncio.fixture
async def test_book(db_session: AsyncSession):
    """Create a test book."""
    book = Book(title="The Name of the Wind", summary="The first day of a long story", isbn="9780756404741")
    db_session.add(book)
    await db_session.commit()
    return {"id": book.id, "title": book.title}


@pytest_asyncio.fixture
async def test_book_2(db_session: AsyncSession):
    """Create a second test book for testing updates."""
    book = await BookService().create_book(BookCreate(title="Apes and Angels", isbn="9780765379528"), db_session)
    return {"id": book.id, "title": book.title}


@pytest_asyncio.fixture
async def test_bookinstance(db_session: AsyncSession, test_book: dict):
    """Create an available copy of the test book."""
    instance = BookInstance(book_id=test_book["id"], imprint="Gollancz, 2011.", status="Available")
    db_session.add(instance)
    await db_session.commit()
    return {
        "id": instance.id,
        "book_id": instance.book_id,
        "imprint": instance.imprint,
        "status": instance.status,
        "due_back": instance.due_back,
        "url": instance.url,
    }


@pytest_asyncio.fixture
async def loaned_bookinstance(db_session: AsyncSession, test_book: dict):
    """Create a copy of the test book that is out on loan."""
    instance = BookInstance(
        book_id=test_book["id"], imprint="DAW, 2012.", status="Loaned", due_back=date(2025, 3, 14)
    )
    db_session.add(instance)
    await db_session.commit()
    return {
        "id": instance.id,
        "book_id": instance.book_id,
        "imprint": instance.imprint,
        "status": instance.status,
        "due_back": instance.due_back,
        "url": instance.url,
    }
