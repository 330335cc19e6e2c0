from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from ..config.settings import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    pool_size=settings.POSTGRES_POOL_SIZE,
    max_overflow=settings.POSTGRES_MAX_OVERFLOW,
)

local_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase, MappedAsDataclass):
    """Declarative base for the catalog models.

    Combines SQLAlchemy's DeclarativeBase with MappedAsDataclass, so every
    model gets a generated ``__init__``/``__repr__`` built from its mapped
    columns. Columns declared with ``init=False`` (generated keys,
    timestamps, relationships) are left out of the constructor.

    Example:
        ```python
        class Book(Base):
            __tablename__ = "books"

            id: Mapped[int] = mapped_column(Integer, primary_key=True, init=False)
            title: Mapped[str] = mapped_column(String(255))

        book = Book(title="The Name of the Wind")
        ```
    """

    pass


async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped database session dependency.

    Yields:
        AsyncSession: A session that is closed when the request finishes.

    Note:
        Use it through ``Depends(async_session)``. A single session must not
        be used by concurrent tasks; handlers that fan out reads take
        :func:`get_session_factory` instead and open one session per task.
    """
    async_get_db = local_session
    async with async_get_db() as db:
        yield db


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Dependency providing the session factory for concurrent reads."""
    return local_session


async def create_tables() -> None:
    """Create all catalog tables that don't exist yet.

    Idempotent: existing tables are left unchanged. Schema changes on an
    existing database are not handled here.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
