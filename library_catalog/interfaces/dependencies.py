"""FastAPI dependencies shared by the catalog routes."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..infrastructure.database import async_session, get_session_factory
from ..modules.book.services import BookService
from ..modules.bookinstance.services import BookInstanceService

DbSession = Annotated[AsyncSession, Depends(async_session)]
SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]


def get_book_service() -> BookService:
    """Dependency for providing a BookService instance."""
    return BookService()


def get_bookinstance_service() -> BookInstanceService:
    """Dependency for providing a BookInstanceService instance."""
    return BookInstanceService()
