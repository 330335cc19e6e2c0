"""Book instance persistence operations for the catalog controller."""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from ...infrastructure.logging import get_logger
from ..book.models import Book
from ..book.services import BookService
from ..common.constants import MAX_STORE_ID
from ..common.exceptions import BookInstanceNotFoundError
from .crud import bookinstance_crud
from .models import BookInstance
from .schemas import BookInstanceForm

logger = get_logger(__name__)


def is_storable_id(instance_id: int) -> bool:
    """Whether ``instance_id`` fits the store's primary key column."""
    return 1 <= instance_id <= MAX_STORE_ID


@dataclass
class BookInstanceFormData:
    """Result of the concurrent reads behind the update form."""

    bookinstance: Optional[BookInstance]
    books: List[Book] = field(default_factory=list)


class BookInstanceService:
    """Service for managing physical copies of catalog books.

    Read operations always load the referenced book alongside each copy.
    Ids outside the primary key range are treated as missing copies.
    Store errors are not caught here; they propagate to the caller.
    """

    def __init__(self, book_service: Optional[BookService] = None):
        self.book_service = book_service or BookService()

    async def get_book_instances(self, db: AsyncSession) -> List[BookInstance]:
        """Get every book instance with its book, in store order."""
        stmt = select(BookInstance).options(selectinload(BookInstance.book)).order_by(BookInstance.id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_book_instance(self, instance_id: int, db: AsyncSession) -> Optional[BookInstance]:
        """Get a book instance with its book.

        Returns:
            The book instance, or None if it does not exist
        """
        if not is_storable_id(instance_id):
            return None

        stmt = (
            select(BookInstance)
            .options(selectinload(BookInstance.book))
            .where(BookInstance.id == instance_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_book_instance(self, form: BookInstanceForm, db: AsyncSession) -> BookInstance:
        """Persist a validated book instance.

        Args:
            form: Validated and sanitized submission
            db: Database session

        Returns:
            The stored book instance, with its generated id
        """
        created = BookInstance(**form.to_internal().model_dump())
        db.add(created)
        await db.commit()
        await db.refresh(created)
        logger.info("Book instance created", extra={"bookinstance_id": created.id, "book_id": created.book_id})
        return created

    async def update_book_instance(self, instance_id: int, form: BookInstanceForm, db: AsyncSession) -> BookInstance:
        """Update a book instance in place.

        Raises:
            BookInstanceNotFoundError: If no book instance has this id
        """
        if not is_storable_id(instance_id) or not await bookinstance_crud.exists(db=db, id=instance_id):
            raise BookInstanceNotFoundError("Book Instance not found")

        await bookinstance_crud.update(db=db, object=form.to_internal(), id=instance_id)
        logger.info("Book instance updated", extra={"bookinstance_id": instance_id})

        updated = await self.get_book_instance(instance_id, db)
        if updated is None:
            raise BookInstanceNotFoundError("Book Instance not found")
        return updated

    async def delete_book_instance(self, instance_id: int, db: AsyncSession) -> bool:
        """Delete a book instance.

        Returns:
            True if a book instance was removed, False if none existed
        """
        if not is_storable_id(instance_id) or not await bookinstance_crud.exists(db=db, id=instance_id):
            return False

        await bookinstance_crud.delete(db=db, id=instance_id)
        logger.info("Book instance deleted", extra={"bookinstance_id": instance_id})
        return True

    async def get_update_form_data(
        self, instance_id: int, sessions: async_sessionmaker[AsyncSession]
    ) -> BookInstanceFormData:
        """Fetch the book instance and the book list concurrently.

        Each read gets its own session. The first failure propagates; the
        other read's result is discarded.
        """

        async def fetch_instance() -> Optional[BookInstance]:
            async with sessions() as db:
                return await self.get_book_instance(instance_id, db)

        async def fetch_books() -> List[Book]:
            async with sessions() as db:
                return await self.book_service.get_books(db)

        bookinstance, books = await asyncio.gather(fetch_instance(), fetch_books())
        return BookInstanceFormData(bookinstance=bookinstance, books=books)
