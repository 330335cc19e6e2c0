"""Book lookups used to populate the book instance forms."""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Book
from .schemas import BookCreate


class BookService:
    """Read access to catalog books."""

    async def get_books(self, db: AsyncSession) -> List[Book]:
        """Get every book, in store order."""
        result = await db.execute(select(Book).order_by(Book.id))
        return list(result.scalars().all())

    async def create_book(self, book_data: BookCreate, db: AsyncSession) -> Book:
        book = Book(**book_data.model_dump())
        db.add(book)
        await db.commit()
        await db.refresh(book)
        return book
