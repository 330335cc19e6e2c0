"""SQLAlchemy models for book instances (physical copies of a book)."""

from datetime import date
from enum import Enum
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base
from ..book.models import Book
from ..common.constants import CATALOG_PREFIX


class BookInstanceStatus(str, Enum):
    """Lending states of a physical copy."""

    AVAILABLE = "Available"
    MAINTENANCE = "Maintenance"
    LOANED = "Loaned"
    RESERVED = "Reserved"


class BookInstance(Base, TimestampMixin):
    """A physical copy of a catalog book.

    ``due_back`` is only set while the copy is on loan. The referenced book
    is exposed as ``book``; read queries load it eagerly.
    """

    __tablename__ = "book_instances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id"), index=True)
    imprint: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(32), default=BookInstanceStatus.MAINTENANCE.value)
    due_back: Mapped[Optional[date]] = mapped_column(Date, default=None)

    book: Mapped[Book] = relationship(init=False, lazy="raise", repr=False, compare=False)

    @property
    def url(self) -> str:
        """Canonical path of the copy's detail page."""
        return f"{CATALOG_PREFIX}/bookinstance/{self.id}"

    @property
    def due_back_formatted(self) -> str:
        return self.due_back.strftime("%b %d, %Y") if self.due_back else ""
