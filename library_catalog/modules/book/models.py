"""SQLAlchemy models for catalog books."""

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class Book(Base, TimestampMixin):
    """A catalog title. Physical copies are tracked as book instances."""

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    title: Mapped[str] = mapped_column(String(255), index=True)
    summary: Mapped[Optional[str]] = mapped_column(String(2000), default=None)
    isbn: Mapped[Optional[str]] = mapped_column(String(20), default=None)
