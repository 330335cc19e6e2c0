"""Pydantic schemas for books."""

from typing import Annotated, Optional

from pydantic import BaseModel, Field


class BookCreate(BaseModel):
    """Schema for creating a book."""

    title: Annotated[str, Field(min_length=1, max_length=255, description="Book title")]
    summary: Optional[str] = Field(default=None, max_length=2000)
    isbn: Optional[str] = Field(default=None, max_length=20)
