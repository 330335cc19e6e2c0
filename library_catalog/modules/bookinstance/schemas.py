"""Validation and sanitization of submitted book instance forms."""

from datetime import date, datetime
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from .models import BookInstanceStatus

_HTML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        '"': "&quot;",
        "'": "&#x27;",
        "<": "&lt;",
        ">": "&gt;",
        "/": "&#x2F;",
        "\\": "&#x5C;",
        "`": "&#96;",
    }
)

STATUS_CHOICES = [status.value for status in BookInstanceStatus]


def escape(value: str) -> str:
    """HTML-escape a submitted value so it is safe to re-display."""
    return value.translate(_HTML_ESCAPES)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _parse_due_back(value: Any) -> Optional[date]:
    """Parse an ISO-8601 date or date-time; empty values mean "not on loan"."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise PydanticCustomError("invalid_due_back", "Due back must be a valid date.")


class BookInstanceForm(BaseModel):
    """Sanitized fields of a book instance create/update submission.

    Field validators run in declaration order, so validation messages come
    out in form order: book, imprint, status, due back.
    """

    book: int
    imprint: str
    status: str
    due_back: Optional[date] = None

    @property
    def book_id(self) -> Optional[int]:
        return self.book

    @field_validator("book", mode="before")
    @classmethod
    def validate_book(cls, v: Any) -> int:
        value = escape(_as_text(v))
        if not value:
            raise PydanticCustomError("empty_book", "Book must not be empty.")
        if not value.isdecimal():
            raise PydanticCustomError("invalid_book", "Book must be a valid catalog book.")
        return int(value)

    @field_validator("imprint", mode="before")
    @classmethod
    def validate_imprint(cls, v: Any) -> str:
        value = _as_text(v).strip()
        if len(value) < 1:
            raise PydanticCustomError("empty_imprint", "Imprint must not be empty.")
        return escape(value)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> str:
        value = _as_text(v).strip()
        if len(value) < 1:
            raise PydanticCustomError("empty_status", "Status must not be empty.")
        if value not in STATUS_CHOICES:
            raise PydanticCustomError(
                "invalid_status",
                "Status must be one of: {choices}.",
                {"choices": ", ".join(STATUS_CHOICES)},
            )
        return escape(value)

    @field_validator("due_back", mode="before")
    @classmethod
    def validate_due_back(cls, v: Any) -> Optional[date]:
        return _parse_due_back(v)

    def to_internal(self) -> "BookInstanceCreateInternal":
        """Column values for the store."""
        return BookInstanceCreateInternal(
            book_id=self.book,
            imprint=self.imprint,
            status=self.status,
            due_back=self.due_back,
        )


class BookInstanceCreateInternal(BaseModel):
    book_id: int
    imprint: str
    status: str
    due_back: Optional[date] = None


def parse_book_instance_form(
    book: Optional[str],
    imprint: Optional[str],
    status: Optional[str],
    due_back: Optional[str],
) -> Tuple[BookInstanceForm, List[str]]:
    """Validate a submission.

    Returns:
        The candidate instance and the ordered validation messages. When
        the messages are non-empty the candidate is built without
        validation from the sanitized raw values, for re-display only; a
        book that is not a catalog id is left unselected.
    """
    try:
        return BookInstanceForm(book=book, imprint=imprint, status=status, due_back=due_back), []
    except ValidationError as exc:
        messages = [error["msg"] for error in exc.errors()]

    book_text = escape(_as_text(book))
    candidate = BookInstanceForm.model_construct(
        book=int(book_text) if book_text.isdecimal() else None,
        imprint=escape(_as_text(imprint).strip()),
        status=escape(_as_text(status).strip()),
        due_back=_as_text(due_back).strip() or None,
    )
    return candidate, messages
