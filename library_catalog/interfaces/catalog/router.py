"""Server-rendered catalog pages for book instances."""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Form, Request
from fastapi import status as http_status
from fastapi.responses import HTMLResponse, RedirectResponse

from ...infrastructure.logging import get_logger
from ...modules.book.models import Book
from ...modules.book.services import BookService
from ...modules.bookinstance.models import BookInstance, BookInstanceStatus
from ...modules.bookinstance.schemas import BookInstanceForm, parse_book_instance_form
from ...modules.bookinstance.services import BookInstanceService
from ...modules.common.constants import BOOKINSTANCE_LIST_URL, CATALOG_PREFIX
from ...modules.common.exceptions import BookInstanceNotFoundError
from ..dependencies import DbSession, SessionFactory, get_book_service, get_bookinstance_service
from ..templating import templates

router = APIRouter(prefix=CATALOG_PREFIX, tags=["catalog"])

logger = get_logger(__name__)

STATUS_OPTIONS = [choice.value for choice in BookInstanceStatus]


def render_form(
    request: Request,
    title: str,
    books: List[Book],
    bookinstance: Optional[Union[BookInstance, BookInstanceForm]] = None,
    errors: Optional[List[str]] = None,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "bookinstance_form.html",
        {
            "title": title,
            "books": books,
            "bookinstance": bookinstance,
            "statuses": STATUS_OPTIONS,
            "errors": errors or [],
        },
    )


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=http_status.HTTP_302_FOUND)


@router.get("/bookinstances", response_class=HTMLResponse)
async def bookinstance_list(
    request: Request,
    db: DbSession,
    bookinstance_service: BookInstanceService = Depends(get_bookinstance_service),
):
    """Display the list of all book instances."""
    bookinstances = await bookinstance_service.get_book_instances(db)
    return templates.TemplateResponse(
        request,
        "bookinstance_list.html",
        {"title": "Book Instance List", "bookinstance_list": bookinstances},
    )


@router.get("/bookinstance/create", response_class=HTMLResponse)
async def bookinstance_create_get(
    request: Request,
    db: DbSession,
    book_service: BookService = Depends(get_book_service),
):
    """Display the book instance create form."""
    books = await book_service.get_books(db)
    return render_form(request, "Create Book Instance", books)


@router.post("/bookinstance/create", response_class=HTMLResponse)
async def bookinstance_create_post(
    request: Request,
    db: DbSession,
    book: Optional[str] = Form(None),
    imprint: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    due_back: Optional[str] = Form(None),
    bookinstance_service: BookInstanceService = Depends(get_bookinstance_service),
    book_service: BookService = Depends(get_book_service),
):
    """Validate a create submission, then save it or redisplay the form."""
    bookinstance, errors = parse_book_instance_form(book, imprint, status, due_back)

    if errors:
        books = await book_service.get_books(db)
        return render_form(request, "Create Book Instance", books, bookinstance=bookinstance, errors=errors)

    created = await bookinstance_service.create_book_instance(bookinstance, db)
    return redirect(created.url)


@router.get("/bookinstance/{bookinstance_id}/delete", response_class=HTMLResponse)
async def bookinstance_delete_get(
    request: Request,
    bookinstance_id: int,
    db: DbSession,
    bookinstance_service: BookInstanceService = Depends(get_bookinstance_service),
):
    """Display the delete confirmation, or go back to the list if the copy is gone."""
    instance = await bookinstance_service.get_book_instance(bookinstance_id, db)
    if instance is None:
        return redirect(BOOKINSTANCE_LIST_URL)

    return templates.TemplateResponse(
        request,
        "bookinstance_delete.html",
        {"title": "Book Instance Delete", "instance": instance},
    )


@router.post("/bookinstance/{bookinstance_id}/delete")
async def bookinstance_delete_post(
    db: DbSession,
    instanceid: int = Form(...),
    bookinstance_service: BookInstanceService = Depends(get_bookinstance_service),
):
    """Delete the submitted book instance and return to the list."""
    deleted = await bookinstance_service.delete_book_instance(instanceid, db)
    if not deleted:
        logger.info(f"Book instance {instanceid} was already deleted")
    return redirect(BOOKINSTANCE_LIST_URL)


@router.get("/bookinstance/{bookinstance_id}/update", response_class=HTMLResponse)
async def bookinstance_update_get(
    request: Request,
    bookinstance_id: int,
    sessions: SessionFactory,
    bookinstance_service: BookInstanceService = Depends(get_bookinstance_service),
):
    """Display the update form for an existing book instance."""
    form_data = await bookinstance_service.get_update_form_data(bookinstance_id, sessions)
    if form_data.bookinstance is None:
        raise BookInstanceNotFoundError("Book Instance not found")

    return render_form(request, "Update Book Instance", form_data.books, bookinstance=form_data.bookinstance)


@router.post("/bookinstance/{bookinstance_id}/update", response_class=HTMLResponse)
async def bookinstance_update_post(
    request: Request,
    bookinstance_id: int,
    db: DbSession,
    book: Optional[str] = Form(None),
    imprint: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    due_back: Optional[str] = Form(None),
    bookinstance_service: BookInstanceService = Depends(get_bookinstance_service),
    book_service: BookService = Depends(get_book_service),
):
    """Validate an update submission, then apply it or redisplay the form."""
    bookinstance, errors = parse_book_instance_form(book, imprint, status, due_back)

    if errors:
        books = await book_service.get_books(db)
        return render_form(request, "Update Book Instance", books, bookinstance=bookinstance, errors=errors)

    updated = await bookinstance_service.update_book_instance(bookinstance_id, bookinstance, db)
    return redirect(updated.url)


@router.get("/bookinstance/{bookinstance_id}", response_class=HTMLResponse)
async def bookinstance_detail(
    request: Request,
    bookinstance_id: int,
    db: DbSession,
    bookinstance_service: BookInstanceService = Depends(get_bookinstance_service),
):
    """Display the detail page of a book instance."""
    bookinstance = await bookinstance_service.get_book_instance(bookinstance_id, db)
    if bookinstance is None:
        raise BookInstanceNotFoundError("Book copy not found")

    return templates.TemplateResponse(
        request,
        "bookinstance_detail.html",
        {"title": f"Copy: {bookinstance.book.title}", "bookinstance": bookinstance},
    )
