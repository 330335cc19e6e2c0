"""Map domain and store exceptions to rendered error pages."""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError

from ....infrastructure.config.settings import get_settings
from ....infrastructure.logging import get_logger
from ..constants import EXCEPTION_MAPPING
from ..exceptions import DomainError

logger = get_logger(__name__)


def map_exception(error: DomainError) -> HTTPException:
    """Map a domain exception to a corresponding HTTP exception."""
    for exception_class, mapper in EXCEPTION_MAPPING.items():
        if isinstance(error, exception_class):
            return mapper(str(error))

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"An unexpected error occurred: {str(error)}"
    )


def register_exception_handlers(app: FastAPI, templates: Jinja2Templates) -> None:
    """Register the upstream error handlers the catalog handlers forward to.

    Domain errors are rendered with the status from ``EXCEPTION_MAPPING``.
    Store failures are logged with their traceback and rendered as a 500;
    the underlying message is only shown when ``DEBUG`` is on. Malformed
    path or form parameters render the same page with a 422.
    """

    def render_error(request: Request, status_code: int, message: str) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            "error.html",
            {"title": "Error", "message": message, "status_code": status_code},
            status_code=status_code,
        )

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError) -> HTMLResponse:
        http_exception = map_exception(exc)
        logger.info(
            f"{request.method} {request.url.path} -> {http_exception.status_code}: {http_exception.detail}",
        )
        return render_error(request, http_exception.status_code, str(http_exception.detail))

    @app.exception_handler(SQLAlchemyError)
    async def store_exception_handler(request: Request, exc: SQLAlchemyError) -> HTMLResponse:
        logger.error(f"Store failure on {request.method} {request.url.path}", exc_info=exc)
        message = str(exc) if get_settings().DEBUG else "Internal Server Error"
        return render_error(request, status.HTTP_500_INTERNAL_SERVER_ERROR, message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> HTMLResponse:
        logger.info(f"{request.method} {request.url.path} -> 422: {exc.errors()}")
        message = str(exc.errors()) if get_settings().DEBUG else "Invalid request"
        return render_error(request, 422, message)
