from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.responses import RedirectResponse

from ..infrastructure.app_factory import create_application, lifespan_factory
from ..infrastructure.config.settings import get_settings
from ..modules.common.constants import BOOKINSTANCE_LIST_URL
from .api import router as api_router
from .catalog import router as catalog_router
from .templating import static_dir, templates

settings = get_settings()


@asynccontextmanager
async def catalog_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Default lifespan: logging setup and table creation."""
    default_lifespan = lifespan_factory(settings, create_tables_on_startup=settings.CREATE_TABLES_ON_STARTUP)
    async with default_lifespan(app):
        yield


router = APIRouter()
router.include_router(api_router)
router.include_router(catalog_router)


@router.get("/", include_in_schema=False)
async def index() -> RedirectResponse:
    """The catalog home is the book instance list."""
    return RedirectResponse(BOOKINSTANCE_LIST_URL, status_code=302)


app = create_application(
    router=router,
    templates=templates,
    settings=settings,
    lifespan=catalog_lifespan,
    static_dir=static_dir,
    summary="Server-rendered catalog of physical book copies",
)
