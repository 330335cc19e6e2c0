"""Infrastructure module for the application."""

from .config import get_settings
from .database.session import async_session, create_tables, get_session_factory

__all__ = [
    "async_session",
    "create_tables",
    "get_session_factory",
    "get_settings",
]
