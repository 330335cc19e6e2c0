from .session import Base, async_session, create_tables, get_session_factory, local_session

__all__ = [
    "Base",
    "async_session",
    "create_tables",
    "get_session_factory",
    "local_session",
]
