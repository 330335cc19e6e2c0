"""Script to create the catalog tables from the SQLAlchemy models."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from library_catalog.infrastructure.database.session import create_tables  # noqa: E402
from library_catalog.infrastructure.logging import get_logger  # noqa: E402
from library_catalog.modules.book.models import Book  # noqa: E402, F401
from library_catalog.modules.bookinstance.models import BookInstance  # noqa: E402, F401

logger = get_logger(__name__)


async def main() -> None:
    """Create database tables."""
    logger.info("Creating catalog tables...")

    try:
        await create_tables()
        logger.info("Catalog tables created successfully")
    except Exception as e:
        logger.error(f"Error creating catalog tables: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
