"""Common constants used across the application."""

from typing import Callable, Dict, Type

from fastapi import HTTPException, status

from .exceptions import DomainError, ResourceNotFoundError

EXCEPTION_MAPPING: Dict[Type[DomainError], Callable[[str], HTTPException]] = {
    ResourceNotFoundError: lambda message: HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message),
}

CATALOG_PREFIX = "/catalog"
BOOKINSTANCE_LIST_URL = f"{CATALOG_PREFIX}/bookinstances"

# Largest value of the store's INTEGER primary keys
MAX_STORE_ID = 2**31 - 1
