"""Book instance module: physical copies of catalog books."""

from .models import BookInstance, BookInstanceStatus
from .schemas import BookInstanceForm, parse_book_instance_form
from .services import BookInstanceFormData, BookInstanceService

__all__ = [
    "BookInstance",
    "BookInstanceStatus",
    "BookInstanceForm",
    "BookInstanceFormData",
    "BookInstanceService",
    "parse_book_instance_form",
]
