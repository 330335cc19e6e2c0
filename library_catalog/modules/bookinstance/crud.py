"""CRUD operations for book instances using FastCRUD."""

from fastcrud import FastCRUD

from .models import BookInstance

bookinstance_crud: FastCRUD = FastCRUD(BookInstance)
