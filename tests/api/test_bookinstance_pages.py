"""Tests for the book instance catalog pages."""

import asyncio
import html
import re
from datetime import date
from typing import Any, Dict

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from library_catalog.interfaces.dependencies import get_bookinstance_service
from library_catalog.interfaces.main import app
from library_catalog.modules.book.services import BookService
from library_catalog.modules.bookinstance.services import BookInstanceService

LIST_URL = "/catalog/bookinstances"
CREATE_URL = "/catalog/bookinstance/create"


async def fetch_instance(session_factory: async_sessionmaker[AsyncSession], instance_id: int):
    async with session_factory() as db:
        return await BookInstanceService().get_book_instance(instance_id, db)


class TestBookInstanceList:
    """Tests for the book instance list page."""

    @pytest.mark.asyncio
    async def test_list_empty(self, client: AsyncClient):
        response = await client.get(LIST_URL)

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "<title>Book Instance List</title>" in response.text
        assert "There are no book copies in this library." in response.text

    @pytest.mark.asyncio
    async def test_list_shows_copies_with_their_book(
        self, client: AsyncClient, test_bookinstance: Dict[str, Any], loaned_bookinstance: Dict[str, Any]
    ):
        response = await client.get(LIST_URL)

        assert response.status_code == 200
        assert f'href="{test_bookinstance["url"]}"' in response.text
        assert f'href="{loaned_bookinstance["url"]}"' in response.text
        assert "The Name of the Wind : Gollancz, 2011." in response.text
        assert "(Due: Mar 14, 2025)" in response.text
        assert "There are no book copies in this library." not in response.text


class TestBookInstanceDetail:
    """Tests for the book instance detail page."""

    @pytest.mark.asyncio
    async def test_detail(self, client: AsyncClient, loaned_bookinstance: Dict[str, Any]):
        response = await client.get(loaned_bookinstance["url"])

        assert response.status_code == 200
        assert "<title>Copy: The Name of the Wind</title>" in response.text
        assert f"ID: {loaned_bookinstance['id']}" in response.text
        assert "DAW, 2012." in response.text
        assert "Loaned" in response.text
        assert "Mar 14, 2025" in response.text
        assert f'{loaned_bookinstance["url"]}/delete' in response.text
        assert f'{loaned_bookinstance["url"]}/update' in response.text

    @pytest.mark.asyncio
    async def test_detail_not_found(self, client: AsyncClient):
        response = await client.get("/catalog/bookinstance/99999")

        assert response.status_code == 404
        assert "Book copy not found" in response.text

    @pytest.mark.asyncio
    async def test_detail_invalid_id(self, client: AsyncClient):
        response = await client.get("/catalog/bookinstance/not-a-number")

        assert response.status_code == 422
        assert "text/html" in response.headers["content-type"]
        assert "Invalid request" in response.text

    @pytest.mark.asyncio
    async def test_detail_id_beyond_key_range(self, client: AsyncClient):
        response = await client.get("/catalog/bookinstance/99999999999999999999")

        assert response.status_code == 404
        assert "Book copy not found" in response.text


class TestBookInstanceCreate:
    """Tests for creating book instances through the form."""

    @pytest.mark.asyncio
    async def test_create_form_lists_books(
        self, client: AsyncClient, test_book: Dict[str, Any], test_book_2: Dict[str, Any]
    ):
        response = await client.get(CREATE_URL)

        assert response.status_code == 200
        assert "<title>Create Book Instance</title>" in response.text
        assert f'value="{test_book["id"]}"' in response.text
        assert f'value="{test_book_2["id"]}"' in response.text
        assert "The Name of the Wind" in response.text
        assert "Apes and Angels" in response.text
        for status in ("Available", "Maintenance", "Loaned", "Reserved"):
            assert f'value="{status}"' in response.text
        assert 'class="errors"' not in response.text

    @pytest.mark.asyncio
    async def test_create_success(
        self, client: AsyncClient, session_factory: async_sessionmaker[AsyncSession], test_book: Dict[str, Any]
    ):
        form = {"book": str(test_book["id"]), "imprint": "  Tor, 2007.  ", "status": "Loaned", "due_back": "2025-06-01"}

        response = await client.post(CREATE_URL, data=form)

        assert response.status_code == 302
        location = response.headers["location"]
        assert location.startswith("/catalog/bookinstance/")

        instance = await fetch_instance(session_factory, int(location.rsplit("/", 1)[1]))
        assert instance is not None
        assert instance.book_id == test_book["id"]
        assert instance.imprint == "Tor, 2007."
        assert instance.status == "Loaned"
        assert instance.due_back == date(2025, 6, 1)

        response = await client.get(location)
        assert response.status_code == 200
        assert "Tor, 2007." in response.text

    @pytest.mark.asyncio
    async def test_create_without_due_back(
        self, client: AsyncClient, session_factory: async_sessionmaker[AsyncSession], test_book: Dict[str, Any]
    ):
        form = {"book": str(test_book["id"]), "imprint": "Gollancz", "status": "Available", "due_back": ""}

        response = await client.post(CREATE_URL, data=form)

        assert response.status_code == 302
        instance = await fetch_instance(session_factory, int(response.headers["location"].rsplit("/", 1)[1]))
        assert instance is not None
        assert instance.due_back is None

    @pytest.mark.asyncio
    async def test_create_escapes_imprint(
        self, client: AsyncClient, session_factory: async_sessionmaker[AsyncSession], test_book: Dict[str, Any]
    ):
        form = {"book": str(test_book["id"]), "imprint": "Tor & Sons <1st>", "status": "Available"}

        response = await client.post(CREATE_URL, data=form)

        assert response.status_code == 302
        instance = await fetch_instance(session_factory, int(response.headers["location"].rsplit("/", 1)[1]))
        assert instance is not None
        assert instance.imprint == "Tor &amp; Sons &lt;1st&gt;"

    @pytest.mark.asyncio
    async def test_create_empty_fields(
        self, client: AsyncClient, session_factory: async_sessionmaker[AsyncSession], test_book: Dict[str, Any]
    ):
        response = await client.post(CREATE_URL, data={"book": "", "imprint": "   ", "status": ""})

        assert response.status_code == 200
        assert "<title>Create Book Instance</title>" in response.text
        assert 'class="errors"' in response.text
        book_error = response.text.index("Book must not be empty.")
        imprint_error = response.text.index("Imprint must not be empty.")
        status_error = response.text.index("Status must not be empty.")
        assert book_error < imprint_error < status_error
        assert "The Name of the Wind" in response.text

        async with session_factory() as db:
            assert await BookInstanceService().get_book_instances(db) == []

    @pytest.mark.asyncio
    async def test_create_missing_fields(self, client: AsyncClient):
        response = await client.post(CREATE_URL, data={})

        assert response.status_code == 200
        assert "Book must not be empty." in response.text
        assert "Imprint must not be empty." in response.text
        assert "Status must not be empty." in response.text

    @pytest.mark.asyncio
    async def test_create_invalid_values_are_echoed(self, client: AsyncClient, test_book: Dict[str, Any]):
        form = {"book": "abc", "imprint": "Penguin", "status": "Lost", "due_back": "not-a-date"}

        response = await client.post(CREATE_URL, data=form)

        assert response.status_code == 200
        assert "Book must be a valid catalog book." in response.text
        assert "Imprint must not be empty." not in response.text
        assert "Status must be one of: Available, Maintenance, Loaned, Reserved." in response.text
        assert "Due back must be a valid date." in response.text
        assert 'value="Penguin"' in response.text
        assert 'value="not-a-date"' in response.text

    @pytest.mark.asyncio
    async def test_create_reselects_submitted_book(
        self, client: AsyncClient, test_book: Dict[str, Any], test_book_2: Dict[str, Any]
    ):
        response = await client.post(CREATE_URL, data={"book": str(test_book_2["id"]), "imprint": "Tor"})

        assert response.status_code == 200
        assert "Status must not be empty." in response.text
        assert "selected" in response.text


class TestBookInstanceDelete:
    """Tests for the delete confirmation and the delete submission."""

    @pytest.mark.asyncio
    async def test_delete_confirmation(self, client: AsyncClient, test_bookinstance: Dict[str, Any]):
        response = await client.get(f"{test_bookinstance['url']}/delete")

        assert response.status_code == 200
        assert "<title>Book Instance Delete</title>" in response.text
        assert "Do you really want to delete this BookInstance?" in response.text
        assert f'name="instanceid" value="{test_bookinstance["id"]}"' in response.text

    @pytest.mark.asyncio
    async def test_delete_confirmation_for_missing_copy_redirects(self, client: AsyncClient):
        response = await client.get("/catalog/bookinstance/99999/delete")

        assert response.status_code == 302
        assert response.headers["location"] == LIST_URL

    @pytest.mark.asyncio
    async def test_delete(
        self,
        client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
        test_bookinstance: Dict[str, Any],
    ):
        response = await client.post(
            f"{test_bookinstance['url']}/delete", data={"instanceid": str(test_bookinstance["id"])}
        )

        assert response.status_code == 302
        assert response.headers["location"] == LIST_URL
        assert await fetch_instance(session_factory, test_bookinstance["id"]) is None

        response = await client.get(test_bookinstance["url"])
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_uses_submitted_id(
        self,
        client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
        test_bookinstance: Dict[str, Any],
        loaned_bookinstance: Dict[str, Any],
    ):
        response = await client.post(
            f"{test_bookinstance['url']}/delete", data={"instanceid": str(loaned_bookinstance["id"])}
        )

        assert response.status_code == 302
        assert await fetch_instance(session_factory, loaned_bookinstance["id"]) is None
        assert await fetch_instance(session_factory, test_bookinstance["id"]) is not None

    @pytest.mark.asyncio
    async def test_delete_twice(self, client: AsyncClient, test_bookinstance: Dict[str, Any]):
        form = {"instanceid": str(test_bookinstance["id"])}

        first = await client.post(f"{test_bookinstance['url']}/delete", data=form)
        second = await client.post(f"{test_bookinstance['url']}/delete", data=form)

        assert first.status_code == 302
        assert second.status_code == 302
        assert second.headers["location"] == LIST_URL

    @pytest.mark.asyncio
    async def test_delete_id_beyond_key_range(self, client: AsyncClient):
        huge_id = "99999999999999999999"

        confirmation = await client.get(f"/catalog/bookinstance/{huge_id}/delete")
        submit = await client.post(f"/catalog/bookinstance/{huge_id}/delete", data={"instanceid": huge_id})

        assert confirmation.status_code == 302
        assert confirmation.headers["location"] == LIST_URL
        assert submit.status_code == 302
        assert submit.headers["location"] == LIST_URL

    @pytest.mark.asyncio
    async def test_delete_without_instanceid(self, client: AsyncClient, test_bookinstance: Dict[str, Any]):
        response = await client.post(f"{test_bookinstance['url']}/delete", data={})

        assert response.status_code == 422
        assert "text/html" in response.headers["content-type"]
        assert "Invalid request" in response.text


class TestBookInstanceUpdate:
    """Tests for updating book instances through the form."""

    @pytest.mark.asyncio
    async def test_update_form_is_prefilled(
        self, client: AsyncClient, loaned_bookinstance: Dict[str, Any], test_book_2: Dict[str, Any]
    ):
        response = await client.get(f"{loaned_bookinstance['url']}/update")

        assert response.status_code == 200
        assert "<title>Update Book Instance</title>" in response.text
        assert 'value="DAW, 2012."' in response.text
        assert 'value="2025-03-14"' in response.text
        assert "Apes and Angels" in response.text
        assert "selected" in response.text

    @pytest.mark.asyncio
    async def test_update_form_not_found(self, client: AsyncClient, test_book: Dict[str, Any]):
        response = await client.get("/catalog/bookinstance/99999/update")

        assert response.status_code == 404
        assert "Book Instance not found" in response.text

    @pytest.mark.asyncio
    async def test_update(
        self,
        client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
        test_bookinstance: Dict[str, Any],
        test_book_2: Dict[str, Any],
    ):
        form = {"book": str(test_book_2["id"]), "imprint": "Tor, 2015.", "status": "Reserved", "due_back": "2025-09-30"}

        response = await client.post(f"{test_bookinstance['url']}/update", data=form)

        assert response.status_code == 302
        assert response.headers["location"] == test_bookinstance["url"]

        instance = await fetch_instance(session_factory, test_bookinstance["id"])
        assert instance is not None
        assert instance.book_id == test_book_2["id"]
        assert instance.book.title == "Apes and Angels"
        assert instance.imprint == "Tor, 2015."
        assert instance.status == "Reserved"
        assert instance.due_back == date(2025, 9, 30)

    @pytest.mark.asyncio
    async def test_update_invalid(
        self,
        client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
        test_bookinstance: Dict[str, Any],
    ):
        form = {"book": str(test_bookinstance["book_id"]), "imprint": "", "status": "Available"}

        response = await client.post(f"{test_bookinstance['url']}/update", data=form)

        assert response.status_code == 200
        assert "<title>Update Book Instance</title>" in response.text
        assert "Imprint must not be empty." in response.text

        instance = await fetch_instance(session_factory, test_bookinstance["id"])
        assert instance is not None
        assert instance.imprint == test_bookinstance["imprint"]

    @pytest.mark.asyncio
    async def test_update_not_found(self, client: AsyncClient, test_book: Dict[str, Any]):
        form = {"book": str(test_book["id"]), "imprint": "Tor", "status": "Available"}

        response = await client.post("/catalog/bookinstance/99999/update", data=form)

        assert response.status_code == 404
        assert "Book Instance not found" in response.text

    @pytest.mark.asyncio
    async def test_update_id_beyond_key_range(self, client: AsyncClient, test_book: Dict[str, Any]):
        url = "/catalog/bookinstance/99999999999999999999/update"
        form = {"book": str(test_book["id"]), "imprint": "Tor", "status": "Available"}

        form_page = await client.get(url)
        submit = await client.post(url, data=form)

        assert form_page.status_code == 404
        assert submit.status_code == 404
        assert "Book Instance not found" in submit.text

    @pytest.mark.asyncio
    async def test_unchanged_resubmission_keeps_imprint(
        self, client: AsyncClient, session_factory: async_sessionmaker[AsyncSession], test_book: Dict[str, Any]
    ):
        form = {"book": str(test_book["id"]), "imprint": "Tor & Co, 1999/2000", "status": "Available"}
        response = await client.post(CREATE_URL, data=form)
        url = response.headers["location"]
        instance_id = int(url.rsplit("/", 1)[1])

        for _ in range(2):
            page = await client.get(f"{url}/update")
            match = re.search(r'name="imprint"[^>]*value="([^"]*)"', page.text)
            assert match is not None
            form["imprint"] = html.unescape(match.group(1))

            response = await client.post(f"{url}/update", data=form)
            assert response.status_code == 302

            instance = await fetch_instance(session_factory, instance_id)
            assert instance is not None
            assert instance.imprint == "Tor &amp; Co, 1999&#x2F;2000"

        response = await client.get(LIST_URL)
        assert "Tor &amp; Co, 1999&#x2F;2000" in response.text


def store_failure() -> OperationalError:
    return OperationalError("SELECT book_instances", {}, Exception("connection refused"))


class FailingBookInstanceService(BookInstanceService):
    async def get_book_instances(self, db):
        raise store_failure()

    async def create_book_instance(self, form, db):
        raise store_failure()

    async def update_book_instance(self, instance_id, form, db):
        raise store_failure()


class FailingBookService(BookService):
    async def get_books(self, db):
        # let the concurrent instance read finish first
        await asyncio.sleep(0.05)
        raise store_failure()


class TestCatalogErrorsAndMisc:
    """Tests for error pages and the non-catalog routes."""

    @pytest.mark.asyncio
    async def test_store_failure_renders_error_page(self, client: AsyncClient):
        app.dependency_overrides[get_bookinstance_service] = lambda: FailingBookInstanceService()

        response = await client.get(LIST_URL)

        assert response.status_code == 500
        assert "Internal Server Error" in response.text
        assert "connection refused" not in response.text

    @pytest.mark.asyncio
    async def test_store_failure_on_create(self, client: AsyncClient, test_book: Dict[str, Any]):
        app.dependency_overrides[get_bookinstance_service] = lambda: FailingBookInstanceService()
        form = {"book": str(test_book["id"]), "imprint": "Tor", "status": "Available"}

        response = await client.post(CREATE_URL, data=form)

        assert response.status_code == 500
        assert "Internal Server Error" in response.text

    @pytest.mark.asyncio
    async def test_store_failure_on_update(self, client: AsyncClient, test_bookinstance: Dict[str, Any]):
        app.dependency_overrides[get_bookinstance_service] = lambda: FailingBookInstanceService()
        form = {"book": str(test_bookinstance["book_id"]), "imprint": "Tor", "status": "Available"}

        response = await client.post(f"{test_bookinstance['url']}/update", data=form)

        assert response.status_code == 500
        assert "Internal Server Error" in response.text

    @pytest.mark.asyncio
    async def test_store_failure_in_update_form_reads(self, client: AsyncClient, test_bookinstance: Dict[str, Any]):
        app.dependency_overrides[get_bookinstance_service] = lambda: BookInstanceService(
            book_service=FailingBookService()
        )

        response = await client.get(f"{test_bookinstance['url']}/update")

        assert response.status_code == 500
        assert "Internal Server Error" in response.text
        assert "<title>Update Book Instance</title>" not in response.text

    @pytest.mark.asyncio
    async def test_index_redirects_to_list(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 302
        assert response.headers["location"] == LIST_URL

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "message": "Library catalog is running"}

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client: AsyncClient):
        response = await client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["x-request-id"] == "req-123"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, client: AsyncClient):
        response = await client.get("/api/v1/health")

        assert response.headers["x-request-id"]
