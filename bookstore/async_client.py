"""Async HTTP client for bulk catalog fetches."""
import asyncio
import logging
from typing import List, Optional, Dict, Any, Callable

import httpx

from bookstore.client import error_message_from, redirect_to_login
from bookstore.config import BOOKS_ENDPOINT
from bookstore.credentials import CredentialStore
from bookstore.errors import ApiError, DEFAULT_ERROR_MESSAGE
from bookstore.models import Book, BookPage
from bookstore.parse import parse_book_page

logger = logging.getLogger(__name__)


class AsyncApiClient:
    """Async client that pulls every page of the book catalog in parallel."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10,
        credentials: Optional[CredentialStore] = None,
        max_concurrent: int = 5,
        on_unauthorized: Callable[[str], None] = redirect_to_login,
        login_url: str = "/login",
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            base_url: Scheme and host of the API
            timeout: Request timeout in seconds
            credentials: Where the bearer token lives
            max_concurrent: Maximum concurrent requests
            on_unauthorized: Called with login_url after a 401
            login_url: Login boundary handed to on_unauthorized
            transport: Custom httpx transport (tests use MockTransport)
        """
        self.credentials = credentials
        self.on_unauthorized = on_unauthorized
        self.login_url = login_url
        self.semaphore = asyncio.Semaphore(max_concurrent)

        # Create async HTTP client
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"}
        )

    def _auth_headers(self) -> Dict[str, str]:
        token = self.credentials.get_token() if self.credentials else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a resource asynchronously.

        Raises:
            ApiError: on transport failure or a non-2xx status
        """
        # Use semaphore to limit concurrency
        async with self.semaphore:
            try:
                logger.info(f"Async request: GET {path} {params or ''}")
                response = await self.client.get(
                    path, params=params, headers=self._auth_headers()
                )
            except httpx.TimeoutException:
                raise ApiError("Request timed out", 500)
            except httpx.HTTPError as e:
                logger.error(f"Async request failed: {e}")
                raise ApiError(str(e) or DEFAULT_ERROR_MESSAGE, 500)

        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                raise ApiError("Invalid JSON in response", response.status_code)

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code == 401:
            if self.credentials:
                self.credentials.clear()
            self.on_unauthorized(self.login_url)

        logger.warning(f"Status {response.status_code} for GET {path}")
        raise ApiError(
            error_message_from(payload, response.reason_phrase),
            response.status_code
        )

    async def get_books_page(self, page: int, size: int) -> BookPage:
        response = await self.get(BOOKS_ENDPOINT, {"page": page, "size": size})
        return parse_book_page(response or {})

    async def fetch_all_books(self, page_size: int = 10) -> List[Book]:
        """
        Fetch the whole catalog: the first page, then the rest in parallel.

        Args:
            page_size: Books per page request

        Returns:
            All books in page order
        """
        first = await self.get_books_page(0, page_size)

        tasks = [
            self.get_books_page(page, page_size)
            for page in range(1, first.total_pages)
        ]

        pages = [first] + list(await asyncio.gather(*tasks))

        books = []
        for page in pages:
            books.extend(page.content)

        logger.info(f"Fetched {len(books)} books across {len(pages)} pages")
        return books

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
