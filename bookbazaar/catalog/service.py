"""
Catalog Service - browsing books and managing reviews.

Reads are one-shot requests; they send the session's API key as
``X-API-Key`` when one exists. Review writes and admin book management use the bearer token.
"""
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from bookbazaar.api_client import ApiClient
from bookbazaar.auth.session import SessionManager
from bookbazaar.errors import (
    ERROR_ADMIN_REQUIRED,
    ERROR_BOOK_CREATE_FAILED,
    ERROR_BOOK_DELETE_FAILED,
    ERROR_BOOK_UPDATE_FAILED,
    ERROR_BOOK_FETCH_FAILED,
    ERROR_BOOKS_FETCH_FAILED,
    ERROR_INVALID_RATING,
    ERROR_REVIEW_ADD_FAILED,
    ERROR_REVIEW_DELETE_FAILED,
    ERROR_REVIEWS_FETCH_FAILED,
    ERROR_TRY_AGAIN,
    ApiError,
    CatalogError,
)
from bookbazaar.logging import get_logger
from bookbazaar.notifications import NotificationService

from .models import Book, BookInput, Review

logger = get_logger(__name__)


def search(books: List[Book], term: str) -> List[Book]:
    """Case-insensitive substring match on title or author."""
    needle = term.strip().lower()
    if not needle:
        return list(books)
    return [b for b in books if needle in b.title.lower() or needle in b.author.lower()]


def genres(books: List[Book]) -> List[str]:
    """Distinct genres, in the order they first appear."""
    seen: List[str] = []
    for book in books:
        if book.genre and book.genre not in seen:
            seen.append(book.genre)
    return seen


class CatalogService:
    """Books, book details and reviews."""

    def __init__(
        self,
        api: ApiClient,
        session: SessionManager,
        notifications: NotificationService,
    ):
        self._api = api
        self._session = session
        self._notifications = notifications

    async def _read(self, path: str, error: str, params: Optional[dict] = None) -> Any:
        try:
            return await self._api.get(path, api_key=self._session.api_key, params=params)
        except ApiError as e:
            logger.warning(f"{error}: {e}")
            raise CatalogError(error) from e

    async def list_books(
        self,
        genre: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> List[Book]:
        """List books, optionally filtered server-side by genre and price range."""
        params = {}
        if genre:
            params["genre"] = genre
        if min_price is not None:
            params["minPrice"] = str(min_price)
        if max_price is not None:
            params["maxPrice"] = str(max_price)

        data = await self._read("/books", ERROR_BOOKS_FETCH_FAILED, params=params or None)
        try:
            return [Book.model_validate(record) for record in data or []]
        except (ValidationError, TypeError) as e:
            raise CatalogError(ERROR_BOOKS_FETCH_FAILED) from e

    async def get_book(self, book_id: str) -> Book:
        data = await self._read(f"/books/{book_id}", ERROR_BOOK_FETCH_FAILED)
        try:
            return Book.model_validate(data)
        except ValidationError as e:
            raise CatalogError(ERROR_BOOK_FETCH_FAILED) from e

    async def list_reviews(self, book_id: str) -> List[Review]:
        data = await self._read(f"/books/{book_id}/reviews", ERROR_REVIEWS_FETCH_FAILED)
        try:
            return [Review.model_validate(record) for record in data or []]
        except (ValidationError, TypeError) as e:
            raise CatalogError(ERROR_REVIEWS_FETCH_FAILED) from e

    async def add_review(self, book_id: str, rating: int, comment: str) -> Any:
        """
        Post a review for a book.

        Raises:
            CatalogError: Rating out of range, or the request failed
        """
        if not 1 <= rating <= 5:
            raise CatalogError(ERROR_INVALID_RATING)

        try:
            result = await self._api.post(
                f"/books/{book_id}/reviews",
                token=self._session.token,
                json={"rating": rating, "comment": comment},
            )
        except ApiError as e:
            self._notifications.notify_error(ERROR_REVIEW_ADD_FAILED, ERROR_TRY_AGAIN)
            raise CatalogError(ERROR_REVIEW_ADD_FAILED) from e

        self._notifications.notify("Review added", "Thank you for your feedback!")
        return result

    async def delete_review(self, review_id: str) -> None:
        try:
            await self._api.delete(f"/reviews/{review_id}", token=self._session.token)
        except ApiError as e:
            logger.warning(f"Review delete failed: {e}")
            raise CatalogError(ERROR_REVIEW_DELETE_FAILED) from e

        self._notifications.notify("Review deleted", "Your review has been removed")

    # ------------------------------------------------------------------
    # Admin book management
    # ------------------------------------------------------------------

    async def create_book(self, book: BookInput) -> Optional[Book]:
        """Add a book to the catalog. Returns it when the server echoes it back."""
        data = await self._admin_write(
            "POST",
            "/books",
            book.to_payload(),
            ERROR_BOOK_CREATE_FAILED,
            ("Book created", "The book has been added successfully"),
        )
        return _book_or_none(data)

    async def update_book(self, book_id: str, book: BookInput) -> Optional[Book]:
        """Replace a book's details."""
        data = await self._admin_write(
            "PUT",
            f"/books/{book_id}",
            book.to_payload(),
            ERROR_BOOK_UPDATE_FAILED,
            ("Book updated", "The book has been updated successfully"),
        )
        return _book_or_none(data)

    async def delete_book(self, book_id: str) -> None:
        await self._admin_write(
            "DELETE",
            f"/books/{book_id}",
            None,
            ERROR_BOOK_DELETE_FAILED,
            ("Book deleted", "The book has been removed successfully"),
        )

    async def _admin_write(
        self,
        method: str,
        path: str,
        payload: Optional[dict],
        failure_title: str,
        success: Tuple[str, str],
    ) -> Any:
        """
        Send an admin-only write with the bearer token.

        Raises:
            CatalogError: Session is not an admin's, or the request failed
        """
        if not self._session.is_admin:
            self._notifications.notify_error(failure_title, ERROR_ADMIN_REQUIRED)
            raise CatalogError(ERROR_ADMIN_REQUIRED)

        try:
            result = await self._api.request(method, path, token=self._session.token, json=payload)
        except ApiError as e:
            logger.warning(f"{method} {path} failed: {e}")
            self._notifications.notify_error(failure_title, ERROR_TRY_AGAIN)
            raise CatalogError(failure_title) from e

        self._notifications.notify(*success)
        return result


def _book_or_none(data: Any) -> Optional[Book]:
    if not isinstance(data, dict):
        return None
    try:
        return Book.model_validate(data)
    except ValidationError:
        logger.warning("Book write succeeded with an unreadable body")
        return None
