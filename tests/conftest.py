"""Pytest configuration and fixtures"""
import json
import re
from datetime import datetime, timezone
from decimal import Decimal
from itertools import count
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from bookbazaar.config import Settings
from bookbazaar.notifications import NotificationService
from bookbazaar.storage import MemoryStorage
from bookbazaar.storefront import Storefront

NETWORK_DOWN = "network"

_CART_LINE = re.compile(r"^/cart/(?P<item_id>[^/]+)$")
_BOOK = re.compile(r"^/books/(?P<book_id>[^/]+)$")
_BOOK_REVIEWS = re.compile(r"^/books/(?P<book_id>[^/]+)/reviews$")
_REVIEW = re.compile(r"^/reviews/(?P<review_id>[^/]+)$")


def _json(status: int, body: Any = None) -> httpx.Response:
    if body is None:
        return httpx.Response(status)
    return httpx.Response(status, json=body)


class FakeBookstore:
    """In-memory stand-in for the BookBazaar REST API.

    ``fail(method, path, status)`` makes a route answer with ``status``
    (or raise a connection error for ``NETWORK_DOWN``) until ``recover()``.
    ``hooks`` run once, inside the request, before the route answers.
    """

    def __init__(self):
        self.users: Dict[str, dict] = {
            "alice@example.com": {
                "id": "user-1",
                "username": "alice",
                "email": "alice@example.com",
                "password": "wonderland",
                "isAdmin": False,
            },
            "admin@example.com": {
                "id": "user-2",
                "username": "admin",
                "email": "admin@example.com",
                "password": "root",
                "isAdmin": True,
            },
        }
        self.books: Dict[str, dict] = {
            "book-1": {
                "id": "book-1",
                "title": "Dune",
                "author": "Frank Herbert",
                "genre": "Science Fiction",
                "price": 10.00,
                "stock": 4,
                "imageUrl": "https://img.test/dune.jpg",
            },
            "book-2": {
                "id": "book-2",
                "title": "The Hobbit",
                "author": "J.R.R. Tolkien",
                "genre": "Fantasy",
                "price": 5.50,
                "stock": 10,
            },
            "book-3": {
                "id": "book-3",
                "title": "Foundation",
                "author": "Isaac Asimov",
                "genre": "Science Fiction",
                "price": 8.25,
                "stock": 0,
            },
        }
        self.tokens: Dict[str, str] = {}  # token -> email
        self.api_keys: Dict[str, str] = {}  # email -> key
        self.carts: Dict[str, List[dict]] = {}  # email -> lines
        self.orders: Dict[str, List[dict]] = {}  # email -> orders
        self.reviews: Dict[str, List[dict]] = {}  # book id -> reviews
        self.requests: List[httpx.Request] = []
        self.failures: Dict[Tuple[str, str], Any] = {}
        self.hooks: Dict[Tuple[str, str], Callable[[], Awaitable[None]]] = {}
        self._seq = count(1)

    # -- test controls ---------------------------------------------------

    def fail(
        self, method: str, path: str, status: int = 500, message: Optional[str] = "Service unavailable"
    ) -> None:
        self.failures[(method, path)] = (status, message)

    def fail_network(self, method: str, path: str) -> None:
        self.failures[(method, path)] = NETWORK_DOWN

    def recover(self) -> None:
        self.failures.clear()

    def issue_token(self, email: str) -> str:
        token = f"token-{next(self._seq)}"
        self.tokens[token] = email
        return token

    def paths(self, method: Optional[str] = None) -> List[str]:
        return [
            r.url.path for r in self.requests if method is None or r.method == method
        ]

    # -- transport -------------------------------------------------------

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)

        hook = self.hooks.pop(key, None)
        if hook is not None:
            await hook()

        failure = self.failures.get(key)
        if failure == NETWORK_DOWN:
            raise httpx.ConnectError("Connection refused", request=request)
        if failure is not None:
            status, message = failure
            return _json(status, {"message": message} if message else {})

        return self._route(request)

    def _user_for(self, request: httpx.Request) -> Optional[dict]:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        email = self.tokens.get(header[len("Bearer "):])
        return self.users.get(email) if email else None

    def _body(self, request: httpx.Request) -> dict:
        return json.loads(request.content) if request.content else {}

    def _route(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path

        if path == "/auth/login" and method == "POST":
            body = self._body(request)
            user = self.users.get(body.get("email"))
            if user is None or user["password"] != body.get("password"):
                return _json(401, {"message": "Invalid email or password"})
            return _json(200, {"token": self.issue_token(user["email"])})

        if path == "/auth/register" and method == "POST":
            body = self._body(request)
            if body.get("email") in self.users:
                return _json(409, {"message": "Email already registered"})
            self.users[body["email"]] = {
                "id": f"user-{next(self._seq)}",
                "username": body["username"],
                "email": body["email"],
                "password": body["password"],
                "isAdmin": False,
            }
            return _json(201, {"token": self.issue_token(body["email"])})

        if path == "/books" and method == "GET":
            return _json(200, self._list_books(request.url.params))
        match = _BOOK.match(path)
        if match and method == "GET":
            book = self.books.get(match["book_id"])
            return _json(200, book) if book else _json(404, {"message": "Book not found"})
        match = _BOOK_REVIEWS.match(path)
        if match and method == "GET":
            return _json(200, self.reviews.get(match["book_id"], []))

        user = self._user_for(request)
        if user is None:
            return _json(401, {"message": "Unauthorized"})
        email = user["email"]

        if path == "/auth/me" and method == "GET":
            return _json(200, {k: v for k, v in user.items() if k != "password"})
        if path == "/auth/api-key" and method == "POST":
            self.api_keys[email] = f"bbk_{next(self._seq):04d}_abcdefghijklmnop"
            return _json(200, {"apiKey": self.api_keys[email]})

        if path == "/cart":
            lines = self.carts.setdefault(email, [])
            if method == "GET":
                return _json(200, {"items": [self._line_view(line) for line in lines]})
            if method == "POST":
                return self._add_line(lines, self._body(request))
        match = _CART_LINE.match(path)
        if match:
            lines = self.carts.setdefault(email, [])
            line = next((l for l in lines if l["id"] == match["item_id"]), None)
            if line is None:
                return _json(404, {"message": "Cart item not found"})
            if method == "PUT":
                line["quantity"] = self._body(request)["quantity"]
                return _json(200, self._line_view(line))
            if method == "DELETE":
                lines.remove(line)
                return _json(204)

        if path == "/orders":
            if method == "GET":
                return _json(200, self.orders.get(email, []))
            if method == "POST":
                return self._place_order(email, self._body(request))

        match = _BOOK_REVIEWS.match(path)
        if match and method == "POST":
            body = self._body(request)
            review = {
                "id": f"review-{next(self._seq)}",
                "userId": user["id"],
                "username": user["username"],
                "rating": body["rating"],
                "comment": body["comment"],
                "createdAt": datetime.now(timezone.utc).isoformat(),
            }
            self.reviews.setdefault(match["book_id"], []).append(review)
            return _json(201, review)
        match = _REVIEW.match(path)
        if match and method == "DELETE":
            for reviews in self.reviews.values():
                for review in list(reviews):
                    if review["id"] == match["review_id"]:
                        reviews.remove(review)
                        return _json(204)
            return _json(404, {"message": "Review not found"})

        if (path == "/books" and method == "POST") or (_BOOK.match(path) and method in ("PUT", "DELETE")):
            if not user["isAdmin"]:
                return _json(403, {"message": "Admin access required"})
            return self._write_book(method, path, self._body(request))

        return _json(404, {"message": "Not found"})

    def _write_book(self, method: str, path: str, body: dict) -> httpx.Response:
        if method == "POST":
            book_id = f"book-{next(self._seq) + 100}"
            self.books[book_id] = {"id": book_id, **body}
            return _json(201, self.books[book_id])
        book_id = _BOOK.match(path)["book_id"]
        if book_id not in self.books:
            return _json(404, {"message": "Book not found"})
        if method == "PUT":
            self.books[book_id] = {**self.books[book_id], **body}
            return _json(200, self.books[book_id])
        del self.books[book_id]
        return _json(204)

    def _list_books(self, params) -> List[dict]:
        books = list(self.books.values())
        if "genre" in params:
            books = [b for b in books if b["genre"] == params["genre"]]
        if "minPrice" in params:
            books = [b for b in books if Decimal(str(b["price"])) >= Decimal(params["minPrice"])]
        if "maxPrice" in params:
            books = [b for b in books if Decimal(str(b["price"])) <= Decimal(params["maxPrice"])]
        return books

    def _line_view(self, line: dict) -> dict:
        book = self.books[line["bookId"]]
        view = {
            "id": line["id"],
            "bookId": book["id"],
            "title": book["title"],
            "author": book["author"],
            "price": book["price"],
            "quantity": line["quantity"],
        }
        if book.get("imageUrl"):
            view["imageUrl"] = book["imageUrl"]
        return view

    def _add_line(self, lines: List[dict], body: dict) -> httpx.Response:
        book_id = body.get("bookId")
        if book_id not in self.books:
            return _json(404, {"message": "Book not found"})
        existing = next((l for l in lines if l["bookId"] == book_id), None)
        if existing:
            existing["quantity"] += body.get("quantity", 1)
            return _json(200, self._line_view(existing))
        line = {"id": f"line-{next(self._seq)}", "bookId": book_id, "quantity": body.get("quantity", 1)}
        lines.append(line)
        return _json(201, self._line_view(line))

    def _place_order(self, email: str, body: dict) -> httpx.Response:
        items = []
        order_total = Decimal("0")
        for entry in body.get("items", []):
            book = self.books[entry["bookId"]]
            price = Decimal(str(book["price"]))
            order_total += price * entry["quantity"]
            items.append({
                "id": f"oi-{next(self._seq)}",
                "bookId": book["id"],
                "title": book["title"],
                "author": book["author"],
                "price": book["price"],
                "quantity": entry["quantity"],
            })
        order = {
            "id": f"order-{next(self._seq)}",
            "status": "pending",
            "total": float(order_total),
            "createdAt": "2026-01-15T10:30:00Z",
            "items": items,
        }
        self.orders.setdefault(email, []).insert(0, order)
        self.carts[email] = []
        return _json(201, order)


@pytest.fixture
def server():
    """Fake BookBazaar API"""
    return FakeBookstore()


@pytest.fixture
def storage():
    """In-memory credential storage"""
    return MemoryStorage()


@pytest.fixture
def notifications():
    """Notification service that records everything shown"""
    return NotificationService()


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at the fake API"""
    return Settings(api_url="http://bookbazaar.test", storage_path=tmp_path / "storage.json")


@pytest.fixture
def store(settings, storage, notifications, server):
    """Storefront wired to the fake API"""
    return Storefront(
        settings=settings,
        storage=storage,
        notifications=notifications,
        transport=httpx.MockTransport(server.handler),
    )


@pytest.fixture
def login(store):
    """Log the storefront in as alice."""
    async def _login(email: str = "alice@example.com", password: str = "wonderland"):
        await store.session.login(email, password)
        return store
    return _login
