"""
Command-line storefront.

Usage:
    bookbazaar login alice@example.com
    bookbazaar books --genre Fantasy --max-price 20
    bookbazaar add 42
    bookbazaar cart
    bookbazaar order

Credentials persist in BOOKBAZAAR_STORAGE_PATH between invocations.
"""
import argparse
import asyncio
import getpass
import sys
from decimal import Decimal
from typing import List, Optional

from bookbazaar.auth.models import mask_api_key
from bookbazaar.catalog.service import search
from bookbazaar.errors import BookBazaarError
from bookbazaar.logging import configure_logging
from bookbazaar.money import format_money
from bookbazaar.notifications import Notification, NotificationService
from bookbazaar.storefront import Storefront


def print_notification(notification: Notification) -> None:
    marker = "!" if notification.is_error else "*"
    print(f"{marker} {notification.title}: {notification.description}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bookbazaar", description="BookBazaar storefront client")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Log in")
    login.add_argument("email")
    login.add_argument("--password")

    register = sub.add_parser("register", help="Create an account")
    register.add_argument("username")
    register.add_argument("email")
    register.add_argument("--password")

    sub.add_parser("logout", help="Forget the stored session")
    sub.add_parser("whoami", help="Show the logged-in user")
    sub.add_parser("api-key", help="Generate a new API key")

    books = sub.add_parser("books", help="List books")
    books.add_argument("--genre")
    books.add_argument("--min-price", type=Decimal)
    books.add_argument("--max-price", type=Decimal)
    books.add_argument("--search", default="")

    book = sub.add_parser("book", help="Show a book and its reviews")
    book.add_argument("book_id")

    review = sub.add_parser("review", help="Review a book")
    review.add_argument("book_id")
    review.add_argument("--rating", type=int, required=True)
    review.add_argument("--comment", default="")

    sub.add_parser("cart", help="Show the cart")

    add = sub.add_parser("add", help="Add a book to the cart")
    add.add_argument("book_id")

    qty = sub.add_parser("qty", help="Set a cart line's quantity")
    qty.add_argument("item_id")
    qty.add_argument("quantity", type=int)

    remove = sub.add_parser("remove", help="Remove a cart line")
    remove.add_argument("item_id")

    sub.add_parser("order", help="Place an order for the cart")
    sub.add_parser("orders", help="List past orders")
    return parser


def _print_cart(store: Storefront) -> None:
    cart = store.cart.cart
    if cart.is_empty:
        print("Your cart is empty")
        return
    for item in cart.items:
        print(f"{item.id}\t{item.title} by {item.author}\t{item.quantity} x {format_money(item.price)}")
    print(f"{cart.total_items} item(s), total {format_money(cart.total_price)}")


async def run(args: argparse.Namespace, store: Storefront) -> int:
    """Execute one command against a started storefront. Returns the exit code."""
    session = store.session
    command = args.command

    if command == "login":
        password = args.password or getpass.getpass()
        await session.login(args.email, password)
    elif command == "register":
        password = args.password or getpass.getpass()
        await session.register(args.username, args.email, password)
    elif command == "logout":
        await session.logout()
    elif command == "whoami":
        if not session.is_authenticated:
            print("Not logged in")
            return 1
        identity = session.identity
        role = "admin" if identity.is_admin else "customer"
        print(f"{identity.username} <{identity.email}> ({role})")
        if session.api_key:
            print(f"API key: {mask_api_key(session.api_key)}")
    elif command == "api-key":
        print(await session.generate_api_key())
    elif command == "books":
        books = await store.catalog.list_books(args.genre, args.min_price, args.max_price)
        for b in search(books, args.search):
            print(f"{b.id}\t{b.title} by {b.author}\t{b.genre}\t{format_money(b.price)}\tstock {b.stock}")
    elif command == "book":
        b = await store.catalog.get_book(args.book_id)
        print(f"{b.title} by {b.author} ({b.genre}) {format_money(b.price)}")
        if b.description:
            print(b.description)
        for r in await store.catalog.list_reviews(args.book_id):
            print(f"  [{r.rating}/5] {r.username}: {r.comment}")
    elif command == "review":
        await store.catalog.add_review(args.book_id, args.rating, args.comment)
    elif command == "cart":
        _print_cart(store)
    elif command == "add":
        await store.cart.add_item(args.book_id)
    elif command == "qty":
        await store.cart.set_quantity(args.item_id, args.quantity)
    elif command == "remove":
        await store.cart.remove_item(args.item_id)
    elif command == "order":
        order = await store.orders.place_order()
        print(f"Order {order.id}: {order.status}, total {format_money(order.total)}")
    elif command == "orders":
        for order in await store.orders.list_orders():
            created = order.created_at.date().isoformat() if order.created_at else "-"
            print(f"{order.id}\t{created}\t{order.status}\t{format_money(order.total)}")
    return 0


async def _main(args: argparse.Namespace) -> int:
    notifications = NotificationService()
    notifications.add_handler(print_notification)
    async with Storefront(notifications=notifications) as store:
        try:
            return await run(args, store)
        except BookBazaarError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)
    return asyncio.run(_main(args))


if __name__ == "__main__":
    sys.exit(main())
