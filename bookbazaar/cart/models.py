"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from bookbazaar.money import multiply, round_money, to_decimal, total


def _parse_price(value: Any) -> Decimal:
    """Strict price conversion for server records; garbage is an error, not zero."""
    if isinstance(value, bool):
        raise ValueError(f"invalid price: {value!r}")
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"invalid price: {value!r}") from None
    if not price.is_finite():
        raise ValueError(f"invalid price: {value!r}")
    return price


def _parse_quantity(value: Any) -> int:
    """Whole-number quantity; 2.7 or "2.7" is rejected rather than truncated."""
    if isinstance(value, bool):
        raise ValueError(f"invalid quantity: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return int(value)
    raise ValueError(f"invalid quantity: {value!r}")


@dataclass
class CartLineItem:
    """One book's presence in the cart, as the server reports it."""
    id: str  # Line item id, server-assigned
    book_id: str
    title: str
    author: str
    price: Decimal
    quantity: int
    image_url: Optional[str] = None

    def __post_init__(self):
        self.price = to_decimal(self.price)
        if self.price < 0:
            raise ValueError("price must be non-negative")
        if self.quantity < 1:
            raise ValueError("quantity must be a positive integer")

    @property
    def line_total(self) -> Decimal:
        """Price for all units of this line."""
        return multiply(self.price, self.quantity)

    def to_dict(self) -> dict:
        """Wire representation (camelCase keys)."""
        data = {
            "id": self.id,
            "bookId": self.book_id,
            "title": self.title,
            "author": self.author,
            "price": str(self.price),
            "quantity": self.quantity,
        }
        if self.image_url is not None:
            data["imageUrl"] = self.image_url
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CartLineItem":
        """Create from a ``GET /cart`` item record."""
        return cls(
            id=str(data["id"]),
            book_id=str(data["bookId"]),
            title=data["title"],
            author=data["author"],
            price=_parse_price(data["price"]),
            quantity=_parse_quantity(data["quantity"]),
            image_url=data.get("imageUrl"),
        )


@dataclass
class Cart:
    """Snapshot of the cart. Totals are derived on every read."""
    items: List[CartLineItem] = field(default_factory=list)

    @property
    def total_items(self) -> int:
        """Sum of quantities across all lines."""
        return sum(item.quantity for item in self.items)

    @property
    def total_price(self) -> Decimal:
        """Sum of price x quantity across all lines."""
        return round_money(total(item.line_total for item in self.items))

    @property
    def is_empty(self) -> bool:
        return not self.items

    def order_lines(self) -> List[dict]:
        """Payload lines for ``POST /orders``."""
        return [{"bookId": item.book_id, "quantity": item.quantity} for item in self.items]
