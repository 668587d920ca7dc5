"""Order models - records returned by ``/orders``."""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bookbazaar.money import to_decimal


class OrderStatus(str, Enum):
    """Known order statuses. The server may send others; they are kept as plain strings."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderItem(BaseModel):
    """One book within a placed order."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    book_id: str = Field(alias="bookId")
    title: Optional[str] = None
    author: Optional[str] = None
    price: Decimal = Decimal("0")
    quantity: int = 1

    @field_validator("id", "book_id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return to_decimal(v)


class Order(BaseModel):
    """Order record."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    status: str = OrderStatus.PENDING.value
    total: Decimal = Decimal("0")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    items: List[OrderItem] = []

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        return str(v).lower() if v else OrderStatus.PENDING.value

    @field_validator("total", mode="before")
    @classmethod
    def convert_total_to_decimal(cls, v):
        return to_decimal(v)

    @property
    def known_status(self) -> Optional[OrderStatus]:
        """Status as an enum member, or None for statuses this client does not know."""
        try:
            return OrderStatus(self.status)
        except ValueError:
            return None
