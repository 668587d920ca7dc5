"""Catalog models - books and reviews."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bookbazaar.money import to_decimal


class Book(BaseModel):
    """Book as listed by ``/books``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    title: str
    author: str
    genre: str = ""
    price: Decimal
    stock: int = 0
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    average_rating: Optional[float] = Field(default=None, alias="averageRating")
    review_count: Optional[int] = Field(default=None, alias="reviewCount")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return to_decimal(v)

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


class Review(BaseModel):
    """Reader review of a book."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    user_id: str = Field(alias="userId")
    username: str
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v


class BookInput(BaseModel):
    """Fields an admin submits to create or replace a book."""
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    genre: str = ""
    price: Decimal = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    description: Optional[str] = None

    def to_payload(self) -> dict:
        """Body for ``POST /books`` and ``PUT /books/{id}``; the API wants a float price."""
        return {
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "price": float(self.price),
            "stock": self.stock,
            "description": self.description,
        }
