"""Catalog package: books, reviews and admin book management."""
from .models import Book, BookInput, Review
from .service import CatalogService, genres, search

__all__ = ["Book", "BookInput", "Review", "CatalogService", "genres", "search"]
