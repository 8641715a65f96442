"""
Sample book application: the data-access layer the harness is exercised with.
"""

from tests.shared.book_app.models import Book, Review
from tests.shared.book_app.context import BookContext, EntityState, format_command_message
from tests.shared.book_app.seed import SEED_BOOK_COUNT, four_books, seed_four_books

__all__ = [
    "Book",
    "Review",
    "BookContext",
    "EntityState",
    "format_command_message",
    "SEED_BOOK_COUNT",
    "four_books",
    "seed_four_books",
]
