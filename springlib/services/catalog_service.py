from flask import current_app

from springlib.errors import InvalidTransition, InvariantViolation, NotFound, ValidationError
from springlib.extensions import db
from springlib.models.book import Book
from springlib.repositories.book_repo import BookRepo
from springlib.repositories.loan_repo import LoanRepo


def _int_field(data: dict, key: str, default=None):
    value = data.get(key, default)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")


def _text_field(data: dict, key: str):
    value = data.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class CatalogService:
    """
    Catalog accounting: the copy inventory of each book.

    ``decrement_availability`` and ``increment_availability`` are the only
    code paths that move ``available_copies``; admin edits of
    ``total_copies`` recompute it from the number of copies on loan.
    """

    # ---- accounting

    @staticmethod
    def is_borrowable(book: Book) -> bool:
        return (book.available_copies or 0) > 0

    @staticmethod
    def decrement_availability(book: Book) -> None:
        CatalogService._shift_availability(book, -1)

    @staticmethod
    def increment_availability(book: Book) -> None:
        CatalogService._shift_availability(book, +1)

    @staticmethod
    def _shift_availability(book: Book, delta: int) -> None:
        new_value = book.available_copies + delta
        if new_value < 0 or new_value > book.total_copies:
            raise InvariantViolation(
                f"Book {book.id}: available copies would become {new_value} "
                f"(total {book.total_copies})"
            )
        book.available_copies = new_value

    # ---- reads

    @staticmethod
    def list_books():
        return BookRepo.list_all()

    @staticmethod
    def get_book(book_id: int) -> Book:
        book = BookRepo.get(book_id)
        if not book:
            raise NotFound("Book not found")
        return book

    @staticmethod
    def get_by_isbn(isbn: str) -> Book:
        book = BookRepo.get_by_isbn(isbn.strip())
        if not book:
            raise NotFound("Book not found")
        return book

    @staticmethod
    def search(query: str | None):
        if not query or not query.strip():
            return BookRepo.list_all()
        return BookRepo.search(query)

    # ---- admin catalog management

    @staticmethod
    def create_book(data: dict) -> Book:
        title = _text_field(data, "title")
        author = _text_field(data, "author")
        if not title or not author:
            raise ValidationError("title and author are required")

        total = _int_field(data, "totalCopies", 1)
        if total < 1:
            raise ValidationError("totalCopies must be at least 1")

        isbn = _text_field(data, "isbn")
        if isbn and BookRepo.get_by_isbn(isbn):
            raise ValidationError(f"A book with ISBN {isbn} already exists")

        book = Book(
            title=title,
            author=author,
            isbn=isbn,
            publisher=_text_field(data, "publisher"),
            publication_year=_int_field(data, "publicationYear"),
            total_copies=total,
            available_copies=total,
        )
        try:
            BookRepo.create(book)
            LoanRepo.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"[catalog] book {book.id} created ({book.total_copies} copies)")
        return book

    @staticmethod
    def update_book(book_id: int, data: dict) -> Book:
        book = CatalogService.get_book(book_id)

        # validate everything before touching the row
        changes = {}
        for key, attr in (("title", "title"), ("author", "author")):
            if key in data:
                value = _text_field(data, key)
                if not value:
                    raise ValidationError(f"{key} cannot be empty")
                changes[attr] = value
        if "isbn" in data:
            isbn = _text_field(data, "isbn")
            other = BookRepo.get_by_isbn(isbn) if isbn else None
            if other is not None and other.id != book.id:
                raise ValidationError(f"A book with ISBN {isbn} already exists")
            changes["isbn"] = isbn
        if "publisher" in data:
            changes["publisher"] = _text_field(data, "publisher")
        if "publicationYear" in data:
            changes["publication_year"] = _int_field(data, "publicationYear")

        new_total = _int_field(data, "totalCopies")
        if new_total is not None and new_total != book.total_copies:
            if new_total < 1:
                raise ValidationError("totalCopies must be at least 1")
            on_loan = LoanRepo.count_approved_for_book(book.id)
            if new_total < on_loan:
                raise ValidationError(
                    f"totalCopies cannot drop below the {on_loan} copies currently on loan"
                )
            changes["total_copies"] = new_total
            changes["available_copies"] = new_total - on_loan

        try:
            for attr, value in changes.items():
                setattr(book, attr, value)
            LoanRepo.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"[catalog] book {book.id} updated: {sorted(changes)}")
        return book

    @staticmethod
    def delete_book(book_id: int) -> None:
        book = CatalogService.get_book(book_id)

        active = LoanRepo.count_active_for_book(book.id)
        if active > 0:
            raise InvalidTransition(
                f"Book has {active} active loan(s); resolve them before deleting it"
            )

        try:
            BookRepo.delete(book)
            LoanRepo.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f"[catalog] book {book_id} deleted")
