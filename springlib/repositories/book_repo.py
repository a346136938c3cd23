from sqlalchemy import func, or_

from springlib.extensions import db
from springlib.models.book import Book


class BookRepo:
    @staticmethod
    def list_all():
        return Book.query.order_by(Book.id.desc()).all()

    @staticmethod
    def get(book_id: int):
        return db.session.get(Book, book_id)

    @staticmethod
    def get_for_update(book_id: int):
        # row lock so two approvals cannot both take the last copy
        return db.session.get(Book, book_id, with_for_update=True, populate_existing=True)

    @staticmethod
    def get_by_isbn(isbn: str):
        return Book.query.filter_by(isbn=isbn).first()

    @staticmethod
    def search(query: str):
        pattern = f"%{query.strip().lower()}%"
        return Book.query.filter(or_(
            func.lower(Book.title).like(pattern),
            func.lower(Book.author).like(pattern),
            func.lower(func.coalesce(Book.isbn, "")).like(pattern),
            func.lower(func.coalesce(Book.publisher, "")).like(pattern),
        )).order_by(Book.id.desc()).all()

    @staticmethod
    def create(book: Book):
        db.session.add(book)
        db.session.flush()
        return book

    @staticmethod
    def delete(book: Book):
        db.session.delete(book)
