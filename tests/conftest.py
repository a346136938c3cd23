from datetime import datetime

import pytest

from springlib import create_app
from springlib.config import TestConfig
from springlib.extensions import db
from springlib.models.book import Book
from springlib.models.user import Role
from springlib.services.auth_service import AuthService
from springlib.utils.auth import Identity


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_user(app):
    return AuthService.register("admin", "admin@example.com", "admin-pass", "Ada Admin", role=Role.ADMIN)


@pytest.fixture
def alice(app):
    return AuthService.register("alice", "alice@example.com", "alice-pass", "Alice Reader")


@pytest.fixture
def carol(app):
    return AuthService.register("carol", "carol@example.com", "carol-pass", "Carol Reader")


@pytest.fixture
def admin(admin_user):
    return Identity(user_id=admin_user.id, role=Role.ADMIN)


@pytest.fixture
def alice_id(alice):
    return Identity(user_id=alice.id, role=Role.MEMBER)


@pytest.fixture
def carol_id(carol):
    return Identity(user_id=carol.id, role=Role.MEMBER)


@pytest.fixture
def make_book(app):
    def _make(title="Dune", total=1, available=None, isbn=None):
        book = Book(
            title=title,
            author="Frank Herbert",
            isbn=isbn,
            total_copies=total,
            available_copies=total if available is None else available,
        )
        db.session.add(book)
        db.session.commit()
        return book
    return _make


@pytest.fixture
def now():
    return datetime(2025, 1, 3, 9, 30)


@pytest.fixture
def headers_for(app):
    def _headers(user):
        return {"Authorization": f"Bearer {AuthService.issue_token(user)}"}
    return _headers
