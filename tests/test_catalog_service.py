import pytest

from springlib.errors import InvalidTransition, InvariantViolation, NotFound, ValidationError
from springlib.extensions import db
from springlib.models.book import Book
from springlib.services.catalog_service import CatalogService
from springlib.services.loan_service import LoanService


def test_is_borrowable(make_book):
    assert CatalogService.is_borrowable(make_book("A", total=1, available=1))
    assert not CatalogService.is_borrowable(make_book("B", total=1, available=0))


def test_decrement_and_increment_stay_in_bounds(make_book):
    book = make_book(total=2, available=1)

    CatalogService.decrement_availability(book)
    assert book.available_copies == 0
    with pytest.raises(InvariantViolation):
        CatalogService.decrement_availability(book)
    assert book.available_copies == 0

    CatalogService.increment_availability(book)
    CatalogService.increment_availability(book)
    assert book.available_copies == 2
    with pytest.raises(InvariantViolation):
        CatalogService.increment_availability(book)
    assert book.available_copies == 2


def test_create_book_starts_fully_available(app):
    book = CatalogService.create_book({
        "title": "  Emma ",
        "author": "Jane Austen",
        "isbn": "9780141439587",
        "publisher": "Penguin",
        "publicationYear": "1815",
        "totalCopies": 4,
        "availableCopies": 1,
    })

    assert book.id is not None
    assert book.title == "Emma"
    assert book.publication_year == 1815
    assert book.total_copies == 4
    assert book.available_copies == 4


@pytest.mark.parametrize("payload", [
    {"author": "Nobody"},
    {"title": "Untitled"},
    {"title": "Zero", "author": "Nobody", "totalCopies": 0},
    {"title": "Bad", "author": "Nobody", "totalCopies": "many"},
])
def test_create_book_validation(app, payload):
    with pytest.raises(ValidationError):
        CatalogService.create_book(payload)
    assert Book.query.count() == 0


def test_create_book_duplicate_isbn(make_book):
    make_book(isbn="123")
    with pytest.raises(ValidationError):
        CatalogService.create_book({"title": "Copy", "author": "Cat", "isbn": "123"})


def test_update_total_reclamps_availability(make_book, alice_id, admin, now):
    book = make_book(total=3)
    loan = LoanService.request_loan(alice_id, book.id, now=now)
    LoanService.approve_loan(admin, loan.id, now=now)

    CatalogService.update_book(book.id, {"totalCopies": 5, "availableCopies": 99})
    assert book.total_copies == 5
    assert book.available_copies == 4

    CatalogService.update_book(book.id, {"totalCopies": 1})
    assert book.available_copies == 0


def test_update_total_below_copies_on_loan(make_book, alice_id, carol_id, admin, now):
    book = make_book(total=2)
    for who in (alice_id, carol_id):
        loan = LoanService.request_loan(who, book.id, now=now)
        LoanService.approve_loan(admin, loan.id, now=now)

    with pytest.raises(ValidationError):
        CatalogService.update_book(book.id, {"totalCopies": 1, "title": "Renamed"})

    db.session.expire_all()
    book = db.session.get(Book, book.id)
    assert (book.title, book.total_copies, book.available_copies) == ("Dune", 2, 0)


def test_update_descriptive_fields(make_book):
    book = make_book(isbn="111")
    CatalogService.update_book(book.id, {"title": "Dune Messiah", "publisher": "Ace", "isbn": "222"})

    assert book.title == "Dune Messiah"
    assert book.publisher == "Ace"
    assert CatalogService.get_by_isbn("222").id == book.id
    with pytest.raises(NotFound):
        CatalogService.get_by_isbn("111")


def test_delete_refused_with_active_loans(make_book, alice_id):
    book = make_book()
    LoanService.request_loan(alice_id, book.id)

    with pytest.raises(InvalidTransition):
        CatalogService.delete_book(book.id)
    assert Book.query.count() == 1


def test_delete_keeps_loan_history(make_book, alice_id, admin):
    book = make_book()
    loan = LoanService.request_loan(alice_id, book.id)
    LoanService.reject_loan(admin, loan.id)

    CatalogService.delete_book(book.id)

    assert Book.query.count() == 0
    assert loan.book_title == "Dune"
    with pytest.raises(NotFound):
        CatalogService.get_book(book.id)


def test_search_matches_title_author_isbn(make_book):
    make_book("Dune", isbn="9780441172719")
    make_book("Emma")

    assert [b.title for b in CatalogService.search("dUnE")] == ["Dune"]
    assert [b.title for b in CatalogService.search("0441")] == ["Dune"]
    assert len(CatalogService.search("herbert")) == 2
    assert len(CatalogService.search("   ")) == 2
    assert CatalogService.search("tolstoy") == []
