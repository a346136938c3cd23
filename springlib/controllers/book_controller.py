from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from springlib.errors import LibraryError
from springlib.models.user import Role
from springlib.services.catalog_service import CatalogService
from springlib.services.fleet_view import FleetView
from springlib.utils.auth import optional_identity
from springlib.utils.decorators import role_required
from springlib.utils.responses import api_error, api_response
from springlib.utils.serializers import book_json

book_bp = Blueprint("books", __name__)


def _books_payload(books):
    # members also get their own loan state per book
    identity = optional_identity()
    if identity is None or not identity.is_member:
        return [book_json(b) for b in books]
    states = FleetView.book_states_for(identity.user_id, books)
    return [book_json(b, states.get(b.id)) for b in books]


@book_bp.get("")
@jwt_required(optional=True)
def list_books():
    try:
        return api_response(_books_payload(CatalogService.list_books()))
    except LibraryError as e:
        return api_error(e)


@book_bp.get("/search")
@jwt_required(optional=True)
def search_books():
    query = request.args.get("query", "")
    try:
        books = CatalogService.search(query)
        return api_response(_books_payload(books), f"Found {len(books)} books")
    except LibraryError as e:
        return api_error(e)


@book_bp.get("/<int:book_id>")
@jwt_required(optional=True)
def get_book(book_id: int):
    try:
        return api_response(_books_payload([CatalogService.get_book(book_id)])[0])
    except LibraryError as e:
        return api_error(e)


@book_bp.get("/isbn/<string:isbn>")
@jwt_required(optional=True)
def get_book_by_isbn(isbn: str):
    try:
        return api_response(_books_payload([CatalogService.get_by_isbn(isbn)])[0])
    except LibraryError as e:
        return api_error(e)


@book_bp.post("")
@role_required(Role.ADMIN)
def create_book():
    data = request.get_json(silent=True) or {}
    try:
        b = CatalogService.create_book(data)
        return api_response(book_json(b), "Book created successfully", 201)
    except LibraryError as e:
        return api_error(e)


@book_bp.put("/<int:book_id>")
@role_required(Role.ADMIN)
def update_book(book_id: int):
    data = request.get_json(silent=True) or {}
    try:
        b = CatalogService.update_book(book_id, data)
        return api_response(book_json(b), "Book updated successfully")
    except LibraryError as e:
        return api_error(e)


@book_bp.delete("/<int:book_id>")
@role_required(Role.ADMIN)
def delete_book(book_id: int):
    try:
        CatalogService.delete_book(book_id)
        return api_response(None, "Book deleted successfully")
    except LibraryError as e:
        return api_error(e)
