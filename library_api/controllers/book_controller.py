# library_api/controllers/book_controller.py

from flask import Blueprint, request, jsonify

from library_api.errors import LibraryError
from library_api.services.book_service import BookService
from library_api.utils.decorators import admin_required
from library_api.utils.responses import iso, library_error

book_bp = Blueprint("books", __name__)


def _book_json(b):
    author = b.author
    genre = b.genre
    return {
        "id": b.id,
        "name": b.name,
        "isbn": b.isbn,
        "summary": b.summary,
        "photo_url": b.photo_url,
        "is_available": bool(b.is_available),
        "author_id": b.author_id,
        "genre_id": b.genre_id,
        "author": {"id": author.id, "name": author.name, "photo_url": author.photo_url} if author else None,
        "genre": {"id": genre.id, "name": genre.name, "slug": genre.slug} if genre else None,
        "created_at": iso(b.created_at),
        "updated_at": iso(b.updated_at),
    }


@book_bp.get("/getAll")
def list_books():
    books = BookService.list_books()
    return jsonify({"success": True, "data": [_book_json(b) for b in books]})


@book_bp.get("/get/<book_id>")
def get_book(book_id):
    try:
        return jsonify({"success": True, "data": _book_json(BookService.get_book(book_id))})
    except LibraryError as e:
        return library_error(e)


@book_bp.get("/search")
def search_books():
    try:
        books = BookService.search_books(request.args.get("query"))
        return jsonify({"success": True, "data": [_book_json(b) for b in books]})
    except LibraryError as e:
        return library_error(e)


@book_bp.post("/add")
@admin_required
def create_book():
    data = request.get_json(silent=True) or {}
    try:
        b = BookService.create_book(data)
        return jsonify({"success": True, "data": _book_json(b)}), 201
    except LibraryError as e:
        return library_error(e)


@book_bp.put("/update/<book_id>")
@admin_required
def update_book(book_id):
    data = request.get_json(silent=True) or {}
    try:
        b = BookService.update_book(book_id, data)
        return jsonify({"success": True, "data": _book_json(b)})
    except LibraryError as e:
        return library_error(e)


@book_bp.delete("/delete/<book_id>")
@admin_required
def delete_book(book_id):
    try:
        BookService.delete_book(book_id)
        return jsonify({"success": True, "message": "Book deleted successfully"})
    except LibraryError as e:
        return library_error(e)
