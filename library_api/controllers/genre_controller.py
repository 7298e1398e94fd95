from flask import Blueprint, request, jsonify

from library_api.errors import LibraryError
from library_api.services.genre_service import GenreService
from library_api.utils.decorators import admin_required
from library_api.utils.responses import iso, library_error

genre_bp = Blueprint("genres", __name__)


def _genre_json(g, book_count=None):
    data = {
        "id": g.id,
        "name": g.name,
        "description": g.description,
        "slug": g.slug,
        "created_at": iso(g.created_at),
        "updated_at": iso(g.updated_at),
    }
    if book_count is not None:
        data["book_count"] = int(book_count)
    return data


@genre_bp.get("/getAll")
def list_genres():
    return jsonify({"success": True, "data": [
        _genre_json(g, count) for g, count in GenreService.list_genres()
    ]})


@genre_bp.get("/get/<genre_id>")
def get_genre(genre_id):
    try:
        g = GenreService.get_genre(genre_id)
        return jsonify({"success": True, "data": _genre_json(g, GenreService.book_count(g))})
    except LibraryError as e:
        return library_error(e)


@genre_bp.get("/get/<genre_id>/books")
def genre_books(genre_id):
    try:
        g, books = GenreService.books_of(genre_id)
        return jsonify({"success": True, "data": {
            "genre": _genre_json(g, len(books)),
            "books": [
                {"id": b.id, "name": b.name, "isbn": b.isbn, "is_available": bool(b.is_available)}
                for b in books
            ],
        }})
    except LibraryError as e:
        return library_error(e)


@genre_bp.post("/add")
@admin_required
def create_genre():
    data = request.get_json(silent=True) or {}
    try:
        return jsonify({"success": True, "data": _genre_json(GenreService.create_genre(data), 0)}), 201
    except LibraryError as e:
        return library_error(e)


@genre_bp.put("/update/<genre_id>")
@admin_required
def update_genre(genre_id):
    data = request.get_json(silent=True) or {}
    try:
        return jsonify({"success": True, "data": _genre_json(GenreService.update_genre(genre_id, data))})
    except LibraryError as e:
        return library_error(e)


@genre_bp.delete("/delete/<genre_id>")
@admin_required
def delete_genre(genre_id):
    try:
        GenreService.delete_genre(genre_id)
        return jsonify({"success": True, "message": "Genre deleted successfully"})
    except LibraryError as e:
        return library_error(e)
