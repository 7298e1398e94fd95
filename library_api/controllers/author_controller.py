from flask import Blueprint, request, jsonify

from library_api.errors import LibraryError
from library_api.services.author_service import AuthorService
from library_api.utils.decorators import admin_required
from library_api.utils.responses import iso, library_error

author_bp = Blueprint("authors", __name__)


def _author_json(a):
    return {
        "id": a.id,
        "name": a.name,
        "description": a.description,
        "photo_url": a.photo_url,
        "created_at": iso(a.created_at),
        "updated_at": iso(a.updated_at),
    }


@author_bp.get("/getAll")
def list_authors():
    return jsonify({"success": True, "data": [_author_json(a) for a in AuthorService.list_authors()]})


@author_bp.get("/get/<author_id>")
def get_author(author_id):
    try:
        return jsonify({"success": True, "data": _author_json(AuthorService.get_author(author_id))})
    except LibraryError as e:
        return library_error(e)


@author_bp.post("/add")
@admin_required
def create_author():
    data = request.get_json(silent=True) or {}
    try:
        return jsonify({"success": True, "data": _author_json(AuthorService.create_author(data))}), 201
    except LibraryError as e:
        return library_error(e)


@author_bp.put("/update/<author_id>")
@admin_required
def update_author(author_id):
    data = request.get_json(silent=True) or {}
    try:
        return jsonify({"success": True, "data": _author_json(AuthorService.update_author(author_id, data))})
    except LibraryError as e:
        return library_error(e)


@author_bp.delete("/delete/<author_id>")
@admin_required
def delete_author(author_id):
    try:
        AuthorService.delete_author(author_id)
        return jsonify({"success": True, "message": "Author deleted successfully"})
    except LibraryError as e:
        return library_error(e)
