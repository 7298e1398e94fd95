from flask import Blueprint, request, jsonify

from library_api.errors import LibraryError
from library_api.services.borrowal_query_service import BorrowalQueryService, borrowal_json
from library_api.services.borrowal_service import BorrowalService
from library_api.utils.auth import current_identity
from library_api.utils.decorators import admin_required, login_required, self_or_admin
from library_api.utils.responses import json_error, library_error, money

borrowal_bp = Blueprint("borrowal", __name__)


@borrowal_bp.get("/getAll")
@admin_required
def get_all_borrowals():
    try:
        return jsonify({"success": True, "data": BorrowalQueryService.list_all()})
    except LibraryError as e:
        return library_error(e)


@borrowal_bp.get("/get/<borrowal_id>")
@login_required
def get_borrowal(borrowal_id):
    try:
        data = BorrowalQueryService.get(borrowal_id)
    except LibraryError as e:
        return library_error(e)

    # admin değilse kendi kaydı olmalı
    user_id, role = current_identity()
    if role != "admin" and data["member_id"] != user_id:
        return json_error("Forbidden. You can only access your own data.", 403, "forbidden")
    return jsonify({"success": True, "data": data})


@borrowal_bp.post("/add")
@admin_required
def add_borrowal():
    data = request.get_json(silent=True) or {}
    try:
        b = BorrowalService.open_borrowal(
            data.get("book_id"),
            data.get("member_id"),
            status=data.get("status"),
            borrowed_date=data.get("borrowed_date"),
            due_date=data.get("due_date"),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "data": BorrowalQueryService.view(b.id)}), 201
    except LibraryError as e:
        return library_error(e)


@borrowal_bp.put("/update/<borrowal_id>")
@admin_required
def update_borrowal(borrowal_id):
    data = request.get_json(silent=True) or {}
    try:
        b = BorrowalService.update_borrowal(borrowal_id, data)
        return jsonify({"success": True, "data": BorrowalQueryService.view(b.id)})
    except LibraryError as e:
        return library_error(e)


@borrowal_bp.put("/return/<borrowal_id>")
@admin_required
def return_borrowal(borrowal_id):
    try:
        b, fine, message = BorrowalService.return_borrowal(borrowal_id)
        return jsonify({
            "success": True,
            "message": message,
            "data": BorrowalQueryService.view(b.id),
            "fine": money(fine),
        })
    except LibraryError as e:
        return library_error(e)


@borrowal_bp.delete("/delete/<borrowal_id>")
@admin_required
def delete_borrowal(borrowal_id):
    try:
        b = BorrowalService.delete_borrowal(borrowal_id)
        return jsonify({
            "success": True,
            "message": "Borrowal deleted successfully",
            "data": borrowal_json(b),
        })
    except LibraryError as e:
        return library_error(e)


@borrowal_bp.get("/member/<member_id>")
@self_or_admin("member_id")
def member_borrowals(member_id):
    try:
        return jsonify({"success": True, "data": BorrowalQueryService.list_by_member(member_id)})
    except LibraryError as e:
        return library_error(e)


@borrowal_bp.get("/overdue")
@admin_required
def overdue_borrowals():
    try:
        return jsonify({"success": True, "data": BorrowalQueryService.list_overdue()})
    except LibraryError as e:
        return library_error(e)


@borrowal_bp.get("/stats")
@admin_required
def borrowal_stats():
    try:
        return jsonify({"success": True, "data": BorrowalQueryService.stats()})
    except LibraryError as e:
        return library_error(e)
