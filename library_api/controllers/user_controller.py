from flask import Blueprint, request, jsonify

from library_api.errors import LibraryError
from library_api.services.user_service import UserService
from library_api.utils.auth import is_admin
from library_api.utils.decorators import admin_required, login_required, self_or_admin
from library_api.utils.responses import iso, library_error

user_bp = Blueprint("users", __name__)


def user_json(u):
    # password_hash asla dönmez
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "phone": u.phone,
        "nic": u.nic,
        "address": u.address,
        "occupation": u.occupation,
        "photo_url": u.photo_url,
        "created_at": iso(u.created_at),
    }


@user_bp.get("/getAll")
@admin_required
def list_users():
    return jsonify({"success": True, "data": [user_json(u) for u in UserService.list_users()]})


@user_bp.get("/getAllMembers")
@login_required
def list_members():
    return jsonify({"success": True, "data": [user_json(u) for u in UserService.list_members()]})


@user_bp.get("/get/<user_id>")
@self_or_admin("user_id")
def get_user(user_id):
    try:
        return jsonify({"success": True, "data": user_json(UserService.get_user(user_id))})
    except LibraryError as e:
        return library_error(e)


@user_bp.post("/add")
@admin_required
def create_user():
    data = request.get_json(silent=True) or {}
    try:
        return jsonify({"success": True, "data": user_json(UserService.create_user(data))}), 201
    except LibraryError as e:
        return library_error(e)


@user_bp.put("/update/<user_id>")
@self_or_admin("user_id")
def update_user(user_id):
    data = request.get_json(silent=True) or {}
    try:
        u = UserService.update_user(user_id, data, acting_as_admin=is_admin())
        return jsonify({"success": True, "data": user_json(u)})
    except LibraryError as e:
        return library_error(e)


@user_bp.delete("/delete/<user_id>")
@self_or_admin("user_id")
def delete_user(user_id):
    try:
        UserService.delete_user(user_id)
        return jsonify({"success": True, "message": "User deleted successfully"})
    except LibraryError as e:
        return library_error(e)
