from flask import Blueprint, request, jsonify, session

from library_api.errors import LibraryError
from library_api.controllers.user_controller import user_json
from library_api.models.user import ROLE_MEMBER
from library_api.services.auth_service import AuthService, PROFILE_FIELDS
from library_api.services.user_service import UserService
from library_api.utils.auth import current_identity
from library_api.utils.decorators import login_required
from library_api.utils.responses import json_error, library_error

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/register", endpoint="auth_register")
def register():
    data = request.get_json(silent=True) or {}
    try:
        user = AuthService.register(
            data.get("name"),
            data.get("email"),
            (data.get("password") or "").strip(),
            role=ROLE_MEMBER,  # dışarıdan role alma
            **{k: data[k] for k in PROFILE_FIELDS if k in data},
        )
        return jsonify({"success": True, "data": user_json(user)}), 201
    except LibraryError as e:
        return library_error(e)


@auth_bp.post("/login", endpoint="auth_login")
def login():
    """
    Body: { "email": "...", "password": "..." }
    Başarılı olursa session["user_id"], session["role"] dolar ve API
    istemcileri için access_token döner.
    """
    data = request.get_json(silent=True) or {}
    try:
        token, user = AuthService.login(data.get("email"), data.get("password"))
    except LibraryError as e:
        return json_error(e.message, 401, "unauthorized")

    session.clear()
    session["user_id"] = int(user.id)
    session["role"] = user.role

    return jsonify({"success": True, "access_token": token, "data": user_json(user)})


@auth_bp.get("/logout", endpoint="auth_logout")
def logout():
    session.clear()
    return jsonify({"success": True, "message": "User logged out"})


@auth_bp.get("/me", endpoint="auth_me")
@login_required
def me():
    user_id, _role = current_identity()
    try:
        return jsonify({"success": True, "data": user_json(UserService.get_user(user_id))})
    except LibraryError as e:
        return library_error(e)
