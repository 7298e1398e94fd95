from flask import session
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity, get_jwt


def current_identity():
    """
    (user_id, role) döner; önce session'a, yoksa Authorization: Bearer
    token'a bakar. Giriş yoksa (None, None).
    """
    if session.get("user_id"):
        return int(session["user_id"]), session.get("role")

    verify_jwt_in_request(optional=True)
    identity = get_jwt_identity()
    if identity is not None:
        return int(identity), (get_jwt() or {}).get("role")

    return None, None


def is_admin() -> bool:
    _user_id, role = current_identity()
    return role == "admin"
