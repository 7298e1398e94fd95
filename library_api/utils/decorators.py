from functools import wraps

from library_api.utils.auth import current_identity
from library_api.utils.responses import json_error


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        user_id, _role = current_identity()
        if user_id is None:
            return json_error("Unauthorized. Please log in.", 401, "unauthorized")
        return view(*args, **kwargs)
    return wrapped


def role_required(*roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user_id, role = current_identity()
            if user_id is None:
                return json_error("Unauthorized. Please log in.", 401, "unauthorized")
            if role not in roles:
                return json_error("Forbidden. Admin access required.", 403, "forbidden")
            return fn(*args, **kwargs)
        return wrapper
    return decorator


admin_required = role_required("admin")


def self_or_admin(param="user_id"):
    """Route'taki kullanıcı id'si oturumdaki kullanıcıyla aynı olmalı (admin hariç)."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user_id, role = current_identity()
            if user_id is None:
                return json_error("Unauthorized. Please log in.", 401, "unauthorized")
            if role != "admin" and str(kwargs.get(param)) != str(user_id):
                return json_error("Forbidden. You can only access your own data.", 403, "forbidden")
            return fn(*args, **kwargs)
        return wrapper
    return decorator
