from flask import jsonify

from library_api.errors import LibraryError


def json_error(message, code=400, kind="error"):
    return jsonify({"success": False, "error": kind, "message": message}), code


def library_error(e: LibraryError):
    return jsonify(e.to_dict()), e.status_code


def iso(value):
    return value.isoformat() if value else None


def money(value):
    return float(value) if value is not None else 0.0
