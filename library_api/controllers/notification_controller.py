from flask import Blueprint, jsonify

from library_api.errors import LibraryError
from library_api.repositories.notification_repo import NotificationRepo
from library_api.services.notification_service import NotificationService
from library_api.utils.decorators import admin_required
from library_api.utils.parsing import parse_id
from library_api.utils.responses import iso, library_error

notif_bp = Blueprint("notifications", __name__)


@notif_bp.post("/run-overdue-check")
@admin_required
def run_overdue_check():
    """Sweep'i elle tetikler (scheduler kapalıyken de çalışır)."""
    try:
        result = NotificationService.check_and_notify_overdue()
    except LibraryError as e:
        return library_error(e)
    return jsonify({"success": True, "message": "Overdue check completed", "data": result})


@notif_bp.get("/borrowal/<borrowal_id>")
@admin_required
def borrowal_notifications(borrowal_id):
    try:
        logs = NotificationRepo.list_for_borrowal(parse_id(borrowal_id, "borrowal id"))
    except LibraryError as e:
        return library_error(e)
    return jsonify({"success": True, "data": [
        {
            "id": n.id,
            "type": n.type,
            "email": n.email,
            "message": n.message,
            "success": n.success,
            "error_message": n.error_message,
            "sent_at": iso(n.sent_at),
        }
        for n in logs
    ]})
