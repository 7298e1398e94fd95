# library_api/services/mail_service.py
from __future__ import annotations

from flask import current_app
from flask_mail import Message

from library_api.extensions import mail
from library_api.models.notification_log import NotificationLog, TYPE_OVERDUE_MAIL
from library_api.repositories.notification_repo import NotificationRepo
from library_api.utils.clock import utcnow


def overdue_message(borrowal, member, book) -> tuple[str, str]:
    """return: (subject, body)"""
    name = getattr(member, "name", None) or "Member"
    book_name = getattr(book, "name", None) or f"Book #{borrowal.book_id}"
    body = (
        f"Hello {name},\n\n"
        f"The due date for '{book_name}' has passed.\n"
        f"Due date: {borrowal.due_date:%Y-%m-%d}\n"
        f"Current fine: ${borrowal.fine}\n\n"
        "Please return it as soon as possible.\n"
    )
    return "Library: overdue book reminder", body


class MailService:
    @staticmethod
    def send_email(to_email: str, subject: str, body: str) -> tuple[bool, str | None]:
        """
        return: (success, error_text)
        """
        try:
            mail.send(Message(subject=subject, recipients=[to_email], body=body))
        except Exception as e:
            # SMTP hataları sweep'i durdurmamalı; log'a düşer
            current_app.logger.warning(f"[MailService] mail to {to_email} failed: {e}")
            return False, str(e)
        return True, None

    @staticmethod
    def log_notification(borrowal_id, notif_type, to_email, message, success, error=None) -> NotificationLog:
        return NotificationRepo.log(NotificationLog(
            borrowal_id=borrowal_id,
            type=notif_type,
            email=to_email,
            message=message,
            success=bool(success),
            error_message=error,
            sent_at=utcnow(),
        ))

    @staticmethod
    def send_overdue_mail(borrowal, member, book) -> bool:
        """
        Gecikme maili yollar ve sonucu notification_logs'a yazar.
        Commit çağıranın atomic bloğunda yapılır.
        """
        to_email = getattr(member, "email", None)
        if to_email:
            subject, body = overdue_message(borrowal, member, book)
            ok, err = MailService.send_email(to_email, subject, body)
            note = "Mail sent" if ok else "Mail could not be sent"
        else:
            ok, err, note = False, "missing_email", "Member email not found"

        MailService.log_notification(borrowal.id, TYPE_OVERDUE_MAIL, to_email, note, ok, err)
        return ok
