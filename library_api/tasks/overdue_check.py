# library_api/tasks/overdue_check.py
from library_api.errors import LibraryError
from library_api.services.notification_service import NotificationService


def run_overdue_check_job(app):
    """
    Vadesi geçmiş açık ödünçleri overdue olarak işaretler, cezaları günceller
    ve (MAIL_ENABLED ise) üyeye bir kez hatırlatma maili yollar.
    Doğruluk lazy değerlendirmeye dayanır; bu job sadece stored label'ı tazeler.
    """
    with app.app_context():
        try:
            result = NotificationService.check_and_notify_overdue()
        except LibraryError as e:
            app.logger.error(f"[overdue_check] aborted: {e.message}")
            return None

        app.logger.info(
            f"[overdue_check] newly_overdue={result['newly_overdue']} "
            f"mails_sent={result['mails_sent']} mails_failed={result['mails_failed']}"
        )
        return result
