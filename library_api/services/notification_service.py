from flask import current_app

from library_api.repositories.borrowal_repo import BorrowalRepo
from library_api.repositories.notification_repo import NotificationRepo
from library_api.services.borrowal_service import BorrowalService
from library_api.services.mail_service import MailService
from library_api.utils.transaction import atomic


class NotificationService:
    @staticmethod
    def check_and_notify_overdue():
        """
        Reconcile pass + overdue hatırlatma mailleri.
        return: {"newly_overdue": n, "mails_sent": n, "mails_failed": n}
        """
        newly_overdue = BorrowalService.reconcile_overdue()

        sent = 0
        failed = 0
        if current_app.config.get("MAIL_ENABLED"):
            with atomic("notification.overdue"):
                for borrowal, book, _author, member in BorrowalRepo.list_overdue_joined():
                    # daha önce başarılı mail atıldı mı?
                    if NotificationRepo.already_sent(borrowal.id):
                        continue
                    if MailService.send_overdue_mail(borrowal, member, book):
                        sent += 1
                    else:
                        failed += 1

        return {"newly_overdue": len(newly_overdue), "mails_sent": sent, "mails_failed": failed}
