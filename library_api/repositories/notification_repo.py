from library_api.extensions import db
from library_api.models.notification_log import NotificationLog, TYPE_OVERDUE_MAIL


class NotificationRepo:
    @staticmethod
    def already_sent(borrowal_id: int, notif_type: str = TYPE_OVERDUE_MAIL) -> bool:
        # başarısız denemeler bir sonraki sweep'te tekrar denenir
        q = NotificationLog.query.filter_by(borrowal_id=borrowal_id, type=notif_type, success=True)
        return db.session.query(q.exists()).scalar()

    @staticmethod
    def log(entry: NotificationLog):
        db.session.add(entry)
        return entry

    @staticmethod
    def list_for_borrowal(borrowal_id: int):
        return (
            NotificationLog.query
            .filter_by(borrowal_id=borrowal_id)
            .order_by(NotificationLog.sent_at.desc(), NotificationLog.id.desc())
            .all()
        )
